"""Submission store integration.

Reads the full submission set from the hosted form service and posts new
signups to it.
"""

from waitlist.submissions.client import SubmissionClient
from waitlist.submissions.models import RawSubmission, SubmissionEnvelope

__all__ = ["RawSubmission", "SubmissionClient", "SubmissionEnvelope"]
