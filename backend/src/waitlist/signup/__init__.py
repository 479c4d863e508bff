"""Waitlist signup: duplicate check, referral code, hosted form post."""

from waitlist.signup.service import WaitlistService

__all__ = ["WaitlistService"]
