"""Wire models for the hosted form service."""

import json

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RawSubmission(BaseModel):
    """One stored form submission, as returned by the service.

    ``submitted_data`` is itself a serialized JSON record; it is kept opaque
    here and decoded by the referral parser.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    submission_id: str = ""
    submitted_data: str = ""
    created_at: str = ""

    @field_validator("submission_id", "created_at", "submitted_data", mode="before")
    @classmethod
    def _coerce_str(cls, value):
        if value is None:
            return ""
        if isinstance(value, (int, float)):
            return str(value)
        if isinstance(value, (dict, list)):
            return json.dumps(value)
        return value


class SubmissionPage(BaseModel):
    """The ``submissions`` object of the envelope."""

    model_config = ConfigDict(extra="ignore")

    data: list[RawSubmission] = Field(default_factory=list)


class SubmissionEnvelope(BaseModel):
    """Top-level response of the submissions endpoint."""

    model_config = ConfigDict(extra="ignore")

    status: str
    submissions: SubmissionPage
