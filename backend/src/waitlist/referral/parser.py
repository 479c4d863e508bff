"""Decoding of submission payloads into referral records."""

import json
from datetime import datetime, timezone
from typing import Any, Iterable

from waitlist.logging_config import get_logger
from waitlist.referral.models import UNKNOWN, ParsedSubmission
from waitlist.submissions.models import RawSubmission

logger = get_logger(__name__)

# Formats seen in the form service's created_at, besides ISO-8601
_TIMESTAMP_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M", "%d/%m/%Y %H:%M:%S")


def _decode_payload(raw: RawSubmission) -> dict[str, Any] | None:
    """Decode submitted_data into a mapping, or None if it is not one."""
    try:
        data = json.loads(raw.submitted_data)
    # Deeply nested input exhausts the decoder's recursion limit
    except (TypeError, ValueError, RecursionError):
        return None

    if not isinstance(data, dict):
        return None
    return data


def _text(data: dict[str, Any], key: str, default: str) -> str:
    value = data.get(key)
    if value is None or isinstance(value, (dict, list)):
        return default
    value = str(value).strip()
    return value or default


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a created_at value into an aware datetime.

    Naive timestamps are taken as UTC. Numeric strings are epoch seconds.

    Args:
        value: Raw created_at string

    Returns:
        Aware datetime, or None if unparseable
    """
    if not value:
        return None

    value = value.strip()

    parsed = None
    if value.replace(".", "", 1).isdigit():
        try:
            return datetime.fromtimestamp(float(value), tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        for fmt in _TIMESTAMP_FORMATS:
            try:
                parsed = datetime.strptime(value, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_submission(raw: RawSubmission) -> ParsedSubmission | None:
    """Parse one raw submission.

    Missing name/email become "Unknown"; missing codes become "".
    A payload that is not a JSON object yields None.

    Args:
        raw: Submission as returned by the form service

    Returns:
        ParsedSubmission, or None if the payload is unparseable
    """
    data = _decode_payload(raw)
    if data is None:
        logger.warning(
            "submission_payload_unparseable",
            submission_id=raw.submission_id,
        )
        return None

    return ParsedSubmission(
        name=_text(data, "name", UNKNOWN),
        email=_text(data, "email", UNKNOWN),
        referral_code=_text(data, "referral_code", ""),
        referred_by=_text(data, "referred_by", ""),
        timestamp=parse_timestamp(raw.created_at),
    )


def parse_submissions(raws: Iterable[RawSubmission]) -> list[ParsedSubmission]:
    """Parse submissions in input order, dropping unparseable ones."""
    parsed = []
    for raw in raws:
        submission = parse_submission(raw)
        if submission is not None:
            parsed.append(submission)
    return parsed


def extract_email(raw: RawSubmission) -> str | None:
    """Lower-cased email of a submission, or None if absent or unparseable."""
    data = _decode_payload(raw)
    if data is None:
        return None

    email = data.get("email")
    if not isinstance(email, str) or not email.strip():
        return None
    return email.strip().lower()
