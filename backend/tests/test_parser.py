"""Tests for submission payload parsing."""

import json
from datetime import datetime, timezone

import pytest

from waitlist.referral.parser import (
    extract_email,
    parse_submission,
    parse_submissions,
    parse_timestamp,
)
from waitlist.submissions.models import RawSubmission


def _raw(payload, created_at="2025-03-01 09:00:00") -> RawSubmission:
    data = payload if isinstance(payload, str) else json.dumps(payload)
    return RawSubmission(submission_id="1", submitted_data=data, created_at=created_at)


def test_parse_full_record():
    parsed = parse_submission(_raw({
        "name": "Jane",
        "email": "jane@uni.edu",
        "referral_code": "JANE1234",
        "referred_by": "BOB5678",
    }))

    assert parsed.name == "Jane"
    assert parsed.email == "jane@uni.edu"
    assert parsed.referral_code == "JANE1234"
    assert parsed.referred_by == "BOB5678"
    assert parsed.timestamp == datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


def test_missing_fields_get_defaults():
    parsed = parse_submission(_raw({}))

    assert parsed.name == "Unknown"
    assert parsed.email == "Unknown"
    assert parsed.referral_code == ""
    assert parsed.referred_by == ""


def test_null_and_blank_fields_get_defaults():
    parsed = parse_submission(_raw({"name": None, "email": "  ", "referral_code": None}))

    assert parsed.name == "Unknown"
    assert parsed.email == "Unknown"
    assert parsed.referral_code == ""


def test_codes_are_stripped_and_scalars_stringified():
    parsed = parse_submission(_raw({"referral_code": " ABC1 ", "referred_by": 42}))

    assert parsed.referral_code == "ABC1"
    assert parsed.referred_by == "42"


@pytest.mark.parametrize("payload", ["not json", "", "[1, 2]", '"just a string"', "null", "{broken"])
def test_non_object_payload_is_dropped(payload):
    assert parse_submission(_raw(payload)) is None


def test_deeply_nested_payload_is_dropped():
    assert parse_submission(_raw("[" * 100000)) is None
    assert extract_email(_raw("[" * 100000)) is None


def test_parse_submissions_keeps_order_and_drops_bad():
    raws = [_raw({"name": "First"}), _raw("garbage"), _raw({"name": "Second"})]

    assert [p.name for p in parse_submissions(raws)] == ["First", "Second"]


def test_object_payload_from_service_is_accepted():
    raw = RawSubmission.model_validate({
        "submission_id": 7,
        "submitted_data": {"name": "Inline", "referral_code": "INL1"},
        "created_at": "2025-03-01T09:00:00Z",
    })

    parsed = parse_submission(raw)

    assert raw.submission_id == "7"
    assert parsed.name == "Inline"
    assert parsed.referral_code == "INL1"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2025-03-01 09:30:00", datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)),
        ("2025-03-01T09:30:00Z", datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)),
        ("2025-03-01T11:30:00+02:00", datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)),
        ("1740821400", datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)),
    ],
)
def test_parse_timestamp_formats(value, expected):
    assert parse_timestamp(value) == expected


@pytest.mark.parametrize("value", ["", None, "yesterday", "2025-13-45 99:99:99"])
def test_parse_timestamp_rejects_garbage(value):
    assert parse_timestamp(value) is None


def test_extract_email_lowercases():
    assert extract_email(_raw({"email": " Jane@Uni.EDU "})) == "jane@uni.edu"


def test_extract_email_absent_or_unparseable():
    assert extract_email(_raw({"name": "No Email"})) is None
    assert extract_email(_raw({"email": 12})) is None
    assert extract_email(_raw("garbage")) is None
