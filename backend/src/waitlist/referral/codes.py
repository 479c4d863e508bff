"""Referral code generation and sharing links."""

import re
import secrets
import string
import time
from datetime import datetime
from urllib.parse import urlencode

from waitlist.settings import settings

CODE_ALPHABET = string.ascii_uppercase + string.digits
MAX_CODE_LENGTH = 12
PREFIX_LENGTH = 4
RANDOM_LENGTH = 4

_BASE36_DIGITS = string.digits + string.ascii_uppercase
_NON_CODE_CHARS = re.compile(r"[^A-Z0-9]")


def to_base36(number: int) -> str:
    """Encode a non-negative integer in uppercase base 36."""
    if number < 0:
        raise ValueError(f"Cannot encode negative number: {number}")
    if number == 0:
        return "0"

    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def generate_referral_code(email: str, now: datetime | None = None) -> str:
    """Generate a short, human-copyable referral code.

    Format: up to 4 chars of the email's local part, 4 random chars, then
    the signup time in base 36, cut to 12 characters. For example
    ``jane@uni.edu`` -> ``JANE7QX2MF3K``.

    Codes are not checked for uniqueness; collisions are rare but possible.

    Args:
        email: Signup email (assumed to contain "@")
        now: Signup time (defaults to the current time)

    Returns:
        Code of at most 12 uppercase letters and digits
    """
    local_part = email.split("@")[0]
    prefix = _NON_CODE_CHARS.sub("", local_part.upper())[:PREFIX_LENGTH]

    random_part = "".join(secrets.choice(CODE_ALPHABET) for _ in range(RANDOM_LENGTH))

    millis = int(now.timestamp() * 1000) if now else time.time_ns() // 1_000_000
    time_part = to_base36(millis)

    return f"{prefix}{random_part}{time_part}"[:MAX_CODE_LENGTH]


def build_referral_link(code: str, site_url: str | None = None) -> str:
    """Shareable link that attributes new signups to ``code``."""
    base = (site_url or settings.site_url).rstrip("/")
    return f"{base}/?{urlencode({'ref': code})}"
