"""
PIM Backend — Field Format Rules
=================================

What:  Format checks shared by the Pydantic schemas and the services:
       email and phone patterns plus string normalisation helpers.
How:   Plain functions returning the normalised value or raising ValueError.
       Inside a Pydantic validator the ValueError becomes a request
       validation error (400); services call them the same way.

Email rule:
    local@domain.tld, no whitespace, exactly one '@', TLD of 2+ chars.
    Compared case-insensitively; stored lower-cased.

Phone rule:
    7-20 characters drawn from digits, spaces, parentheses, '.', '-',
    optional leading '+', and at least 7 digits overall.
"""

import re
from typing import Optional

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]{2,}$", re.IGNORECASE)
PHONE_PATTERN = re.compile(r"^\+?[0-9()\s.\-]{7,20}$")
MIN_PHONE_DIGITS = 7


def blank_to_none(value: Optional[str]) -> Optional[str]:
    """Trims a string; empty or whitespace-only becomes None."""
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email.strip()))


def is_valid_phone(phone: str) -> bool:
    trimmed = phone.strip()
    digits = sum(ch.isdigit() for ch in trimmed)
    if digits < MIN_PHONE_DIGITS:
        return False
    return bool(PHONE_PATTERN.match(trimmed))


def normalize_email(value: Optional[str]) -> Optional[str]:
    """Trims and lower-cases an email; raises ValueError when malformed."""
    email = blank_to_none(value)
    if email is None:
        return None
    if not is_valid_email(email):
        raise ValueError("Invalid email format")
    return email.lower()


def normalize_phone(value: Optional[str]) -> Optional[str]:
    """Trims a phone number; raises ValueError when malformed."""
    phone = blank_to_none(value)
    if phone is None:
        return None
    if not is_valid_phone(phone):
        raise ValueError("Invalid phone format")
    return phone
