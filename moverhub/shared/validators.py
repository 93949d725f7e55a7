"""Shared validation utilities"""

import re
from datetime import date
from typing import Optional

from ..models import TIME_SLOTS

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def normalize_us_phone(phone: Optional[str]) -> Optional[str]:
    """
    Normalize a phone number to E.164 (+1XXXXXXXXXX) when it is a US number.

    Numbers that are not 10 US digits are returned stripped but otherwise
    untouched; contact phones on reservations are informational.
    """
    if not phone:
        return phone

    digits = re.sub(r"\D", "", phone)
    if digits.startswith("1") and len(digits) == 11:
        digits = digits[1:]
    if len(digits) == 10:
        return f"+1{digits}"
    return phone.strip()


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase email address, or the falsy input unchanged

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")
    return email


def validate_time_slot(value: str) -> str:
    value = (value or "").strip().lower()
    if value not in TIME_SLOTS:
        raise ValueError(f"timeSlot must be one of: {', '.join(TIME_SLOTS)}")
    return value


def weekday_of(day: date) -> int:
    """Weekday with Sunday = 0 ... Saturday = 6"""
    return (day.weekday() + 1) % 7
