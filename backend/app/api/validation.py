"""
Query/path parameter checks shared by the endpoint modules.

All failures raise ValidationError (400) before any upstream call is made.
"""

import re
from datetime import date, datetime, timezone
from typing import Optional

from app.core.errors import ValidationError

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
NEO_ID_RE = re.compile(r"^\d+$")
EPIC_IMAGE_RE = re.compile(r"^epic_\d+_\d{14}$")


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def parse_date(value: str, field: str = "date") -> date:
    if not DATE_RE.match(value):
        raise ValidationError(f"Invalid {field} format. Use YYYY-MM-DD.")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid {field} format. Use YYYY-MM-DD.")


def parse_optional_date(value: Optional[str], field: str = "date") -> Optional[date]:
    if not value:
        return None
    return parse_date(value, field)


def ensure_not_future(day: date, message: str = "Date cannot be in the future.") -> None:
    if day > utc_today():
        raise ValidationError(message)


def validate_range(start: date, end: date, max_days: int, label: str = "",
                   future_message: str = "end_date cannot be in the future.") -> int:
    """Check start <= end <= today and the span limit; returns the span in days."""
    if start > end:
        raise ValidationError("start_date must be before end_date.")
    if end > utc_today():
        raise ValidationError(future_message)
    days = (end - start).days
    if days > max_days:
        suffix = f" for {label}" if label else ""
        raise ValidationError(f"Date range cannot exceed {max_days} days{suffix}.")
    return days


def ensure_between(value: int, low: int, high: Optional[int], message: str) -> int:
    if value < low or (high is not None and value > high):
        raise ValidationError(message)
    return value
