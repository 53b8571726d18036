"""Shared validation utilities"""

import calendar
import re
from datetime import date, datetime
from typing import Optional

from .errors import ValidationError

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
YEAR_MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


def parse_date(value: str, field: str = "date") -> date:
    """
    Parse a strict YYYY-MM-DD calendar date.

    Raises:
        ValidationError: If the value is missing, malformed or not a real date
    """
    if not value or not DATE_PATTERN.match(value):
        raise ValidationError(f"Invalid {field}: expected YYYY-MM-DD")
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as e:
        raise ValidationError(f"Invalid {field}: {value} is not a calendar date") from e


def parse_optional_date(value: Optional[str], field: str = "date") -> Optional[date]:
    if value is None or value == "":
        return None
    return parse_date(value, field)


def parse_date_range(start: Optional[str], end: Optional[str], max_days: Optional[int] = None) -> tuple[date, date]:
    """Parse an inclusive [start, end] range, both bounds required"""
    if not start or not end:
        raise ValidationError("Start and end dates required")

    start_date = parse_date(start, "start")
    end_date = parse_date(end, "end")
    if end_date < start_date:
        raise ValidationError("End date must not be before start date")
    if max_days is not None and (end_date - start_date).days + 1 > max_days:
        raise ValidationError(f"Date range too large: at most {max_days} days allowed")
    return start_date, end_date


def parse_time(value: Optional[str], field: str = "time") -> Optional[str]:
    """Validate an optional HH:MM clock time; empty means no time"""
    if value is None or value == "":
        return None
    if not TIME_PATTERN.match(value):
        raise ValidationError(f"Invalid {field}: expected HH:MM")
    return value


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Normalize a phone number: keep a leading + and digits only.

    Raises:
        ValueError: If fewer than 5 or more than 15 digits remain
    """
    if not phone:
        return phone

    digits = re.sub(r"\D", "", phone)
    if not 5 <= len(digits) <= 15:
        raise ValueError("Phone number must contain between 5 and 15 digits")

    return f"+{digits}" if phone.strip().startswith("+") else digits


def parse_year_month(value: str) -> tuple[int, int]:
    """Parse YYYY-MM into (year, month)"""
    match = YEAR_MONTH_PATTERN.match(value or "")
    if not match:
        raise ValidationError("Invalid month: expected YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValidationError("Invalid month: expected YYYY-MM")
    return year, month


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of a month"""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)
