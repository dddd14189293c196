import os
import re
from datetime import date, datetime
from typing import List, Optional

import pytz

from helpers.errors import FieldError, ValidationError, field_error

TIME_PATTERN = re.compile(r"^([01][0-9]|2[0-3]):([0-5][0-9])$")
DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


def clinic_today() -> date:
    tz = pytz.timezone(os.getenv("CLINIC_TIMEZONE", "UTC"))
    return datetime.now(tz).date()


def parse_date(value: str) -> Optional[date]:
    """Strict YYYY-MM-DD parse, None when the string is not a real calendar date."""
    if not isinstance(value, str) or not DATE_PATTERN.match(value.strip()):
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def is_valid_time(value: str) -> bool:
    return isinstance(value, str) and bool(TIME_PATTERN.match(value))


def check_date(value: str, errors: List[FieldError], field: str = "date", allow_past: bool = False) -> Optional[date]:
    parsed = parse_date(value)
    if parsed is None:
        errors.append(field_error(field, "Invalid date format. Please use YYYY-MM-DD (e.g., 2025-06-10)."))
        return None
    if not allow_past and parsed < clinic_today():
        errors.append(field_error(field, "Cannot book appointments for past dates. Please select a future date."))
        return None
    return parsed


def check_time(value: str, errors: List[FieldError], field: str = "time") -> Optional[str]:
    value = value.strip() if isinstance(value, str) else value
    if not is_valid_time(value):
        errors.append(field_error(field, "Invalid time format. Please use HH:MM (24-hour format), e.g., 09:00 or 14:30."))
        return None
    return value


def check_text(value: str, errors: List[FieldError], field: str, label: str) -> Optional[str]:
    value = value.strip() if isinstance(value, str) else ""
    if not value:
        errors.append(field_error(field, f"{label} is required and cannot be empty."))
        return None
    return value


def parse_query_date(value: str, field: str = "date") -> date:
    errors: List[FieldError] = []
    parsed = check_date(value, errors, field=field, allow_past=True)
    if errors:
        raise ValidationError(errors)
    return parsed


def split_lines(value: Optional[str]) -> List[str]:
    """Multi-line form input to a list, trimmed, blanks dropped."""
    if not value:
        return []
    return [line.strip() for line in value.splitlines() if line.strip()]
