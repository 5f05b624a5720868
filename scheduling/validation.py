"""
Form-level validation for class scheduling input.

Each check returns an error message or None so callers can collect errors per
field instead of stopping at the first one.
"""

from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional

from django.utils import timezone


MIN_CLASS_MINUTES = 15
MAX_CLASS_MINUTES = 240
MAX_CLASS_CAPACITY = 200
PAST_TOLERANCE = timedelta(minutes=5)


def validate_class_time(
    start_time: datetime,
    end_time: datetime,
    now: Optional[datetime] = None
) -> Optional[str]:
    """Validate a class window: not in the past, ordered, sensible duration."""
    now = now or timezone.now()

    if start_time < now - PAST_TOLERANCE:
        return "Class cannot start in the past"

    if end_time <= start_time:
        return "End time must be after start time"

    duration_minutes = (end_time - start_time).total_seconds() / 60

    if duration_minutes < MIN_CLASS_MINUTES:
        return f"Class must last at least {MIN_CLASS_MINUTES} minutes"

    if duration_minutes > MAX_CLASS_MINUTES:
        return f"Class cannot last more than {MAX_CLASS_MINUTES // 60} hours"

    return None


def validate_class_capacity(
    capacity: int,
    location_capacity: Optional[int] = None
) -> Optional[str]:
    if capacity < 1:
        return "Capacity must be at least 1"

    if capacity > MAX_CLASS_CAPACITY:
        return f"Capacity cannot exceed {MAX_CLASS_CAPACITY}"

    if location_capacity and capacity > location_capacity:
        return f"Capacity exceeds location limit ({location_capacity})"

    return None


def validate_class_form(
    title: str,
    class_type_id,
    location_id,
    capacity: int,
    start_date: Optional[date],
    start_time: Optional[time],
    end_time: Optional[time],
    recurrence_type: Optional[str] = None,
    recurrence_days: Optional[List[int]] = None,
    location_capacity: Optional[int] = None,
    now: Optional[datetime] = None
) -> Dict[str, str]:
    """
    Validate a whole class form.

    Returns:
        Dict mapping field name to error message; empty when the form is valid.
    """
    errors = {}

    if not (title or '').strip():
        errors['title'] = "Title is required"

    if not class_type_id:
        errors['class_type_id'] = "Class type is required"

    if not location_id:
        errors['location_id'] = "Location is required"

    if not start_date:
        errors['start_date'] = "Start date is required"

    capacity_error = validate_class_capacity(capacity, location_capacity)
    if capacity_error:
        errors['capacity'] = capacity_error

    if start_date and start_time and end_time:
        time_error = validate_class_time(
            datetime.combine(start_date, start_time),
            datetime.combine(start_date, end_time),
            now=now
        )
        if time_error:
            errors['time'] = time_error

    if recurrence_type == 'weekly' and not recurrence_days:
        errors['recurrence_days'] = "Select at least one weekday"

    return errors
