"""
Service layer for class scheduling business logic.

Series creation expands a recurrence pattern into candidate classes, checks
each candidate against location and coach availability, and persists only the
candidates that are free. Conflicts are returned as values, never raised.
"""

import calendar
import logging
from typing import List, Optional
from datetime import datetime, date, timedelta

from django.conf import settings
from django.db import transaction

from .availability import AvailabilityChecker, default_checker
from .models import ClassSeries, GymClass
from .types import (
    DEFAULT_HORIZON_MONTHS,
    DEFAULT_MAX_OCCURRENCES,
    DELETE_ALL,
    DELETE_OPTIONS,
    RECURRENCE_DAILY,
    RECURRENCE_MONTHLY,
    RECURRENCE_TYPES,
    RECURRENCE_WEEKLY,
    REQUIRED_UPDATE_FIELDS,
    UNSET,
    ClassInstanceUpdate,
    ConflictRecord,
    FilterResult,
    RecurringClassPattern,
    SeriesCreationResult,
    SingleClassParams,
    SingleClassResult,
    UpdateResult,
)

logger = logging.getLogger(__name__)


def generate_occurrences(pattern: RecurringClassPattern) -> List[GymClass]:
    """
    Expand a recurrence pattern into candidate classes.

    Walks every calendar day between the pattern's start date and its end
    bound, one day at a time, and keeps the days matching the recurrence
    kind. Stops at the end bound or after max_occurrences candidates.

    Args:
        pattern: RecurringClassPattern to expand

    Returns:
        List of unsaved GymClass instances, in date order, with no series attached
    """
    end_date = _get_end_generation_date(pattern)
    max_count = pattern.max_occurrences or DEFAULT_MAX_OCCURRENCES

    occurrences = []
    current_date = pattern.start_date

    while current_date <= end_date and len(occurrences) < max_count:
        if _should_schedule_on(pattern, current_date):
            occurrences.append(_build_occurrence(pattern, current_date))
        current_date += timedelta(days=1)

    return occurrences


def _get_end_generation_date(pattern: RecurringClassPattern) -> date:
    """Determine the last date to consider for generation."""
    horizon = _add_months(pattern.start_date, _horizon_months())

    if pattern.end_date and pattern.end_date < horizon:
        return pattern.end_date

    return horizon


def _horizon_months() -> int:
    return getattr(settings, 'SCHEDULING', {}).get('HORIZON_MONTHS', DEFAULT_HORIZON_MONTHS)


def _add_months(day: date, months: int) -> date:
    """Add calendar months, clamping to the last day of the target month."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def _should_schedule_on(pattern: RecurringClassPattern, day: date) -> bool:
    if pattern.recurrence_type == RECURRENCE_DAILY:
        return True

    if pattern.recurrence_type == RECURRENCE_WEEKLY:
        return day.isoweekday() in (pattern.recurrence_days or [])

    if pattern.recurrence_type == RECURRENCE_MONTHLY:
        # Day 29-31 anchors skip months that lack that day.
        return day.day == pattern.start_date.day

    return False


def _build_occurrence(pattern: RecurringClassPattern, day: date) -> GymClass:
    """Create an occurrence object (not yet saved to DB)."""
    return GymClass(
        gym_id=pattern.gym_id,
        title=pattern.title,
        description=pattern.description,
        class_type_id=pattern.class_type_id,
        location_id=pattern.location_id,
        coach_id=pattern.coach_id,
        capacity=pattern.capacity,
        start_time=datetime.combine(day, pattern.start_time),
        end_time=datetime.combine(day, pattern.end_time),
        status='scheduled',
        is_recurring=True
    )


def filter_conflicts(
    candidates: List[GymClass],
    location_id,
    coach_id=None,
    checker: Optional[AvailabilityChecker] = None
) -> FilterResult:
    """
    Split candidates into free ones and conflicts.

    Candidates are checked one at a time against what is already persisted.
    Candidates of the same batch are not reserved against each other.

    Args:
        candidates: unsaved GymClass instances, in generation order
        location_id: location every candidate uses
        coach_id: coach every candidate uses, or None for unstaffed classes
        checker: AvailabilityChecker to query (defaults to the database checker)

    Returns:
        FilterResult whose valid and conflicts lists keep generation order
    """
    checker = checker or default_checker
    result = FilterResult()

    for candidate in candidates:
        reason = _find_conflict(
            checker, location_id, coach_id, candidate.start_time, candidate.end_time
        )
        if reason:
            logger.debug("Skipping class at %s: %s", candidate.start_time, reason)
            result.conflicts.append(ConflictRecord(date=candidate.start_time, reason=reason))
        else:
            result.valid.append(candidate)

    return result


def _find_conflict(
    checker: AvailabilityChecker,
    location_id,
    coach_id,
    start_time: datetime,
    end_time: datetime
) -> Optional[str]:
    """Return why the window is unavailable, or None. Coach is only checked when the location is free."""
    location_check = checker.check_location(location_id, start_time, end_time)
    if not location_check.is_available:
        return f"location busy: {location_check.titles()}"

    if coach_id:
        coach_check = checker.check_coach(coach_id, start_time, end_time)
        if not coach_check.is_available:
            return f"coach busy: {coach_check.titles()}"

    return None


def create_recurring_series(
    pattern: RecurringClassPattern,
    checker: Optional[AvailabilityChecker] = None
) -> SeriesCreationResult:
    """
    Create a class series and its non-conflicting classes.

    The series row is written first and the free classes are bulk inserted
    afterwards, so a series with zero classes is a legitimate outcome.

    Args:
        pattern: RecurringClassPattern describing the series
        checker: AvailabilityChecker to query (defaults to the database checker)

    Returns:
        SeriesCreationResult with the number of classes created and the conflicts

    Raises:
        ValueError: If the pattern is malformed
    """
    _validate_pattern(pattern)

    series = ClassSeries.objects.create(
        gym_id=pattern.gym_id,
        title=pattern.title,
        description=pattern.description,
        class_type_id=pattern.class_type_id,
        location_id=pattern.location_id,
        coach_id=pattern.coach_id,
        capacity=pattern.capacity,
        recurrence_type=pattern.recurrence_type,
        recurrence_days=list(pattern.recurrence_days or []),
        start_date=pattern.start_date,
        end_date=pattern.end_date,
        start_time=pattern.start_time,
        end_time=pattern.end_time
    )

    candidates = generate_occurrences(pattern)
    filtered = filter_conflicts(candidates, pattern.location_id, pattern.coach_id, checker)

    for occurrence in filtered.valid:
        occurrence.series = series
        occurrence.is_recurring = True

    if filtered.valid:
        GymClass.objects.bulk_create(filtered.valid)

    logger.info(
        "Created series %s: %d of %d classes scheduled, %d conflicts",
        series.id, len(filtered.valid), len(candidates), len(filtered.conflicts)
    )

    return SeriesCreationResult(
        series_id=str(series.id),
        classes_created=len(filtered.valid),
        conflicts=filtered.conflicts
    )


@transaction.atomic
def create_single_class(
    params: SingleClassParams,
    checker: Optional[AvailabilityChecker] = None
) -> SingleClassResult:
    """
    Create a standalone class if its location and coach are free.

    Args:
        params: SingleClassParams for the class
        checker: AvailabilityChecker to query (defaults to the database checker)

    Returns:
        SingleClassResult; on conflict success is False and nothing is created

    Raises:
        ValueError: If the params are malformed
    """
    _validate_single_class(params)

    reason = _find_conflict(
        checker or default_checker,
        params.location_id,
        params.coach_id,
        params.start_time,
        params.end_time
    )
    if reason:
        return SingleClassResult(success=False, error=reason)

    gym_class = GymClass.objects.create(
        gym_id=params.gym_id,
        title=params.title,
        description=params.description,
        class_type_id=params.class_type_id,
        location_id=params.location_id,
        coach_id=params.coach_id,
        capacity=params.capacity,
        start_time=params.start_time,
        end_time=params.end_time,
        status='scheduled',
        is_recurring=False,
        series=None
    )
    return SingleClassResult(success=True, class_id=str(gym_class.id))


@transaction.atomic
def delete_recurring_series(series_id, option: str) -> None:
    """
    Delete a class series.

    Args:
        series_id: id of the ClassSeries
        option: 'all' deletes every class of the series and the series itself;
                'future' deletes classes starting now or later and keeps the
                series row and past classes

    Raises:
        ValueError: If option is not 'future' or 'all'
        ClassSeries.DoesNotExist: If no series has this id
    """
    if option not in DELETE_OPTIONS:
        raise ValueError(f"Delete option must be one of {', '.join(DELETE_OPTIONS)}")

    series = ClassSeries.objects.get(pk=series_id)
    classes = GymClass.objects.for_series(series)

    if option == DELETE_ALL:
        deleted, _ = classes.delete()
        series.delete()
    else:
        deleted, _ = classes.upcoming().delete()

    logger.info("Deleted %d class(es) of series %s (option=%s)", deleted, series_id, option)


@transaction.atomic
def update_class_instance(
    class_id,
    updates: ClassInstanceUpdate,
    break_from_series: bool = False,
    checker: Optional[AvailabilityChecker] = None
) -> UpdateResult:
    """
    Update one class, optionally detaching it from its series.

    The window after the update (new times merged over the stored ones) must
    stay ordered. The location is re-checked only when start time, end time
    and location are all part of the update. The coach is not re-checked.

    Args:
        class_id: id of the GymClass
        updates: ClassInstanceUpdate with the fields to change
        break_from_series: clear the series link and the recurring flag
        checker: AvailabilityChecker to query (defaults to the database checker)

    Returns:
        UpdateResult; on conflict success is False and nothing is changed

    Raises:
        GymClass.DoesNotExist: If no class has this id
        ValueError: If a required field is cleared or the window ends
            before it starts
    """
    gym_class = GymClass.objects.get(pk=class_id)
    _validate_update(gym_class, updates)

    if updates.start_time and updates.end_time and updates.location_id:
        location_check = (checker or default_checker).check_location(
            updates.location_id,
            updates.start_time,
            updates.end_time,
            exclude_class_id=class_id
        )
        if not location_check.is_available:
            return UpdateResult(
                success=False,
                error=f"location busy: {location_check.titles()}"
            )

    fields_to_update = {
        'title': updates.title,
        'description': updates.description,
        'location_id': updates.location_id,
        'coach_id': updates.coach_id,
        'capacity': updates.capacity,
        'start_time': updates.start_time,
        'end_time': updates.end_time,
    }
    _apply_field_updates(gym_class, fields_to_update)

    if break_from_series:
        logger.info("Detaching class %s from series %s", gym_class.id, gym_class.series_id)
        gym_class.series = None
        gym_class.is_recurring = False

    gym_class.save()
    return UpdateResult(success=True)


def get_classes_in_range(
    gym_id,
    start_time: datetime,
    end_time: datetime,
    status: Optional[str] = None
) -> List[GymClass]:
    """
    Get a gym's classes starting within a datetime range.

    Raises:
        ValueError: If start_time >= end_time
    """
    if start_time >= end_time:
        raise ValueError("Start time must be before end time")

    queryset = GymClass.objects.for_gym(gym_id).in_range(start_time, end_time)

    if status:
        queryset = queryset.filter(status=status)

    return list(queryset)


def _validate_pattern(pattern: RecurringClassPattern) -> None:
    """Validate series creation data."""
    if not (pattern.title or '').strip():
        raise ValueError("Title is required")

    if pattern.recurrence_type not in RECURRENCE_TYPES:
        raise ValueError(f"Recurrence type must be one of {', '.join(RECURRENCE_TYPES)}")

    if any(day not in range(1, 8) for day in pattern.recurrence_days or []):
        raise ValueError("Weekdays must be between 1 (Monday) and 7 (Sunday)")

    if pattern.start_time is None or pattern.end_time is None:
        raise ValueError("Start and end time are required")

    if pattern.end_time <= pattern.start_time:
        raise ValueError("End time must be after start time")

    if pattern.end_date and pattern.end_date < pattern.start_date:
        raise ValueError("End date cannot be before start date")

    _validate_capacity(pattern.capacity)

    if pattern.max_occurrences is not None and pattern.max_occurrences < 1:
        raise ValueError("Max occurrences must be positive")


def _validate_single_class(params: SingleClassParams) -> None:
    """Validate standalone class creation data."""
    if not (params.title or '').strip():
        raise ValueError("Title is required")

    if params.start_time is None or params.end_time is None:
        raise ValueError("Start and end time are required")

    if params.end_time <= params.start_time:
        raise ValueError("End time must be after start time")

    _validate_capacity(params.capacity)


def _validate_capacity(capacity: int) -> None:
    if capacity is None or capacity < 1:
        raise ValueError("Capacity must be positive")


def _validate_update(gym_class: GymClass, updates: ClassInstanceUpdate) -> None:
    """Validate a partial update against the class it is applied to."""
    for field_name in REQUIRED_UPDATE_FIELDS:
        if getattr(updates, field_name) is None:
            raise ValueError(f"{field_name} cannot be cleared")

    if updates.title is not UNSET and not updates.title.strip():
        raise ValueError("Title is required")

    if updates.capacity is not UNSET:
        _validate_capacity(updates.capacity)

    start_time = updates.start_time or gym_class.start_time
    end_time = updates.end_time or gym_class.end_time
    if end_time <= start_time:
        raise ValueError("End time must be after start time")


def _apply_field_updates(obj, fields: dict) -> None:
    """Apply field updates to object unless the value is UNSET (DRY helper)."""
    for field_name, value in fields.items():
        if value is not UNSET:
            setattr(obj, field_name, value)
