"""
Location and coach availability checks.

The services only depend on the AvailabilityChecker interface. The default
implementation answers from the GymClass table; callers may pass any other
checker (a remote booking service, a test double) to the service functions.
"""

import logging
from datetime import datetime
from typing import Optional

from .models import GymClass
from .types import AvailabilityResult, ConflictingClass

logger = logging.getLogger(__name__)


class AvailabilityChecker:
    """Answers whether a resource is free for a time window."""

    def check_location(
        self,
        location_id,
        start_time: datetime,
        end_time: datetime,
        exclude_class_id=None
    ) -> AvailabilityResult:
        raise NotImplementedError

    def check_coach(
        self,
        coach_id,
        start_time: datetime,
        end_time: datetime,
        exclude_class_id=None
    ) -> AvailabilityResult:
        raise NotImplementedError


class DatabaseAvailabilityChecker(AvailabilityChecker):
    """
    Availability from persisted classes.

    A resource is busy when a non-cancelled class using it overlaps the
    requested window. Database errors propagate to the caller.
    """

    def check_location(self, location_id, start_time, end_time, exclude_class_id=None):
        queryset = GymClass.objects.at_location(location_id)
        return self._check(queryset, start_time, end_time, exclude_class_id)

    def check_coach(self, coach_id, start_time, end_time, exclude_class_id=None):
        if not coach_id:
            return AvailabilityResult(is_available=True)

        queryset = GymClass.objects.with_coach(coach_id)
        return self._check(queryset, start_time, end_time, exclude_class_id)

    def _check(self, queryset, start_time, end_time, exclude_class_id) -> AvailabilityResult:
        queryset = queryset.active().overlapping(start_time, end_time)
        if exclude_class_id:
            queryset = queryset.exclude(pk=exclude_class_id)

        conflicts = [
            ConflictingClass(
                id=str(row['id']),
                title=row['title'],
                start_time=row['start_time'],
                end_time=row['end_time'],
            )
            for row in queryset.values('id', 'title', 'start_time', 'end_time')
        ]
        if conflicts:
            logger.debug(
                "Slot %s - %s overlaps %d class(es)", start_time, end_time, len(conflicts)
            )
        return AvailabilityResult(is_available=not conflicts, conflicts=conflicts)


default_checker = DatabaseAvailabilityChecker()


def check_location_availability(
    location_id,
    start_time: datetime,
    end_time: datetime,
    exclude_class_id: Optional[str] = None
) -> AvailabilityResult:
    """Check if a location is free for a time slot using the default checker."""
    return default_checker.check_location(location_id, start_time, end_time, exclude_class_id)


def check_coach_availability(
    coach_id,
    start_time: datetime,
    end_time: datetime,
    exclude_class_id: Optional[str] = None
) -> AvailabilityResult:
    """Check if a coach is free for a time slot using the default checker."""
    return default_checker.check_coach(coach_id, start_time, end_time, exclude_class_id)
