"""
Data types and constants for the class scheduling engine.

This module contains:
- DTOs (Data Transfer Objects) for service layer operations
- Result types returned to callers instead of raising on conflicts
- Constants used across the application
"""

from dataclasses import dataclass, field
from typing import List, Optional
from datetime import datetime, date, time


DEFAULT_MAX_OCCURRENCES = 100
DEFAULT_HORIZON_MONTHS = 3

RECURRENCE_DAILY = 'daily'
RECURRENCE_WEEKLY = 'weekly'
RECURRENCE_MONTHLY = 'monthly'
RECURRENCE_TYPES = (RECURRENCE_DAILY, RECURRENCE_WEEKLY, RECURRENCE_MONTHLY)

DELETE_FUTURE = 'future'
DELETE_ALL = 'all'
DELETE_OPTIONS = (DELETE_FUTURE, DELETE_ALL)

# Update fields that cannot be set to null
REQUIRED_UPDATE_FIELDS = ('title', 'location_id', 'capacity', 'start_time', 'end_time')


@dataclass
class RecurringClassPattern:
    """Input for series creation. Not persisted as-is."""
    title: str
    gym_id: str
    class_type_id: str
    location_id: str
    capacity: int
    recurrence_type: str
    start_date: date
    start_time: time
    end_time: time
    description: Optional[str] = None
    coach_id: Optional[str] = None
    recurrence_days: List[int] = field(default_factory=list)
    end_date: Optional[date] = None
    max_occurrences: int = DEFAULT_MAX_OCCURRENCES


@dataclass
class SingleClassParams:
    """DTO for standalone class creation."""
    title: str
    gym_id: str
    class_type_id: str
    location_id: str
    capacity: int
    start_time: datetime
    end_time: datetime
    description: Optional[str] = None
    coach_id: Optional[str] = None


class _Unset:
    """Marker for an update field that was not supplied."""

    def __bool__(self):
        return False

    def __repr__(self):
        return 'UNSET'


UNSET = _Unset()


@dataclass
class ClassInstanceUpdate:
    """
    DTO for class instance update operations.

    Fields left as UNSET are not touched. None clears the nullable
    fields (description, coach_id).
    """
    title: Optional[str] = UNSET
    description: Optional[str] = UNSET
    location_id: Optional[str] = UNSET
    coach_id: Optional[str] = UNSET
    capacity: Optional[int] = UNSET
    start_time: Optional[datetime] = UNSET
    end_time: Optional[datetime] = UNSET


@dataclass
class ConflictingClass:
    id: str
    title: str
    start_time: datetime
    end_time: datetime


@dataclass
class AvailabilityResult:
    is_available: bool
    conflicts: List[ConflictingClass] = field(default_factory=list)

    def titles(self) -> str:
        return ', '.join(c.title for c in self.conflicts)


@dataclass
class ConflictRecord:
    """Why a candidate occurrence was rejected. Never persisted."""
    date: datetime
    reason: str


@dataclass
class FilterResult:
    valid: list = field(default_factory=list)
    conflicts: List[ConflictRecord] = field(default_factory=list)


@dataclass
class SeriesCreationResult:
    """Partial-success report of series creation."""
    series_id: str
    classes_created: int
    conflicts: List[ConflictRecord] = field(default_factory=list)


@dataclass
class SingleClassResult:
    success: bool
    class_id: Optional[str] = None
    error: Optional[str] = None


@dataclass
class UpdateResult:
    success: bool
    error: Optional[str] = None
