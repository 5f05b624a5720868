"""
Custom managers and querysets for scheduling models.

QuerySets define chainable query methods.
Managers use QuerySets to enable method chaining.
No business logic should be here - only query operations.
"""

from django.db import models
from django.utils import timezone


class ClassSeriesQuerySet(models.QuerySet):
    """Custom queryset for ClassSeries model with chainable methods."""

    def for_gym(self, gym_id):
        return self.filter(gym_id=gym_id)


class ClassSeriesManager(models.Manager):
    """Custom manager for ClassSeries model."""

    def get_queryset(self):
        """Return custom queryset for method chaining."""
        return ClassSeriesQuerySet(self.model, using=self._db)

    def for_gym(self, gym_id):
        return self.get_queryset().for_gym(gym_id)


class GymClassQuerySet(models.QuerySet):
    """Custom queryset for GymClass model with chainable methods."""

    def active(self):
        """Get classes that still occupy their location and coach."""
        return self.exclude(status='cancelled')

    def upcoming(self):
        """Get classes starting now or later."""
        return self.filter(start_time__gte=timezone.now())

    def past(self):
        """Get classes that started before now."""
        return self.filter(start_time__lt=timezone.now())

    def in_range(self, start_time, end_time):
        """
        Get classes starting within a datetime range.

        Args:
            start_time: datetime object
            end_time: datetime object
        """
        return self.filter(
            start_time__gte=start_time,
            start_time__lte=end_time
        )

    def overlapping(self, start_time, end_time):
        """
        Get classes whose window overlaps [start_time, end_time).

        Touching windows (one ends exactly when the other starts) do not overlap.
        """
        return self.filter(
            start_time__lt=end_time,
            end_time__gt=start_time
        )

    def at_location(self, location_id):
        return self.filter(location_id=location_id)

    def with_coach(self, coach_id):
        return self.filter(coach_id=coach_id)

    def for_gym(self, gym_id):
        return self.filter(gym_id=gym_id)

    def for_series(self, series):
        """
        Get all classes still attached to a series.

        Args:
            series: ClassSeries instance or its id
        """
        return self.filter(series=series)

    def standalone(self):
        """Get classes not attached to any series."""
        return self.filter(series__isnull=True)

    def recurring(self):
        """Get classes attached to a series."""
        return self.filter(series__isnull=False)


class GymClassManager(models.Manager):
    """Custom manager for GymClass model."""

    def get_queryset(self):
        """Return custom queryset for method chaining."""
        return GymClassQuerySet(self.model, using=self._db)

    def active(self):
        return self.get_queryset().active()

    def upcoming(self):
        return self.get_queryset().upcoming()

    def past(self):
        return self.get_queryset().past()

    def in_range(self, start_time, end_time):
        return self.get_queryset().in_range(start_time, end_time)

    def overlapping(self, start_time, end_time):
        return self.get_queryset().overlapping(start_time, end_time)

    def at_location(self, location_id):
        return self.get_queryset().at_location(location_id)

    def with_coach(self, coach_id):
        return self.get_queryset().with_coach(coach_id)

    def for_gym(self, gym_id):
        return self.get_queryset().for_gym(gym_id)

    def for_series(self, series):
        return self.get_queryset().for_series(series)

    def standalone(self):
        return self.get_queryset().standalone()

    def recurring(self):
        return self.get_queryset().recurring()
