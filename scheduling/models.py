"""
Models for the class scheduling engine.

This implementation uses the Occurrence Materialization Pattern where:
- ClassSeries stores the recurrence definition a series was generated from
- GymClass stores ALL actual bookable class instances (both standalone and recurring)

Gyms, class types, locations and coaches are owned by other services and are
referenced here by their UUIDs only.
"""

import uuid

from django.db import models
from django.core.exceptions import ValidationError

from .managers import ClassSeriesManager, GymClassManager


class ClassSeries(models.Model):
    """
    Stores a recurring class definition.

    Occurrences are generated once, when the series is created. Nothing ever
    regenerates them, so a series may legitimately have zero classes.
    """

    RECURRENCE_CHOICES = [
        ('daily', 'Daily'),
        ('weekly', 'Weekly'),
        ('monthly', 'Monthly'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    gym_id = models.UUIDField(db_index=True)

    title = models.CharField(max_length=200)
    description = models.TextField(null=True, blank=True)

    class_type_id = models.UUIDField()
    location_id = models.UUIDField()
    coach_id = models.UUIDField(null=True, blank=True)
    capacity = models.PositiveIntegerField()

    recurrence_type = models.CharField(max_length=20, choices=RECURRENCE_CHOICES)
    recurrence_days = models.JSONField(
        default=list,
        blank=True,
        help_text="ISO weekdays for weekly series (1=Monday, 7=Sunday)"
    )

    start_date = models.DateField()
    end_date = models.DateField(
        null=True,
        blank=True,
        help_text="Last date of the series (null = start date plus the generation horizon)"
    )
    start_time = models.TimeField(help_text="Wall-clock start, identical for every occurrence")
    end_time = models.TimeField(help_text="Wall-clock end, identical for every occurrence")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ClassSeriesManager()

    class Meta:
        ordering = ['start_date', 'start_time']
        verbose_name_plural = 'class series'
        indexes = [
            models.Index(fields=['gym_id', 'start_date'], name='series_gym_start_idx'),
        ]

    def __str__(self):
        return f"{self.title} ({self.recurrence_type} from {self.start_date})"

    def clean(self):
        """Validate series data."""
        super().clean()

        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValidationError({
                'end_time': 'End time must be after start time.'
            })

        if self.end_date and self.start_date and self.end_date < self.start_date:
            raise ValidationError({
                'end_date': 'End date cannot be before start date.'
            })

        if any(day not in range(1, 8) for day in self.recurrence_days or []):
            raise ValidationError({
                'recurrence_days': 'Weekdays must be between 1 (Monday) and 7 (Sunday).'
            })

    def save(self, *args, **kwargs):
        """Save with validation."""
        self.full_clean()
        super().save(*args, **kwargs)


class GymClass(models.Model):
    """
    One concrete, bookable class session.

    Standalone classes: series = null, is_recurring = False
    Recurring classes: reference their parent ClassSeries until detached
    """

    STATUS_CHOICES = [
        ('scheduled', 'Scheduled'),
        ('cancelled', 'Cancelled'),
        ('completed', 'Completed'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    gym_id = models.UUIDField(db_index=True)

    title = models.CharField(max_length=200)
    description = models.TextField(null=True, blank=True)

    class_type_id = models.UUIDField()
    location_id = models.UUIDField()
    coach_id = models.UUIDField(null=True, blank=True)
    capacity = models.PositiveIntegerField()

    start_time = models.DateTimeField()
    end_time = models.DateTimeField()

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default='scheduled'
    )
    is_recurring = models.BooleanField(default=False)
    series = models.ForeignKey(
        ClassSeries,
        on_delete=models.CASCADE,
        related_name='classes',
        null=True,
        blank=True,
        help_text="Parent series (null for standalone or detached classes)"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = GymClassManager()

    class Meta:
        ordering = ['start_time']
        verbose_name_plural = 'gym classes'
        indexes = [
            models.Index(fields=['location_id', 'start_time', 'end_time'], name='class_location_window_idx'),
            models.Index(fields=['coach_id', 'start_time', 'end_time'], name='class_coach_window_idx'),
            models.Index(fields=['series', 'start_time'], name='class_series_start_idx'),
            models.Index(fields=['gym_id', 'start_time'], name='class_gym_start_idx'),
        ]

    def __str__(self):
        status_str = f" [{self.status}]" if self.status != 'scheduled' else ""
        return f"{self.title} - {self.start_time.strftime('%Y-%m-%d %H:%M')}{status_str}"

    @property
    def is_standalone(self):
        return self.series_id is None

    @property
    def duration_minutes(self):
        return int((self.end_time - self.start_time).total_seconds() // 60)

    def clean(self):
        """Validate class data."""
        super().clean()

        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValidationError({
                'end_time': 'End time must be after start time.'
            })

        if self.is_recurring and self.series_id is None and self._state.adding:
            raise ValidationError({
                'is_recurring': 'New recurring classes must belong to a series.'
            })

    def save(self, *args, **kwargs):
        """Save with validation."""
        self.full_clean()
        super().save(*args, **kwargs)
