"""
Tests for the class scheduling engine.

Tests cover:
- ClassSeries and GymClass models and managers
- Occurrence generation (daily, weekly, monthly, bounds and caps)
- Conflict filtering against location and coach availability
- Series lifecycle: create, delete future/all, update and detach
- Standalone class creation
- Form validation helpers
- API endpoints
"""

import uuid
from datetime import datetime, date, time, timedelta

from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APITestCase, APIClient
from rest_framework import status

from .availability import (
    AvailabilityChecker,
    DatabaseAvailabilityChecker,
    check_coach_availability,
    check_location_availability,
)
from .models import ClassSeries, GymClass
from .services import (
    create_recurring_series,
    create_single_class,
    delete_recurring_series,
    filter_conflicts,
    generate_occurrences,
    get_classes_in_range,
    update_class_instance,
)
from .types import (
    AvailabilityResult,
    ClassInstanceUpdate,
    ConflictingClass,
    RecurringClassPattern,
    SingleClassParams,
)
from .validation import validate_class_capacity, validate_class_form, validate_class_time


GYM_ID = uuid.uuid4()
CLASS_TYPE_ID = uuid.uuid4()
LOCATION_ID = uuid.uuid4()
OTHER_LOCATION_ID = uuid.uuid4()
COACH_ID = uuid.uuid4()


def make_pattern(**overrides):
    values = dict(
        title="Morning Yoga",
        gym_id=GYM_ID,
        class_type_id=CLASS_TYPE_ID,
        location_id=LOCATION_ID,
        capacity=20,
        recurrence_type='weekly',
        recurrence_days=[1, 3, 5],
        start_date=date(2024, 1, 1),  # Monday
        end_date=date(2024, 1, 14),
        start_time=time(9, 0),
        end_time=time(10, 0),
    )
    values.update(overrides)
    return RecurringClassPattern(**values)


def make_class(title, start_time, end_time, **overrides):
    values = dict(
        gym_id=GYM_ID,
        title=title,
        class_type_id=CLASS_TYPE_ID,
        location_id=LOCATION_ID,
        capacity=15,
        start_time=start_time,
        end_time=end_time,
    )
    values.update(overrides)
    return GymClass.objects.create(**values)


class RecordingChecker(AvailabilityChecker):
    """Availability double: busy at the given start times, records every call."""

    def __init__(self, busy_locations=(), busy_coaches=()):
        self.busy_locations = set(busy_locations)
        self.busy_coaches = set(busy_coaches)
        self.location_calls = []
        self.coach_calls = []

    def check_location(self, location_id, start_time, end_time, exclude_class_id=None):
        self.location_calls.append((location_id, start_time, end_time, exclude_class_id))
        return self._answer(start_time, end_time, self.busy_locations, "Booked Room")

    def check_coach(self, coach_id, start_time, end_time, exclude_class_id=None):
        self.coach_calls.append((coach_id, start_time, end_time, exclude_class_id))
        return self._answer(start_time, end_time, self.busy_coaches, "Coach Session")

    def _answer(self, start_time, end_time, busy, title):
        if start_time not in busy:
            return AvailabilityResult(is_available=True)
        return AvailabilityResult(
            is_available=False,
            conflicts=[
                ConflictingClass(id='a', title=title, start_time=start_time, end_time=end_time),
                ConflictingClass(id='b', title="Open Gym", start_time=start_time, end_time=end_time),
            ]
        )


class ClassSeriesModelTests(TestCase):
    """Test ClassSeries model validation."""

    def test_create_series(self):
        """Test creating a series row."""
        series = ClassSeries.objects.create(
            gym_id=GYM_ID,
            title="Spin",
            class_type_id=CLASS_TYPE_ID,
            location_id=LOCATION_ID,
            capacity=12,
            recurrence_type='weekly',
            recurrence_days=[2, 4],
            start_date=date(2024, 2, 1),
            start_time=time(18, 0),
            end_time=time(19, 0)
        )

        self.assertIsNotNone(series.id)
        self.assertIsNone(series.end_date)
        self.assertEqual(series.recurrence_days, [2, 4])
        self.assertEqual(series.classes.count(), 0)

    def test_end_time_must_follow_start_time(self):
        series = ClassSeries(
            gym_id=GYM_ID,
            title="Backwards",
            class_type_id=CLASS_TYPE_ID,
            location_id=LOCATION_ID,
            capacity=12,
            recurrence_type='daily',
            start_date=date(2024, 2, 1),
            start_time=time(19, 0),
            end_time=time(18, 0)
        )
        with self.assertRaises(ValidationError):
            series.full_clean()

    def test_weekdays_must_be_iso(self):
        series = ClassSeries(
            gym_id=GYM_ID,
            title="Bad days",
            class_type_id=CLASS_TYPE_ID,
            location_id=LOCATION_ID,
            capacity=12,
            recurrence_type='weekly',
            recurrence_days=[0, 8],
            start_date=date(2024, 2, 1),
            start_time=time(18, 0),
            end_time=time(19, 0)
        )
        with self.assertRaises(ValidationError):
            series.full_clean()


class GymClassModelTests(TestCase):
    """Test GymClass model."""

    def test_create_standalone_class(self):
        gym_class = make_class(
            "Boxing",
            datetime(2024, 3, 1, 18, 0),
            datetime(2024, 3, 1, 19, 30)
        )

        self.assertTrue(gym_class.is_standalone)
        self.assertFalse(gym_class.is_recurring)
        self.assertEqual(gym_class.status, 'scheduled')
        self.assertEqual(gym_class.duration_minutes, 90)

    def test_end_time_must_follow_start_time(self):
        with self.assertRaises(ValidationError):
            make_class(
                "Backwards",
                datetime(2024, 3, 1, 19, 0),
                datetime(2024, 3, 1, 18, 0)
            )


class GymClassManagerTests(TestCase):
    """Test GymClass custom manager."""

    def setUp(self):
        now = timezone.now()
        make_class("Past", now - timedelta(days=2), now - timedelta(days=2) + timedelta(hours=1))
        make_class("Future", now + timedelta(days=2), now + timedelta(days=2) + timedelta(hours=1))
        make_class(
            "Cancelled",
            now + timedelta(days=3),
            now + timedelta(days=3) + timedelta(hours=1),
            status='cancelled'
        )

    def test_upcoming_and_past(self):
        self.assertEqual(GymClass.objects.upcoming().count(), 2)
        self.assertEqual(GymClass.objects.past().count(), 1)
        self.assertEqual(GymClass.objects.past().first().title, "Past")

    def test_active_excludes_cancelled(self):
        titles = set(GymClass.objects.active().values_list('title', flat=True))
        self.assertEqual(titles, {"Past", "Future"})

    def test_overlapping_ignores_touching_windows(self):
        """A class ending exactly when the window starts does not overlap."""
        make_class("Nine", datetime(2024, 5, 1, 9, 0), datetime(2024, 5, 1, 10, 0))

        touching = GymClass.objects.overlapping(
            datetime(2024, 5, 1, 10, 0), datetime(2024, 5, 1, 11, 0)
        )
        overlapping = GymClass.objects.overlapping(
            datetime(2024, 5, 1, 9, 59), datetime(2024, 5, 1, 11, 0)
        )

        self.assertEqual(touching.count(), 0)
        self.assertEqual(overlapping.count(), 1)

    def test_standalone_and_recurring(self):
        result = create_recurring_series(make_pattern(end_date=date(2024, 1, 3)))

        self.assertEqual(GymClass.objects.recurring().count(), 2)
        self.assertEqual(GymClass.objects.standalone().count(), 3)
        self.assertEqual(
            list(ClassSeries.objects.for_gym(GYM_ID).values_list('id', flat=True)),
            [uuid.UUID(result.series_id)]
        )
        self.assertEqual(ClassSeries.objects.for_gym(uuid.uuid4()).count(), 0)


class OccurrenceGenerationTests(SimpleTestCase):
    """Test expanding patterns into candidate classes."""

    def test_weekly_mon_wed_fri(self):
        """Two weeks of Mon/Wed/Fri give six classes."""
        occurrences = generate_occurrences(make_pattern())

        days = [occ.start_time.date() for occ in occurrences]
        self.assertEqual(days, [
            date(2024, 1, 1), date(2024, 1, 3), date(2024, 1, 5),
            date(2024, 1, 8), date(2024, 1, 10), date(2024, 1, 12),
        ])

    def test_weekly_sunday_is_seven(self):
        occurrences = generate_occurrences(make_pattern(recurrence_days=[7]))

        days = [occ.start_time.date() for occ in occurrences]
        self.assertEqual(days, [date(2024, 1, 7), date(2024, 1, 14)])

    def test_weekly_days_always_in_recurrence_days(self):
        pattern = make_pattern(recurrence_days=[2, 6], end_date=date(2024, 3, 31))

        occurrences = generate_occurrences(pattern)

        self.assertGreater(len(occurrences), 0)
        for occ in occurrences:
            self.assertIn(occ.start_time.isoweekday(), [2, 6])

    def test_weekly_without_days_generates_nothing(self):
        self.assertEqual(generate_occurrences(make_pattern(recurrence_days=[])), [])

    def test_daily_covers_every_day(self):
        pattern = make_pattern(
            recurrence_type='daily',
            start_date=date(2024, 2, 25),
            end_date=date(2024, 3, 5)
        )

        occurrences = generate_occurrences(pattern)

        days = [occ.start_time.date() for occ in occurrences]
        expected = [date(2024, 2, 25) + timedelta(days=n) for n in range(10)]
        self.assertEqual(days, expected)  # includes Feb 29

    def test_monthly_day_31_skips_short_months(self):
        """Jan 31 anchored monthly classes only land in months with a 31st."""
        pattern = make_pattern(
            recurrence_type='monthly',
            start_date=date(2024, 1, 31),
            end_date=date(2024, 4, 30)
        )

        occurrences = generate_occurrences(pattern)

        days = [occ.start_time.date() for occ in occurrences]
        self.assertEqual(days, [date(2024, 1, 31), date(2024, 3, 31)])

    def test_monthly_keeps_day_of_month(self):
        pattern = make_pattern(
            recurrence_type='monthly',
            start_date=date(2024, 1, 15),
            end_date=None
        )

        occurrences = generate_occurrences(pattern)

        days = [occ.start_time.date() for occ in occurrences]
        self.assertEqual(days, [
            date(2024, 1, 15), date(2024, 2, 15), date(2024, 3, 15), date(2024, 4, 15),
        ])

    def test_max_occurrences_caps_generation(self):
        pattern = make_pattern(recurrence_type='daily', end_date=None, max_occurrences=5)

        occurrences = generate_occurrences(pattern)

        self.assertEqual(len(occurrences), 5)
        self.assertEqual(occurrences[-1].start_time.date(), date(2024, 1, 5))

    @override_settings(SCHEDULING={'HORIZON_MONTHS': 12})
    def test_default_cap_is_one_hundred(self):
        pattern = make_pattern(recurrence_type='daily', end_date=date(2024, 12, 31))

        self.assertEqual(len(generate_occurrences(pattern)), 100)

    def test_missing_end_date_defaults_to_three_months(self):
        pattern = make_pattern(recurrence_type='daily', end_date=None)

        occurrences = generate_occurrences(pattern)

        self.assertEqual(occurrences[-1].start_time.date(), date(2024, 4, 1))
        self.assertEqual(len(occurrences), 92)

    def test_occurrences_stay_within_bounds(self):
        pattern = make_pattern(
            recurrence_type='daily',
            start_date=date(2024, 6, 10),
            end_date=date(2024, 6, 20)
        )

        for occ in generate_occurrences(pattern):
            self.assertGreaterEqual(occ.start_time.date(), pattern.start_date)
            self.assertLessEqual(occ.start_time.date(), pattern.end_date)

    def test_candidates_copy_pattern_fields(self):
        pattern = make_pattern(description="Bring a mat", coach_id=COACH_ID)

        occ = generate_occurrences(pattern)[0]

        self.assertEqual(occ.start_time, datetime(2024, 1, 1, 9, 0))
        self.assertEqual(occ.end_time, datetime(2024, 1, 1, 10, 0))
        self.assertEqual(occ.start_time.isoformat(), '2024-01-01T09:00:00')
        self.assertEqual(occ.title, "Morning Yoga")
        self.assertEqual(occ.description, "Bring a mat")
        self.assertEqual(occ.coach_id, COACH_ID)
        self.assertEqual(occ.capacity, 20)
        self.assertEqual(occ.status, 'scheduled')
        self.assertTrue(occ.is_recurring)
        self.assertIsNone(occ.series_id)


class ConflictFilterTests(SimpleTestCase):
    """Test splitting candidates into valid ones and conflicts."""

    def setUp(self):
        self.candidates = generate_occurrences(make_pattern())
        self.wednesday = datetime(2024, 1, 3, 9, 0)
        self.friday = datetime(2024, 1, 5, 9, 0)

    def test_location_conflict_skips_coach_check(self):
        checker = RecordingChecker(busy_locations=[self.wednesday])

        result = filter_conflicts(self.candidates, LOCATION_ID, COACH_ID, checker)

        self.assertEqual(len(result.valid), 5)
        self.assertEqual(len(result.conflicts), 1)
        conflict = result.conflicts[0]
        self.assertEqual(conflict.date, self.wednesday)
        self.assertTrue(conflict.reason.startswith("location busy:"))
        self.assertEqual(conflict.reason, "location busy: Booked Room, Open Gym")

        coach_starts = [call[1] for call in checker.coach_calls]
        self.assertNotIn(self.wednesday, coach_starts)
        self.assertEqual(len(checker.coach_calls), 5)

    def test_coach_conflict(self):
        checker = RecordingChecker(busy_coaches=[self.friday])

        result = filter_conflicts(self.candidates, LOCATION_ID, COACH_ID, checker)

        self.assertEqual(len(result.conflicts), 1)
        self.assertEqual(result.conflicts[0].date, self.friday)
        self.assertEqual(result.conflicts[0].reason, "coach busy: Coach Session, Open Gym")

    def test_unstaffed_classes_never_check_coach(self):
        checker = RecordingChecker(busy_coaches=[self.friday])

        result = filter_conflicts(self.candidates, LOCATION_ID, None, checker)

        self.assertEqual(len(result.valid), 6)
        self.assertEqual(checker.coach_calls, [])
        self.assertEqual(len(checker.location_calls), 6)

    def test_order_is_preserved_and_nothing_lost(self):
        checker = RecordingChecker(
            busy_locations=[self.friday],
            busy_coaches=[self.wednesday]
        )

        result = filter_conflicts(self.candidates, LOCATION_ID, COACH_ID, checker)

        self.assertEqual(len(result.valid) + len(result.conflicts), len(self.candidates))
        self.assertEqual([c.date for c in result.conflicts], [self.wednesday, self.friday])
        valid_starts = [occ.start_time for occ in result.valid]
        self.assertEqual(valid_starts, sorted(valid_starts))

    def test_checks_are_sequential_in_generation_order(self):
        checker = RecordingChecker()

        filter_conflicts(self.candidates, LOCATION_ID, None, checker)

        self.assertEqual(
            [call[1] for call in checker.location_calls],
            [occ.start_time for occ in self.candidates]
        )


class CreateRecurringSeriesTests(TestCase):
    """Test series creation against the database checker."""

    def test_create_series_with_classes(self):
        result = create_recurring_series(make_pattern(coach_id=COACH_ID))

        series = ClassSeries.objects.get(pk=result.series_id)
        self.assertEqual(result.classes_created, 6)
        self.assertEqual(result.conflicts, [])
        self.assertEqual(series.recurrence_days, [1, 3, 5])

        classes = GymClass.objects.for_series(series)
        self.assertEqual(classes.count(), 6)
        for gym_class in classes:
            self.assertTrue(gym_class.is_recurring)
            self.assertEqual(gym_class.status, 'scheduled')
            self.assertEqual(gym_class.coach_id, COACH_ID)

    def test_conflicting_occurrence_is_reported_not_persisted(self):
        make_class("Existing Pilates", datetime(2024, 1, 3, 9, 30), datetime(2024, 1, 3, 10, 30))

        result = create_recurring_series(make_pattern())

        self.assertEqual(result.classes_created, 5)
        self.assertEqual(len(result.conflicts), 1)
        self.assertEqual(result.conflicts[0].date, datetime(2024, 1, 3, 9, 0))
        self.assertEqual(result.conflicts[0].reason, "location busy: Existing Pilates")
        self.assertFalse(
            GymClass.objects.for_series(result.series_id)
            .filter(start_time=datetime(2024, 1, 3, 9, 0)).exists()
        )

    def test_coach_busy_elsewhere(self):
        make_class(
            "Private Session",
            datetime(2024, 1, 8, 8, 30),
            datetime(2024, 1, 8, 9, 15),
            location_id=OTHER_LOCATION_ID,
            coach_id=COACH_ID
        )

        result = create_recurring_series(make_pattern(coach_id=COACH_ID))

        self.assertEqual(result.classes_created, 5)
        self.assertEqual(result.conflicts[0].reason, "coach busy: Private Session")

    def test_cancelled_classes_do_not_block(self):
        make_class(
            "Cancelled Pilates",
            datetime(2024, 1, 3, 9, 0),
            datetime(2024, 1, 3, 10, 0),
            status='cancelled'
        )

        result = create_recurring_series(make_pattern())

        self.assertEqual(result.classes_created, 6)

    def test_fully_conflicted_series_still_exists(self):
        checker = RecordingChecker(
            busy_locations=[occ.start_time for occ in generate_occurrences(make_pattern())]
        )

        result = create_recurring_series(make_pattern(), checker=checker)

        self.assertEqual(result.classes_created, 0)
        self.assertEqual(len(result.conflicts), 6)
        self.assertTrue(ClassSeries.objects.filter(pk=result.series_id).exists())
        self.assertEqual(GymClass.objects.count(), 0)

    def test_classes_in_same_batch_are_not_checked_against_each_other(self):
        """Only persisted classes are seen; candidates of one run do not reserve slots."""
        checker = RecordingChecker()

        result = create_recurring_series(make_pattern(), checker=checker)

        self.assertEqual(result.classes_created, 6)
        self.assertEqual(len(checker.location_calls), 6)

    def test_invalid_pattern_raises(self):
        with self.assertRaises(ValueError):
            create_recurring_series(make_pattern(title="  "))
        with self.assertRaises(ValueError):
            create_recurring_series(make_pattern(end_time=time(8, 0)))
        with self.assertRaises(ValueError):
            create_recurring_series(make_pattern(recurrence_type='yearly'))

        self.assertEqual(ClassSeries.objects.count(), 0)


class DeleteRecurringSeriesTests(TestCase):
    """Test deleting a series with the future and all options."""

    def setUp(self):
        now = timezone.now()
        self.series = ClassSeries.objects.create(
            gym_id=GYM_ID,
            title="HIIT",
            class_type_id=CLASS_TYPE_ID,
            location_id=LOCATION_ID,
            capacity=10,
            recurrence_type='daily',
            start_date=(now - timedelta(days=1)).date(),
            start_time=time(7, 0),
            end_time=time(8, 0)
        )
        self.past = make_class(
            "HIIT", now - timedelta(days=1), now - timedelta(days=1) + timedelta(hours=1),
            series=self.series, is_recurring=True
        )
        self.future = make_class(
            "HIIT", now + timedelta(days=1), now + timedelta(days=1) + timedelta(hours=1),
            series=self.series, is_recurring=True
        )

    def test_delete_future_keeps_series_and_past(self):
        delete_recurring_series(self.series.id, 'future')

        self.assertTrue(ClassSeries.objects.filter(pk=self.series.pk).exists())
        self.assertTrue(GymClass.objects.filter(pk=self.past.pk).exists())
        self.assertFalse(GymClass.objects.filter(pk=self.future.pk).exists())

    def test_delete_all(self):
        delete_recurring_series(self.series.id, 'all')

        self.assertFalse(ClassSeries.objects.filter(pk=self.series.pk).exists())
        self.assertEqual(GymClass.objects.count(), 0)

    def test_detached_class_survives_delete_all(self):
        update_class_instance(self.future.id, ClassInstanceUpdate(), break_from_series=True)

        delete_recurring_series(self.series.id, 'all')

        self.assertTrue(GymClass.objects.filter(pk=self.future.pk).exists())
        self.assertFalse(GymClass.objects.filter(pk=self.past.pk).exists())

    def test_invalid_option(self):
        with self.assertRaises(ValueError):
            delete_recurring_series(self.series.id, 'some')

    def test_unknown_series(self):
        with self.assertRaises(ClassSeries.DoesNotExist):
            delete_recurring_series(uuid.uuid4(), 'all')


class UpdateClassInstanceTests(TestCase):
    """Test partial updates and detaching from a series."""

    def setUp(self):
        result = create_recurring_series(make_pattern(coach_id=COACH_ID))
        self.series_id = result.series_id
        self.monday = GymClass.objects.get(start_time=datetime(2024, 1, 1, 9, 0))

    def test_capacity_only_update_skips_checks(self):
        checker = RecordingChecker()

        result = update_class_instance(
            self.monday.id, ClassInstanceUpdate(capacity=30), checker=checker
        )

        self.assertTrue(result.success)
        self.assertEqual(checker.location_calls, [])
        self.assertEqual(checker.coach_calls, [])
        self.monday.refresh_from_db()
        self.assertEqual(self.monday.capacity, 30)
        self.assertEqual(self.monday.title, "Morning Yoga")
        self.assertEqual(str(self.monday.series_id), self.series_id)

    def test_time_without_location_skips_checks(self):
        checker = RecordingChecker()

        result = update_class_instance(
            self.monday.id,
            ClassInstanceUpdate(
                start_time=datetime(2024, 1, 1, 11, 0),
                end_time=datetime(2024, 1, 1, 12, 0)
            ),
            checker=checker
        )

        self.assertTrue(result.success)
        self.assertEqual(checker.location_calls, [])

    def test_moving_within_own_slot_excludes_itself(self):
        result = update_class_instance(
            self.monday.id,
            ClassInstanceUpdate(
                start_time=datetime(2024, 1, 1, 9, 30),
                end_time=datetime(2024, 1, 1, 10, 30),
                location_id=LOCATION_ID
            )
        )

        self.assertTrue(result.success)
        self.monday.refresh_from_db()
        self.assertEqual(self.monday.start_time, datetime(2024, 1, 1, 9, 30))

    def test_location_conflict_changes_nothing(self):
        result = update_class_instance(
            self.monday.id,
            ClassInstanceUpdate(
                title="Moved Yoga",
                start_time=datetime(2024, 1, 3, 9, 30),
                end_time=datetime(2024, 1, 3, 10, 30),
                location_id=LOCATION_ID
            )
        )

        self.assertFalse(result.success)
        self.assertEqual(result.error, "location busy: Morning Yoga")
        self.monday.refresh_from_db()
        self.assertEqual(self.monday.title, "Morning Yoga")
        self.assertEqual(self.monday.start_time, datetime(2024, 1, 1, 9, 0))

    def test_coach_is_not_rechecked(self):
        make_class(
            "Private Session",
            datetime(2024, 1, 2, 9, 0),
            datetime(2024, 1, 2, 10, 0),
            location_id=OTHER_LOCATION_ID,
            coach_id=COACH_ID
        )

        result = update_class_instance(
            self.monday.id,
            ClassInstanceUpdate(
                start_time=datetime(2024, 1, 2, 9, 0),
                end_time=datetime(2024, 1, 2, 10, 0),
                location_id=LOCATION_ID
            )
        )

        self.assertTrue(result.success)

    def test_break_from_series(self):
        result = update_class_instance(
            self.monday.id, ClassInstanceUpdate(title="Special Yoga"), break_from_series=True
        )

        self.assertTrue(result.success)
        self.monday.refresh_from_db()
        self.assertIsNone(self.monday.series_id)
        self.assertFalse(self.monday.is_recurring)
        self.assertEqual(self.monday.title, "Special Yoga")
        self.assertEqual(GymClass.objects.for_series(self.series_id).count(), 5)

    def test_unknown_class(self):
        with self.assertRaises(GymClass.DoesNotExist):
            update_class_instance(uuid.uuid4(), ClassInstanceUpdate(capacity=5))

    def test_start_moved_past_stored_end_is_rejected(self):
        checker = RecordingChecker()

        with self.assertRaises(ValueError):
            update_class_instance(
                self.monday.id,
                ClassInstanceUpdate(start_time=datetime(2024, 1, 1, 11, 0)),
                checker=checker
            )

        self.assertEqual(checker.location_calls, [])
        self.monday.refresh_from_db()
        self.assertEqual(self.monday.start_time, datetime(2024, 1, 1, 9, 0))

    def test_end_moved_before_stored_start_is_rejected(self):
        with self.assertRaises(ValueError):
            update_class_instance(
                self.monday.id,
                ClassInstanceUpdate(end_time=datetime(2024, 1, 1, 8, 0))
            )

    def test_clear_coach_and_description(self):
        result = update_class_instance(
            self.monday.id, ClassInstanceUpdate(coach_id=None, description=None)
        )

        self.assertTrue(result.success)
        self.monday.refresh_from_db()
        self.assertIsNone(self.monday.coach_id)
        self.assertIsNone(self.monday.description)
        self.assertEqual(self.monday.title, "Morning Yoga")

    def test_required_field_cannot_be_cleared(self):
        with self.assertRaises(ValueError):
            update_class_instance(self.monday.id, ClassInstanceUpdate(title=None))


class CreateSingleClassTests(TestCase):
    """Test standalone class creation."""

    def make_params(self, **overrides):
        values = dict(
            title="Open Mat",
            gym_id=GYM_ID,
            class_type_id=CLASS_TYPE_ID,
            location_id=LOCATION_ID,
            coach_id=COACH_ID,
            capacity=8,
            start_time=datetime(2024, 4, 2, 18, 0),
            end_time=datetime(2024, 4, 2, 19, 0),
        )
        values.update(overrides)
        return SingleClassParams(**values)

    def test_create_single_class(self):
        result = create_single_class(self.make_params())

        self.assertTrue(result.success)
        gym_class = GymClass.objects.get(pk=result.class_id)
        self.assertFalse(gym_class.is_recurring)
        self.assertIsNone(gym_class.series_id)
        self.assertEqual(gym_class.status, 'scheduled')

    def test_second_identical_class_conflicts_with_first(self):
        first = create_single_class(self.make_params())
        second = create_single_class(self.make_params())

        self.assertTrue(first.success)
        self.assertFalse(second.success)
        self.assertIsNone(second.class_id)
        self.assertEqual(second.error, "location busy: Open Mat")
        self.assertEqual(GymClass.objects.count(), 1)

    def test_coach_conflict(self):
        create_single_class(self.make_params())

        result = create_single_class(self.make_params(location_id=OTHER_LOCATION_ID, title="Other"))

        self.assertFalse(result.success)
        self.assertEqual(result.error, "coach busy: Open Mat")

    def test_location_conflict_skips_coach_check(self):
        params = self.make_params()
        checker = RecordingChecker(busy_locations=[params.start_time])

        result = create_single_class(params, checker=checker)

        self.assertFalse(result.success)
        self.assertEqual(checker.coach_calls, [])
        self.assertEqual(GymClass.objects.count(), 0)

    def test_invalid_params_raise(self):
        with self.assertRaises(ValueError):
            create_single_class(self.make_params(capacity=0))


class DatabaseAvailabilityCheckerTests(TestCase):
    """Test the default availability checker."""

    def setUp(self):
        self.checker = DatabaseAvailabilityChecker()
        self.booked = make_class(
            "Crossfit",
            datetime(2024, 7, 1, 10, 0),
            datetime(2024, 7, 1, 11, 0),
            coach_id=COACH_ID
        )

    def test_overlap_reports_conflicting_classes(self):
        result = self.checker.check_location(
            LOCATION_ID, datetime(2024, 7, 1, 10, 30), datetime(2024, 7, 1, 11, 30)
        )

        self.assertFalse(result.is_available)
        self.assertEqual(result.conflicts[0].title, "Crossfit")
        self.assertEqual(result.conflicts[0].id, str(self.booked.id))

    def test_touching_window_is_available(self):
        result = self.checker.check_location(
            LOCATION_ID, datetime(2024, 7, 1, 11, 0), datetime(2024, 7, 1, 12, 0)
        )

        self.assertTrue(result.is_available)
        self.assertEqual(result.conflicts, [])

    def test_other_location_is_available(self):
        result = self.checker.check_location(
            OTHER_LOCATION_ID, datetime(2024, 7, 1, 10, 0), datetime(2024, 7, 1, 11, 0)
        )

        self.assertTrue(result.is_available)

    def test_excluded_class_is_ignored(self):
        result = self.checker.check_location(
            LOCATION_ID,
            datetime(2024, 7, 1, 10, 0),
            datetime(2024, 7, 1, 11, 0),
            exclude_class_id=self.booked.id
        )

        self.assertTrue(result.is_available)

    def test_coach_checks(self):
        busy = self.checker.check_coach(
            COACH_ID, datetime(2024, 7, 1, 9, 30), datetime(2024, 7, 1, 10, 30)
        )
        unstaffed = self.checker.check_coach(
            None, datetime(2024, 7, 1, 9, 30), datetime(2024, 7, 1, 10, 30)
        )

        self.assertFalse(busy.is_available)
        self.assertTrue(unstaffed.is_available)

    def test_module_functions_use_database(self):
        location = check_location_availability(
            LOCATION_ID, datetime(2024, 7, 1, 10, 15), datetime(2024, 7, 1, 10, 45)
        )
        coach = check_coach_availability(
            COACH_ID, datetime(2024, 7, 1, 12, 0), datetime(2024, 7, 1, 13, 0)
        )

        self.assertEqual(location.titles(), "Crossfit")
        self.assertTrue(coach.is_available)


class ValidationTests(SimpleTestCase):
    """Test form validation helpers."""

    now = datetime(2024, 1, 1, 12, 0)

    def test_class_time(self):
        start = datetime(2024, 1, 2, 9, 0)

        self.assertIsNone(validate_class_time(start, start + timedelta(hours=1), now=self.now))
        self.assertEqual(
            validate_class_time(datetime(2023, 12, 31, 9, 0), start, now=self.now),
            "Class cannot start in the past"
        )
        self.assertEqual(
            validate_class_time(start, start, now=self.now),
            "End time must be after start time"
        )
        self.assertEqual(
            validate_class_time(start, start + timedelta(minutes=10), now=self.now),
            "Class must last at least 15 minutes"
        )
        self.assertEqual(
            validate_class_time(start, start + timedelta(hours=5), now=self.now),
            "Class cannot last more than 4 hours"
        )

    def test_small_past_tolerance(self):
        start = self.now - timedelta(minutes=3)
        self.assertIsNone(validate_class_time(start, start + timedelta(hours=1), now=self.now))

    def test_capacity(self):
        self.assertIsNone(validate_class_capacity(20))
        self.assertEqual(validate_class_capacity(0), "Capacity must be at least 1")
        self.assertEqual(validate_class_capacity(201), "Capacity cannot exceed 200")
        self.assertEqual(
            validate_class_capacity(30, location_capacity=25),
            "Capacity exceeds location limit (25)"
        )

    def test_form_collects_all_errors(self):
        errors = validate_class_form(
            title=" ",
            class_type_id=None,
            location_id=LOCATION_ID,
            capacity=0,
            start_date=date(2024, 1, 2),
            start_time=time(10, 0),
            end_time=time(9, 0),
            recurrence_type='weekly',
            recurrence_days=[],
            now=self.now
        )

        self.assertEqual(
            set(errors),
            {'title', 'class_type_id', 'capacity', 'time', 'recurrence_days'}
        )

    def test_valid_form(self):
        errors = validate_class_form(
            title="Yoga",
            class_type_id=CLASS_TYPE_ID,
            location_id=LOCATION_ID,
            capacity=10,
            start_date=date(2024, 1, 2),
            start_time=time(9, 0),
            end_time=time(10, 0),
            recurrence_type='daily',
            now=self.now
        )

        self.assertEqual(errors, {})


class GetClassesInRangeTests(TestCase):

    def test_filters_by_gym_range_and_status(self):
        make_class("In", datetime(2024, 8, 1, 9, 0), datetime(2024, 8, 1, 10, 0))
        make_class("Out", datetime(2024, 9, 1, 9, 0), datetime(2024, 9, 1, 10, 0))
        make_class(
            "Cancelled", datetime(2024, 8, 2, 9, 0), datetime(2024, 8, 2, 10, 0),
            status='cancelled'
        )
        make_class(
            "Other gym", datetime(2024, 8, 1, 9, 0), datetime(2024, 8, 1, 10, 0),
            gym_id=uuid.uuid4(), location_id=OTHER_LOCATION_ID
        )

        start = datetime(2024, 8, 1)
        end = datetime(2024, 8, 31, 23, 59)

        self.assertEqual(len(get_classes_in_range(GYM_ID, start, end)), 2)
        scheduled = get_classes_in_range(GYM_ID, start, end, 'scheduled')
        self.assertEqual([c.title for c in scheduled], ["In"])

        with self.assertRaises(ValueError):
            get_classes_in_range(GYM_ID, end, start)


class ClassSeriesAPITests(APITestCase):
    """Test series API endpoints."""

    def setUp(self):
        self.client = APIClient()
        self.payload = {
            "gym_id": str(GYM_ID),
            "title": "Evening Spin",
            "class_type_id": str(CLASS_TYPE_ID),
            "location_id": str(LOCATION_ID),
            "coach_id": str(COACH_ID),
            "capacity": 15,
            "recurrence_type": "daily",
            "start_date": "2030-03-04",
            "end_date": "2030-03-07",
            "start_time": "18:00",
            "end_time": "19:00",
        }

    def test_create_series(self):
        response = self.client.post('/api/series/', self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['classes_created'], 4)
        self.assertEqual(response.data['conflicts'], [])
        self.assertTrue(ClassSeries.objects.filter(pk=response.data['series_id']).exists())

    def test_partial_success_is_still_created(self):
        make_class("Booked", datetime(2030, 3, 5, 18, 30), datetime(2030, 3, 5, 19, 30))

        response = self.client.post('/api/series/', self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['classes_created'], 3)
        self.assertEqual(len(response.data['conflicts']), 1)
        self.assertEqual(response.data['conflicts'][0]['reason'], "location busy: Booked")

    def test_weekly_without_days_is_rejected(self):
        self.payload['recurrence_type'] = 'weekly'

        response = self.client.post('/api/series/', self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('recurrence_days', response.data)
        self.assertEqual(ClassSeries.objects.count(), 0)

    def test_get_series(self):
        created = self.client.post('/api/series/', self.payload, format='json')

        response = self.client.get(f"/api/series/{created.data['series_id']}/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['title'], "Evening Spin")
        self.assertEqual(response.data['classes_count'], 4)

    def test_delete_series_all(self):
        created = self.client.post('/api/series/', self.payload, format='json')
        series_id = created.data['series_id']

        response = self.client.delete(f'/api/series/{series_id}/?option=all')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(ClassSeries.objects.filter(pk=series_id).exists())
        self.assertEqual(GymClass.objects.count(), 0)

    def test_delete_unknown_series(self):
        response = self.client.delete(f'/api/series/{uuid.uuid4()}/?option=all')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_with_bad_option(self):
        created = self.client.post('/api/series/', self.payload, format='json')

        response = self.client.delete(f"/api/series/{created.data['series_id']}/?option=past")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class GymClassAPITests(APITestCase):
    """Test class API endpoints."""

    def setUp(self):
        self.client = APIClient()
        self.payload = {
            "gym_id": str(GYM_ID),
            "title": "Kettlebells",
            "class_type_id": str(CLASS_TYPE_ID),
            "location_id": str(LOCATION_ID),
            "capacity": 12,
            "start_time": "2030-05-06T07:00:00",
            "end_time": "2030-05-06T08:00:00",
        }

    def test_create_and_conflict(self):
        first = self.client.post('/api/classes/', self.payload, format='json')
        second = self.client.post('/api/classes/', self.payload, format='json')

        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertTrue(first.data['success'])
        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(second.data['error'], "location busy: Kettlebells")

    def test_past_class_is_rejected(self):
        self.payload['start_time'] = "2001-05-06T07:00:00"
        self.payload['end_time'] = "2001-05-06T08:00:00"

        response = self.client.post('/api/classes/', self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_classes_in_range(self):
        self.client.post('/api/classes/', self.payload, format='json')

        response = self.client.get('/api/classes/', {
            'gym_id': str(GYM_ID),
            'start': '2030-05-01T00:00:00',
            'end': '2030-05-31T23:59:59'
        })

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['title'], "Kettlebells")

    def test_patch_and_break_from_series(self):
        result = create_recurring_series(make_pattern(
            start_date=date(2030, 5, 6), end_date=date(2030, 5, 10)
        ))
        gym_class = GymClass.objects.for_series(result.series_id).first()

        response = self.client.patch(
            f'/api/classes/{gym_class.id}/',
            {"capacity": 25, "break_from_series": True},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['capacity'], 25)
        self.assertIsNone(response.data['series_id'])
        self.assertFalse(response.data['is_recurring'])
        self.assertTrue(response.data['is_standalone'])

    def test_patch_conflict(self):
        first = self.client.post('/api/classes/', self.payload, format='json')
        self.payload['start_time'] = "2030-05-06T09:00:00"
        self.payload['end_time'] = "2030-05-06T10:00:00"
        self.payload['title'] = "Rowing"
        second = self.client.post('/api/classes/', self.payload, format='json')

        response = self.client.patch(
            f"/api/classes/{second.data['class_id']}/",
            {
                "start_time": "2030-05-06T07:30:00",
                "end_time": "2030-05-06T08:30:00",
                "location_id": str(LOCATION_ID),
            },
            format='json'
        )

        self.assertTrue(first.data['success'])
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error'], "location busy: Kettlebells")

    def test_patch_start_after_stored_end_is_rejected(self):
        created = self.client.post('/api/classes/', self.payload, format='json')

        response = self.client.patch(
            f"/api/classes/{created.data['class_id']}/",
            {"start_time": "2030-05-06T11:00:00"},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('end_time', response.data)
        gym_class = GymClass.objects.get(pk=created.data['class_id'])
        self.assertEqual(gym_class.start_time, datetime(2030, 5, 6, 7, 0))

    def test_patch_enforces_capacity_and_duration_limits(self):
        created = self.client.post('/api/classes/', self.payload, format='json')
        url = f"/api/classes/{created.data['class_id']}/"

        too_many = self.client.patch(url, {"capacity": 500}, format='json')
        too_short = self.client.patch(
            url,
            {"start_time": "2030-05-06T07:00:00", "end_time": "2030-05-06T07:05:00"},
            format='json'
        )

        self.assertEqual(too_many.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(too_many.data['capacity'][0], "Capacity cannot exceed 200")
        self.assertEqual(too_short.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(too_short.data['time'][0], "Class must last at least 15 minutes")
        gym_class = GymClass.objects.get(pk=created.data['class_id'])
        self.assertEqual(gym_class.capacity, 12)

    def test_patch_null_coach_unstaffs_class(self):
        self.payload['coach_id'] = str(COACH_ID)
        self.payload['description'] = "Bring gloves"
        created = self.client.post('/api/classes/', self.payload, format='json')

        response = self.client.patch(
            f"/api/classes/{created.data['class_id']}/",
            {"coach_id": None, "description": None},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['coach_id'])
        self.assertIsNone(response.data['description'])
        self.assertEqual(response.data['title'], "Kettlebells")
