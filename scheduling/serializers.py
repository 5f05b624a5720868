"""
Serializers for the class scheduling API.
"""

from rest_framework import serializers

from .models import ClassSeries, GymClass
from .types import DEFAULT_MAX_OCCURRENCES, DELETE_FUTURE, DELETE_OPTIONS, RECURRENCE_TYPES
from .validation import validate_class_capacity, validate_class_form, validate_class_time


class ClassSeriesReadSerializer(serializers.ModelSerializer):
    """Serializer for reading/displaying ClassSeries (output)."""

    classes_count = serializers.SerializerMethodField()

    class Meta:
        model = ClassSeries
        fields = [
            'id',
            'gym_id',
            'title',
            'description',
            'class_type_id',
            'location_id',
            'coach_id',
            'capacity',
            'recurrence_type',
            'recurrence_days',
            'start_date',
            'end_date',
            'start_time',
            'end_time',
            'classes_count',
            'created_at',
            'updated_at',
        ]

    def get_classes_count(self, obj):
        return obj.classes.count()


class ClassSeriesCreateSerializer(serializers.Serializer):
    """Serializer for creating a recurring class series."""

    gym_id = serializers.UUIDField()
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    class_type_id = serializers.UUIDField()
    location_id = serializers.UUIDField()
    coach_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    capacity = serializers.IntegerField(min_value=1)
    location_capacity = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    recurrence_type = serializers.ChoiceField(choices=list(RECURRENCE_TYPES))
    recurrence_days = serializers.ListField(
        child=serializers.IntegerField(min_value=1, max_value=7),
        required=False,
        default=list
    )
    start_date = serializers.DateField()
    end_date = serializers.DateField(required=False, allow_null=True, default=None)
    start_time = serializers.TimeField(format='%H:%M')
    end_time = serializers.TimeField(format='%H:%M')
    max_occurrences = serializers.IntegerField(min_value=1, default=DEFAULT_MAX_OCCURRENCES)

    def validate(self, data):
        """Validate the whole form and the date bounds."""
        errors = validate_class_form(
            title=data['title'],
            class_type_id=data['class_type_id'],
            location_id=data['location_id'],
            capacity=data['capacity'],
            start_date=data['start_date'],
            start_time=data['start_time'],
            end_time=data['end_time'],
            recurrence_type=data['recurrence_type'],
            recurrence_days=data.get('recurrence_days'),
            location_capacity=data.get('location_capacity'),
        )
        if errors:
            raise serializers.ValidationError(errors)

        end_date = data.get('end_date')
        if end_date and end_date < data['start_date']:
            raise serializers.ValidationError({
                'end_date': 'End date cannot be before start date.'
            })

        return data


class GymClassReadSerializer(serializers.ModelSerializer):
    """Serializer for reading/displaying GymClass (output)."""

    series_id = serializers.UUIDField(allow_null=True, read_only=True)
    is_standalone = serializers.BooleanField(read_only=True)
    duration_minutes = serializers.IntegerField(read_only=True)

    class Meta:
        model = GymClass
        fields = [
            'id',
            'gym_id',
            'title',
            'description',
            'class_type_id',
            'location_id',
            'coach_id',
            'capacity',
            'start_time',
            'end_time',
            'duration_minutes',
            'status',
            'is_recurring',
            'is_standalone',
            'series_id',
            'created_at',
            'updated_at',
        ]


class GymClassCreateSerializer(serializers.Serializer):
    """Serializer for creating a standalone class."""

    gym_id = serializers.UUIDField()
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    class_type_id = serializers.UUIDField()
    location_id = serializers.UUIDField()
    coach_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    capacity = serializers.IntegerField(min_value=1)
    location_capacity = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    start_time = serializers.DateTimeField()
    end_time = serializers.DateTimeField()

    def validate(self, data):
        errors = {}

        time_error = validate_class_time(data['start_time'], data['end_time'])
        if time_error:
            errors['time'] = time_error

        capacity_error = validate_class_capacity(data['capacity'], data.get('location_capacity'))
        if capacity_error:
            errors['capacity'] = capacity_error

        if errors:
            raise serializers.ValidationError(errors)
        return data


class GymClassUpdateSerializer(serializers.Serializer):
    """
    Serializer for updating a class instance.

    Pass the class being updated as the instance so a partial window is
    checked against the stored start and end times.
    """

    title = serializers.CharField(max_length=200, required=False)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    location_id = serializers.UUIDField(required=False)
    coach_id = serializers.UUIDField(required=False, allow_null=True)
    capacity = serializers.IntegerField(min_value=1, required=False)
    location_capacity = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    start_time = serializers.DateTimeField(required=False)
    end_time = serializers.DateTimeField(required=False)
    break_from_series = serializers.BooleanField(required=False, default=False)

    def validate(self, data):
        errors = {}

        if 'start_time' in data and 'end_time' in data:
            time_error = validate_class_time(data['start_time'], data['end_time'])
            if time_error:
                errors['time'] = time_error
        elif self.instance is not None:
            start_time = data.get('start_time', self.instance.start_time)
            end_time = data.get('end_time', self.instance.end_time)
            if end_time <= start_time:
                errors['end_time'] = 'End time must be after start time.'

        if 'capacity' in data:
            capacity_error = validate_class_capacity(data['capacity'], data.get('location_capacity'))
            if capacity_error:
                errors['capacity'] = capacity_error

        if errors:
            raise serializers.ValidationError(errors)
        return data


class SeriesDeleteQuerySerializer(serializers.Serializer):
    """Serializer for series delete query parameters."""

    option = serializers.ChoiceField(choices=list(DELETE_OPTIONS), default=DELETE_FUTURE)


class DateRangeQuerySerializer(serializers.Serializer):
    """Serializer for calendar range query parameters."""

    gym_id = serializers.UUIDField(required=True)
    start = serializers.DateTimeField(required=True)
    end = serializers.DateTimeField(required=True)
    status = serializers.ChoiceField(
        choices=['scheduled', 'cancelled', 'completed'],
        required=False,
        allow_null=True
    )

    def validate(self, data):
        """Ensure start is before end."""
        if data['start'] >= data['end']:
            raise serializers.ValidationError(
                "Start datetime must be before end datetime."
            )
        return data


class ConflictRecordSerializer(serializers.Serializer):
    date = serializers.DateTimeField()
    reason = serializers.CharField()


class SeriesCreationResultSerializer(serializers.Serializer):
    series_id = serializers.UUIDField()
    classes_created = serializers.IntegerField()
    conflicts = ConflictRecordSerializer(many=True)
