"""Views for the class scheduling API."""

from dataclasses import fields

from django.shortcuts import get_object_or_404

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import ClassSeries, GymClass
from .serializers import (
    ClassSeriesReadSerializer,
    ClassSeriesCreateSerializer,
    GymClassReadSerializer,
    GymClassCreateSerializer,
    GymClassUpdateSerializer,
    SeriesCreationResultSerializer,
    SeriesDeleteQuerySerializer,
    DateRangeQuerySerializer,
)
from . import services
from .types import ClassInstanceUpdate, RecurringClassPattern, SingleClassParams

UPDATE_FIELDS = tuple(f.name for f in fields(ClassInstanceUpdate))


class ClassSeriesCreateView(APIView):
    """
    Create a recurring class series.

    POST /api/series/ - Create a series and its non-conflicting classes
    """

    def post(self, request):
        """Create a series; conflicts are part of a successful response."""
        serializer = ClassSeriesCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        pattern = RecurringClassPattern(
            title=data['title'],
            description=data.get('description'),
            gym_id=data['gym_id'],
            class_type_id=data['class_type_id'],
            location_id=data['location_id'],
            coach_id=data.get('coach_id'),
            capacity=data['capacity'],
            recurrence_type=data['recurrence_type'],
            recurrence_days=data.get('recurrence_days', []),
            start_date=data['start_date'],
            end_date=data.get('end_date'),
            start_time=data['start_time'],
            end_time=data['end_time'],
            max_occurrences=data['max_occurrences']
        )
        result = services.create_recurring_series(pattern)

        response_serializer = SeriesCreationResultSerializer(result)
        return Response(response_serializer.data, status=status.HTTP_201_CREATED)


class ClassSeriesDetailView(APIView):
    """
    Retrieve or delete a class series.

    GET /api/series/{id}/ - Retrieve series
    DELETE /api/series/{id}/?option=future|all - Delete future or all classes
    """

    def get(self, request, pk):
        series = get_object_or_404(ClassSeries, pk=pk)
        serializer = ClassSeriesReadSerializer(series)
        return Response(serializer.data)

    def delete(self, request, pk):
        """Delete a series."""
        series = get_object_or_404(ClassSeries, pk=pk)
        query_serializer = SeriesDeleteQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)

        option = query_serializer.validated_data['option']
        services.delete_recurring_series(series.pk, option)

        return Response({
            'message': f'Series "{series.title}" has been deleted ({option}).'
        }, status=status.HTTP_200_OK)


class GymClassListView(APIView):
    """
    List classes within a date range or create a standalone class.

    GET /api/classes/?gym_id=G&start=X&end=Y - List a gym's classes in range
    POST /api/classes/ - Create a standalone class
    """

    def get(self, request):
        """List classes within a date range."""
        query_serializer = DateRangeQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)

        data = query_serializer.validated_data
        classes = services.get_classes_in_range(
            data['gym_id'],
            data['start'],
            data['end'],
            data.get('status')
        )

        serializer = GymClassReadSerializer(classes, many=True)
        return Response(serializer.data)

    def post(self, request):
        """Create a standalone class unless its location or coach is busy."""
        serializer = GymClassCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        result = services.create_single_class(SingleClassParams(
            title=data['title'],
            description=data.get('description'),
            gym_id=data['gym_id'],
            class_type_id=data['class_type_id'],
            location_id=data['location_id'],
            coach_id=data.get('coach_id'),
            capacity=data['capacity'],
            start_time=data['start_time'],
            end_time=data['end_time']
        ))

        if not result.success:
            return Response(
                {'success': False, 'error': result.error},
                status=status.HTTP_409_CONFLICT
            )
        return Response(
            {'success': True, 'class_id': result.class_id},
            status=status.HTTP_201_CREATED
        )


class GymClassDetailView(APIView):
    """
    Retrieve or update a class instance.

    GET /api/classes/{id}/ - Retrieve class
    PATCH /api/classes/{id}/ - Update class, optionally breaking it from its series
    """

    def get(self, request, pk):
        gym_class = get_object_or_404(GymClass, pk=pk)
        serializer = GymClassReadSerializer(gym_class)
        return Response(serializer.data)

    def patch(self, request, pk):
        """Update a class instance."""
        gym_class = get_object_or_404(GymClass, pk=pk)
        serializer = GymClassUpdateSerializer(gym_class, data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        updates = ClassInstanceUpdate(**{
            field_name: data[field_name]
            for field_name in UPDATE_FIELDS
            if field_name in data
        })
        try:
            result = services.update_class_instance(
                gym_class.pk,
                updates,
                break_from_series=data['break_from_series']
            )
        except ValueError as exc:
            return Response(
                {'success': False, 'error': str(exc)},
                status=status.HTTP_400_BAD_REQUEST
            )

        if not result.success:
            return Response(
                {'success': False, 'error': result.error},
                status=status.HTTP_409_CONFLICT
            )

        gym_class.refresh_from_db()
        response_serializer = GymClassReadSerializer(gym_class)
        return Response(response_serializer.data)
