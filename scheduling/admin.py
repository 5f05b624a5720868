"""
Admin configuration for the scheduling app.
"""

from django.contrib import admin
from .models import ClassSeries, GymClass


@admin.register(ClassSeries)
class ClassSeriesAdmin(admin.ModelAdmin):
    """Admin interface for ClassSeries model."""

    list_display = ['title', 'recurrence_type', 'start_date', 'end_date', 'start_time', 'end_time']
    list_filter = ['recurrence_type', 'created_at']
    search_fields = ['title', 'description']
    date_hierarchy = 'start_date'

    fieldsets = (
        ('Basic Information', {
            'fields': ('gym_id', 'title', 'description', 'capacity')
        }),
        ('Resources', {
            'fields': ('class_type_id', 'location_id', 'coach_id')
        }),
        ('Recurrence Rules', {
            'fields': ('recurrence_type', 'recurrence_days', 'start_time', 'end_time')
        }),
        ('Series Boundaries', {
            'fields': ('start_date', 'end_date')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    readonly_fields = ['created_at', 'updated_at']


@admin.register(GymClass)
class GymClassAdmin(admin.ModelAdmin):
    """Admin interface for GymClass model."""

    list_display = ['title', 'start_time', 'end_time', 'status', 'is_recurring', 'series']
    list_filter = ['status', 'is_recurring', 'created_at']
    search_fields = ['title', 'description']
    date_hierarchy = 'start_time'

    fieldsets = (
        ('Basic Information', {
            'fields': ('gym_id', 'title', 'description', 'capacity', 'series')
        }),
        ('Resources', {
            'fields': ('class_type_id', 'location_id', 'coach_id')
        }),
        ('Schedule', {
            'fields': ('start_time', 'end_time')
        }),
        ('Status', {
            'fields': ('status', 'is_recurring')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    readonly_fields = ['created_at', 'updated_at']
