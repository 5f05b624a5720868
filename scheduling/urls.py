"""
URL routing for the scheduling API.
"""

from django.urls import path
from .views import (
    ClassSeriesCreateView,
    ClassSeriesDetailView,
    GymClassListView,
    GymClassDetailView,
)

urlpatterns = [
    path('series/', ClassSeriesCreateView.as_view(), name='series-create'),
    path('series/<uuid:pk>/', ClassSeriesDetailView.as_view(), name='series-detail'),
    path('classes/', GymClassListView.as_view(), name='class-list-create'),
    path('classes/<uuid:pk>/', GymClassDetailView.as_view(), name='class-detail'),
]
