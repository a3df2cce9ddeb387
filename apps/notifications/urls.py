# apps/notifications/urls.py
from django.urls import path

from .views import RealtimeEventListView

urlpatterns = [
    path('events/', RealtimeEventListView.as_view(), name='realtime-events'),
]
