# apps/audit/urls.py
from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import ActivityLogViewSet

router = SimpleRouter()
router.register(r'activity', ActivityLogViewSet, basename='activity')

urlpatterns = [
    path('', include(router.urls)),
]
