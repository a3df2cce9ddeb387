# apps/queues/urls.py
from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import QueueViewSet, CounterViewSet

router = SimpleRouter()
router.register(r'counters', CounterViewSet, basename='counters')
router.register(r'', QueueViewSet, basename='queue')

urlpatterns = [
    path('', include(router.urls)),
]
