# apps/notifications/tasks.py
import logging
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.utils import timezone

from .models import RealtimeEvent

logger = logging.getLogger(__name__)


@shared_task
def purge_realtime_events():
    """Delete outbox rows older than the retention window"""
    days = getattr(settings, 'REALTIME_EVENT_RETENTION_DAYS', 7)
    cutoff = timezone.now() - timedelta(days=days)
    deleted, _ = RealtimeEvent.objects.filter(created_at__lt=cutoff).delete()
    logger.info(f"Purged {deleted} realtime events older than {days} days")
    return deleted
