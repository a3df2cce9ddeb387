# apps/notifications/broadcasters.py
"""
Delivery backends for real-time events.

A broadcaster receives the fully built event dict and pushes it somewhere.
Failures are raised as NotificationError; EventNotifier decides what to do
with them.
"""
import json
import logging

import requests
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import DatabaseError

from core.exceptions import NotificationError
from .models import RealtimeEvent

logger = logging.getLogger(__name__)


class BaseBroadcaster:
    def send(self, event):
        raise NotImplementedError


class DatabaseBroadcaster(BaseBroadcaster):
    """Store events in the outbox table for polling clients"""

    def send(self, event):
        try:
            RealtimeEvent.objects.create(
                event_type=event['event'],
                entity_type=event['entity_type'],
                entity_id=str(event['entity_id']),
                payload=json.loads(json.dumps(event, cls=DjangoJSONEncoder)),
            )
        except DatabaseError as e:
            raise NotificationError(f"Could not store event {event['event']}: {str(e)}")


class WebhookBroadcaster(BaseBroadcaster):
    """POST events to an external push gateway"""

    def __init__(self, url=None, timeout=None):
        self.url = url or settings.REALTIME_WEBHOOK_URL
        self.timeout = timeout or getattr(settings, 'REALTIME_WEBHOOK_TIMEOUT', 5)
        self.session = requests.Session()

    def send(self, event):
        if not self.url:
            raise NotificationError('REALTIME_WEBHOOK_URL is not configured')

        try:
            response = self.session.post(
                self.url,
                data=json.dumps(event, cls=DjangoJSONEncoder),
                headers={'Content-Type': 'application/json'},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise NotificationError(f"Webhook delivery failed: {str(e)}")

        if response.status_code >= 400:
            raise NotificationError(f"Webhook returned {response.status_code}: {response.text[:200]}")


class LoggingBroadcaster(BaseBroadcaster):
    def send(self, event):
        logger.info(f"[realtime] {event['event']} {event['entity_type']}:{event['entity_id']}")
