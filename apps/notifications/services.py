# apps/notifications/services.py
import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


def get_broadcaster():
    """Instantiate the broadcaster named by REALTIME_BROADCASTER"""
    path = getattr(
        settings,
        'REALTIME_BROADCASTER',
        'apps.notifications.broadcasters.DatabaseBroadcaster'
    )
    return import_string(path)()


class EventNotifier:
    """
    Best-effort real-time notifications.

    Events are dispatched after the surrounding database transaction commits,
    so a rolled-back mutation never produces an event. Delivery errors are
    logged and dropped; they never reach the caller.
    """

    def __init__(self, broadcaster=None):
        self._broadcaster = broadcaster

    @property
    def broadcaster(self):
        if self._broadcaster is None:
            self._broadcaster = get_broadcaster()
        return self._broadcaster

    def build(self, event_type, entity_type, entity_id, data=None):
        return {
            'event': event_type,
            'entity_type': entity_type,
            'entity_id': entity_id,
            'data': data or {},
            'timestamp': timezone.now().isoformat(),
        }

    def emit(self, event_type, entity_type, entity_id, data=None):
        event = self.build(event_type, entity_type, entity_id, data)
        transaction.on_commit(lambda: self.dispatch(event))
        return event

    def dispatch(self, event):
        try:
            self.broadcaster.send(event)
        except Exception as e:
            logger.warning(f"Failed to emit {event['event']} for {event['entity_type']} {event['entity_id']}: {str(e)}")
            return False
        return True
