# apps/notifications/models.py

from django.db import models


class RealtimeEvent(models.Model):
    """Outbox row for live UI updates; clients poll with ?after=<id>"""

    event_type = models.CharField(max_length=50)
    entity_type = models.CharField(max_length=50)
    entity_id = models.CharField(max_length=50)
    payload = models.JSONField(default=dict)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'realtime_events'
        ordering = ['id']
        indexes = [
            models.Index(fields=['created_at'], name='realtime_created_idx'),
            models.Index(fields=['event_type', 'id'], name='realtime_type_idx'),
        ]

    def __str__(self):
        return f"{self.event_type} {self.entity_type}:{self.entity_id}"
