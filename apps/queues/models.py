# apps/queues/models.py

from django.conf import settings
from django.db import models

from core.constants import QueueEventType, ResetPolicy


class Counter(models.Model):
    """Physical service point"""

    name = models.CharField(max_length=50, unique=True)
    display_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    current_customer = models.ForeignKey(
        'customers.Customer',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='serving_counters'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'counters'
        ordering = ['display_order', 'name']

    def __str__(self):
        return self.name

    @property
    def is_available(self):
        return self.is_active and self.current_customer_id is None


class QueueEvent(models.Model):
    """Append-only analytics record of a queue status change"""

    customer = models.ForeignKey(
        'customers.Customer',
        on_delete=models.CASCADE,
        related_name='queue_events'
    )
    event_type = models.CharField(max_length=20, choices=QueueEventType.choices)
    counter = models.ForeignKey(
        Counter,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='queue_events'
    )
    queue_position = models.PositiveIntegerField(null=True, blank=True)
    wait_time_minutes = models.PositiveIntegerField(null=True, blank=True)
    service_time_minutes = models.PositiveIntegerField(null=True, blank=True)
    is_priority = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'queue_events'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['customer', 'event_type'], name='queue_event_customer_idx'),
            models.Index(fields=['event_type', 'created_at'], name='queue_event_type_idx'),
        ]

    def __str__(self):
        return f"{self.customer_id} {self.event_type}"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValueError('Queue events are append-only')
        super().save(*args, **kwargs)


class QueueResetLog(models.Model):
    """Administrative or scheduled queue reset"""

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='queue_resets'
    )
    reason = models.TextField(blank=True)
    policy = models.CharField(max_length=20, choices=ResetPolicy.CHOICES)
    cancelled_count = models.PositiveIntegerField(default=0)
    deleted_count = models.PositiveIntegerField(default=0)
    released_counters = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'queue_reset_logs'
        ordering = ['-created_at']

    def __str__(self):
        return f"Reset ({self.policy}) at {self.created_at}"
