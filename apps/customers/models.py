# apps/customers/models.py

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.constants import QueueStatus, DistributionType
from .types import PriorityFlags, Prescription, PaymentInfo, EstimatedTime


class Customer(models.Model):
    """Optical shop customer and their place in the service queue"""

    # Identity
    or_number = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=150)
    contact_number = models.CharField(max_length=30, blank=True)
    email = models.EmailField(blank=True)
    age = models.PositiveSmallIntegerField(null=True, blank=True)
    address = models.TextField(blank=True)
    occupation = models.CharField(max_length=100, blank=True)

    # Order
    distribution_info = models.CharField(
        max_length=20,
        choices=DistributionType.choices,
        default=DistributionType.PICKUP
    )
    sales_agent = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='registered_customers'
    )
    doctor_assigned = models.CharField(max_length=150, blank=True)
    prescription = models.JSONField(default=dict, blank=True)
    grade_type = models.CharField(max_length=100, blank=True)
    lens_type = models.CharField(max_length=100, blank=True)
    frame_code = models.CharField(max_length=100, blank=True)
    estimated_time = models.JSONField(default=dict, blank=True)
    payment_info = models.JSONField(default=dict, blank=True)
    remarks = models.TextField(blank=True)
    priority_flags = models.JSONField(default=dict, blank=True)

    # Queue
    queue_status = models.CharField(
        max_length=20,
        choices=QueueStatus.choices,
        default=QueueStatus.WAITING
    )
    token_number = models.PositiveIntegerField()
    token_date = models.DateField(default=timezone.localdate)
    manual_position = models.PositiveIntegerField(null=True, blank=True)
    cancellation_reason = models.TextField(blank=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'customers'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['token_date', 'token_number'],
                name='unique_daily_token'
            ),
        ]
        indexes = [
            models.Index(fields=['queue_status', 'created_at'], name='customers_status_idx'),
            models.Index(fields=['sales_agent', 'created_at'], name='customers_agent_idx'),
        ]

    def __str__(self):
        return f"#{self.token_number:03d} {self.name} ({self.get_queue_status_display()})"

    # Typed views over the JSON columns

    @property
    def flags(self):
        return PriorityFlags.from_dict(self.priority_flags)

    @flags.setter
    def flags(self, value):
        self.priority_flags = value.to_dict()

    @property
    def rx(self):
        return Prescription.from_dict(self.prescription)

    @rx.setter
    def rx(self, value):
        self.prescription = value.to_dict()

    @property
    def payment(self):
        return PaymentInfo.from_dict(self.payment_info)

    @payment.setter
    def payment(self, value):
        self.payment_info = value.to_dict()

    @property
    def eta(self):
        return EstimatedTime.from_dict(self.estimated_time)

    @eta.setter
    def eta(self, value):
        self.estimated_time = value.to_dict()

    @property
    def is_priority(self):
        return self.flags.is_priority

    @property
    def formatted_token(self):
        return f"{self.token_number:03d}"
