# core/constants.py

from django.db import models


class UserRoles:
    """User role constants for RBAC"""
    ADMIN = 'admin'
    SALES = 'sales'
    CASHIER = 'cashier'

    CHOICES = [
        (ADMIN, 'Administrator'),
        (SALES, 'Sales Agent'),
        (CASHIER, 'Cashier'),
    ]


class QueueStatus(models.TextChoices):
    WAITING = 'waiting', 'Waiting'
    SERVING = 'serving', 'Serving'
    PROCESSING = 'processing', 'Processing'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'


class PaymentModes(models.TextChoices):
    CASH = 'cash', 'Cash'
    GCASH = 'gcash', 'GCash'
    MAYA = 'maya', 'Maya'
    CREDIT_CARD = 'credit_card', 'Credit Card'
    BANK_TRANSFER = 'bank_transfer', 'Bank Transfer'


class PaymentStatus(models.TextChoices):
    UNPAID = 'unpaid', 'Unpaid'
    PARTIAL = 'partial', 'Partial'
    PAID = 'paid', 'Paid'


class DistributionType(models.TextChoices):
    LALAMOVE = 'lalamove', 'Lalamove'
    LBC = 'lbc', 'LBC'
    PICKUP = 'pickup', 'Pick Up'


class QueueEventType(models.TextChoices):
    JOINED = 'joined', 'Joined'
    CALLED = 'called', 'Called'
    SERVED = 'served', 'Served'
    CANCELLED = 'cancelled', 'Cancelled'


class ResetPolicy:
    """What resetQueue does with customers still in the queue"""
    CANCEL = 'cancel'
    DELETE = 'delete'

    CHOICES = [
        (CANCEL, 'Cancel active entries'),
        (DELETE, 'Delete unpaid active entries'),
    ]


class EventTypes:
    """Outbound real-time event names (wire contract)"""
    CUSTOMER_CREATED = 'customer_created'
    QUEUE_UPDATED = 'queue_updated'
    TRANSACTION_CREATED = 'transaction_created'
    TRANSACTION_UPDATED = 'transaction_updated'
    PAYMENT_STATUS_UPDATED = 'payment_status_updated'
    SETTLEMENT_CREATED = 'settlementCreated'
