# apps/payments/models.py
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from core.constants import PaymentModes, PaymentStatus


class Transaction(models.Model):
    """Billing record for one customer visit"""

    customer = models.OneToOneField(
        'customers.Customer',
        on_delete=models.CASCADE,
        related_name='transaction'
    )
    or_number = models.CharField(max_length=50, db_index=True)
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    payment_mode = models.CharField(
        max_length=20,
        choices=PaymentModes.choices,
        default=PaymentModes.CASH
    )
    sales_agent = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sales_transactions'
    )
    cashier = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='cashier_transactions'
    )

    # Derived from settlements; written only by the ledger
    paid_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.UNPAID
    )

    transaction_date = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'transactions'
        ordering = ['-transaction_date']
        indexes = [
            models.Index(fields=['transaction_date'], name='transactions_date_idx'),
            models.Index(fields=['payment_mode', 'transaction_date'], name='transactions_mode_idx'),
            models.Index(fields=['payment_status'], name='transactions_status_idx'),
        ]

    def __str__(self):
        return f"{self.or_number} - {self.amount} ({self.payment_status})"

    @property
    def balance_amount(self):
        return self.amount - self.paid_amount

    @property
    def is_paid(self):
        return self.payment_status == PaymentStatus.PAID


class Settlement(models.Model):
    """One payment against a transaction. Rows are never updated."""

    transaction = models.ForeignKey(
        Transaction,
        on_delete=models.CASCADE,
        related_name='settlements'
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    payment_mode = models.CharField(max_length=20, choices=PaymentModes.choices)
    cashier = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='settlements'
    )
    notes = models.TextField(blank=True)
    paid_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'payment_settlements'
        ordering = ['paid_at', 'id']

    def __str__(self):
        return f"{self.transaction.or_number}: {self.amount} via {self.payment_mode}"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValueError('Settlements are append-only')
        super().save(*args, **kwargs)
