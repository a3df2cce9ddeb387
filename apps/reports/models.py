# apps/reports/models.py
from decimal import Decimal

from django.conf import settings
from django.db import models

MONEY = {'max_digits': 14, 'decimal_places': 2, 'default': Decimal('0.00')}


class DailyReport(models.Model):
    """End-of-day cash report, one per date"""

    date = models.DateField(unique=True)

    # Totals per payment mode
    total_cash = models.DecimalField(**MONEY)
    total_gcash = models.DecimalField(**MONEY)
    total_maya = models.DecimalField(**MONEY)
    total_credit_card = models.DecimalField(**MONEY)
    total_bank_transfer = models.DecimalField(**MONEY)

    # Cash drawer
    petty_cash_start = models.DecimalField(**MONEY)
    petty_cash_end = models.DecimalField(**MONEY)
    expenses = models.JSONField(default=list, blank=True)
    funds = models.JSONField(default=list, blank=True)

    cash_turnover = models.DecimalField(**MONEY)
    transaction_count = models.PositiveIntegerField(default=0)

    generated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='daily_reports'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'daily_reports'
        ordering = ['-date']

    def __str__(self):
        return f"Daily report {self.date}"
