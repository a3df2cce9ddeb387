"""
Tests for report aggregation, the daily cash report and Excel exports.
"""
from datetime import timedelta
from decimal import Decimal
from io import BytesIO

import pandas as pd
import pytest
from django.utils import timezone

from core.constants import PaymentModes
from core.exceptions import ValidationError
from core.utils.excel_export import export_to_excel, to_dataframe
from apps.payments.services import LedgerService
from apps.reports.models import DailyReport
from apps.reports.services import ReportService

pytestmark = pytest.mark.django_db


@pytest.fixture
def today():
    return timezone.localdate()


@pytest.fixture
def sales(make_customer, make_transaction, sales_agent, notifier):
    """Three transactions today: cash 1000 (paid), gcash 500 (partial), cash 250 (unpaid)"""
    ledger = LedgerService(notifier=notifier)
    paid = make_transaction(make_customer('A'), amount='1000.00', sales_agent=sales_agent)
    partial = make_transaction(make_customer('B'), amount='500.00', payment_mode=PaymentModes.GCASH)
    make_transaction(make_customer('C'), amount='250.00', sales_agent=sales_agent)
    ledger.record_settlement(paid.pk, '1000', PaymentModes.CASH)
    ledger.record_settlement(partial.pk, '100', PaymentModes.GCASH)


class TestDailySummary:
    def test_totals(self, sales, today):
        summary = ReportService.daily_summary(today)

        assert summary['total_amount'] == Decimal('1750.00')
        assert summary['total_transactions'] == 3
        assert summary['paid_transactions'] == 1
        assert summary['partial_transactions'] == 1
        assert summary['unpaid_transactions'] == 1
        assert summary['registered_customers'] == 3

    def test_every_mode_present(self, sales, today):
        modes = ReportService.daily_summary(today)['payment_mode_breakdown']

        assert set(modes) == set(PaymentModes.values)
        assert modes[PaymentModes.CASH] == {'amount': Decimal('1250.00'), 'count': 2}
        assert modes[PaymentModes.MAYA] == {'amount': Decimal('0.00'), 'count': 0}

    def test_agents(self, sales, today, sales_agent):
        agents = ReportService.daily_summary(today)['sales_agent_breakdown']

        assert agents[0]['sales_agent_id'] == sales_agent.pk
        assert agents[0]['amount'] == Decimal('1250.00')
        assert agents[1]['agent_name'] == 'Unassigned'

    def test_empty_day(self, today):
        summary = ReportService.daily_summary(today - timedelta(days=30))
        assert summary['total_amount'] == Decimal('0.00')
        assert summary['total_transactions'] == 0


class TestMonthlyReport:
    def test_breakdown(self, sales, today):
        report = ReportService.monthly_report(today.year, today.month)

        assert report['total_amount'] == Decimal('1750.00')
        assert report['daily_breakdown'][0]['date'] == today.isoformat()
        assert report['daily_breakdown'][0]['transactions'] == 3
        assert len(report['top_sales_agents']) == 1

    def test_bad_month(self):
        with pytest.raises(ValidationError):
            ReportService.monthly_report(2024, 13)


class TestPaymentModeStats:
    def test_percentages(self, sales, today):
        rows = {row['payment_mode']: row for row in ReportService.payment_mode_stats(today, today)}

        assert rows[PaymentModes.CASH]['percentage'] == Decimal('71.43')
        assert rows[PaymentModes.GCASH]['percentage'] == Decimal('28.57')
        assert rows[PaymentModes.GCASH]['transaction_count'] == 1

    def test_reversed_range(self, today):
        with pytest.raises(ValidationError):
            ReportService.payment_mode_stats(today, today - timedelta(days=1))


class TestDailyCashReport:
    def test_cash_turnover(self, sales, today):
        report = ReportService.generate_daily_report(
            today,
            expenses=[{'description': 'Cleaning supplies', 'amount': '300'}],
            funds=[{'description': 'Owner top-up', 'amount': '200'}],
            petty_cash_start='500',
            petty_cash_end='400',
        )

        # (500 + 1750 + 200) - 300 - 400
        assert report['cash_turnover'] == Decimal('1750.00')
        assert report['total_cash'] == Decimal('1250.00')
        assert report['total_gcash'] == Decimal('500.00')
        assert report['expenses'] == [{'description': 'Cleaning supplies', 'amount': '300.00'}]

    def test_save_replaces_existing(self, today, admin_user):
        first = ReportService.generate_daily_report(today, petty_cash_start='100')
        ReportService.save_daily_report(first, user=admin_user)
        second = ReportService.generate_daily_report(today, petty_cash_start='200')
        ReportService.save_daily_report(second, user=admin_user)

        assert DailyReport.objects.count() == 1
        stored = ReportService.get_daily_report(today)
        assert stored['petty_cash_start'] == Decimal('200.00')
        assert stored['date'] == today.isoformat()

    def test_missing_report(self, today):
        assert ReportService.get_daily_report(today) is None

    def test_bad_line_item(self, today):
        with pytest.raises(ValidationError):
            ReportService.generate_daily_report(today, expenses=[{'description': 'no amount'}])


class TestExcelExport:
    def test_daily_workbook(self, sales, today):
        response = export_to_excel(
            ReportService.daily_export_sheets(today)['Payment Modes'],
            filename='modes',
            sheet_name='Payment Modes',
        )

        assert response['Content-Disposition'] == 'attachment; filename="modes.xlsx"'
        frame = pd.read_excel(BytesIO(response.content), sheet_name='Payment Modes')
        assert set(frame['payment_mode']) == set(PaymentModes.values)

    def test_to_dataframe_flattens_values(self, today):
        frame = to_dataframe({'date': today, 'amount': Decimal('1.50'), 'items': [1, 2]})

        assert frame.loc[0, 'date'] == today.strftime('%Y-%m-%d')
        assert frame.loc[0, 'amount'] == 1.5
        assert frame.loc[0, 'items'] == '[1, 2]'

    def test_monthly_sheets(self, sales, today):
        sheets = ReportService.monthly_export_sheets(today.year, today.month)
        assert list(sheets) == ['Summary', 'Daily', 'Top Sales Agents']
        assert sheets['Summary']['total_transactions'] == 3
