"""
API tests for /api/reports/.
"""
from decimal import Decimal

import pytest
from django.utils import timezone

from core.constants import PaymentModes
from apps.reports.models import DailyReport
from core.utils.excel_export import XLSX_CONTENT_TYPE

pytestmark = pytest.mark.django_db

URL = '/api/reports/'


@pytest.fixture
def today():
    return timezone.localdate()


class TestReports:
    def test_sales_agents_are_forbidden(self, sales_client):
        assert sales_client.get(f'{URL}summary/').status_code == 403

    def test_summary_defaults_to_today(self, cashier_client, make_customer, make_transaction, today):
        make_transaction(make_customer('A'), amount='300.00')

        response = cashier_client.get(f'{URL}summary/')

        assert response.status_code == 200
        assert response.data['date'] == today.isoformat()
        assert response.data['total_transactions'] == 1

    def test_daily_report_round_trip(self, cashier_client, make_customer, make_transaction, today):
        make_transaction(make_customer('A'), amount='300.00', payment_mode=PaymentModes.MAYA)
        assert cashier_client.get(f'{URL}daily/', {'date': today.isoformat()}).status_code == 404

        created = cashier_client.post(f'{URL}daily/', {
            'date': today.isoformat(),
            'expenses': [{'description': 'Lunch', 'amount': '50.00'}],
            'funds': [],
            'petty_cash_start': '100.00',
            'petty_cash_end': '100.00',
        }, format='json')

        assert created.status_code == 201
        assert created.data['cash_turnover'] == Decimal('250.00')
        assert DailyReport.objects.get(date=today).total_maya == 300

        fetched = cashier_client.get(f'{URL}daily/', {'date': today.isoformat()})
        assert fetched.status_code == 200
        assert fetched.data['expenses'] == [{'description': 'Lunch', 'amount': '50.00'}]

    def test_monthly(self, admin_client, today):
        response = admin_client.get(f'{URL}monthly/', {'year': today.year, 'month': today.month})
        assert response.status_code == 200
        assert response.data['total_transactions'] == 0

    def test_payment_modes_requires_range(self, admin_client):
        assert admin_client.get(f'{URL}payment-modes/').status_code == 400

    def test_export(self, admin_client, today):
        response = admin_client.get(f'{URL}export/daily/', {'date': today.isoformat()})

        assert response.status_code == 200
        assert response['Content-Type'] == XLSX_CONTENT_TYPE
        assert response['Content-Disposition'] == f'attachment; filename="daily_report_{today:%Y%m%d}.xlsx"'

    def test_monthly_export(self, admin_client, today):
        response = admin_client.get(f'{URL}export/monthly/', {'year': today.year, 'month': today.month})
        assert response.status_code == 200
