"""
API tests for /api/transactions/.
"""
from decimal import Decimal

import pytest

from core.constants import PaymentModes, PaymentStatus
from apps.notifications.models import RealtimeEvent
from apps.payments.models import Settlement, Transaction

pytestmark = pytest.mark.django_db

URL = '/api/transactions/'


@pytest.fixture
def txn(make_customer, make_transaction):
    return make_transaction(make_customer('Buyer'), amount='1000.00')


class TestTransactions:
    def test_create(self, sales_client, make_customer):
        customer = make_customer('New')

        response = sales_client.post(
            URL, {'customer_id': customer.pk, 'amount': '850.00', 'payment_mode': 'gcash'}, format='json'
        )

        assert response.status_code == 201
        assert response.data['payment_status'] == PaymentStatus.UNPAID
        assert response.data['or_number'] == customer.or_number

    def test_create_for_missing_customer(self, sales_client):
        response = sales_client.post(URL, {'customer_id': 999, 'amount': '10'}, format='json')
        assert response.status_code == 404

    def test_list_is_paginated_and_filtered(self, sales_client, txn, make_customer, make_transaction):
        make_transaction(make_customer('Other'), amount='20.00', payment_mode=PaymentModes.MAYA)

        response = sales_client.get(URL, {'payment_mode': 'maya'})

        assert response.status_code == 200
        assert response.data['count'] == 1
        assert response.data['results'][0]['customer_name'] == 'Other'

    def test_retrieve_includes_settlements(self, sales_client, cashier_client, txn):
        cashier_client.post(f'{URL}{txn.pk}/settlements/', {'amount': '100', 'payment_mode': 'cash'}, format='json')

        response = sales_client.get(f'{URL}{txn.pk}/')

        assert response.status_code == 200
        assert len(response.data['settlements']) == 1
        assert Decimal(response.data['balance_amount']) == Decimal('900.00')

    def test_update_amount(self, sales_client, txn):
        response = sales_client.patch(f'{URL}{txn.pk}/', {'amount': '1200.00'}, format='json')
        assert response.status_code == 200
        assert Decimal(response.data['amount']) == Decimal('1200.00')

    def test_create_with_unknown_cashier(self, sales_client, make_customer):
        customer = make_customer('New')

        response = sales_client.post(
            URL, {'customer_id': customer.pk, 'amount': '10.00', 'cashier_id': 99999}, format='json'
        )

        assert response.status_code == 400
        assert response.data['code'] == 'validation_error'
        assert 'cashier_id' in response.data['error']
        assert not Transaction.objects.filter(customer=customer).exists()

    def test_create_with_unknown_sales_agent(self, sales_client, make_customer):
        customer = make_customer('New')

        response = sales_client.post(
            URL, {'customer_id': customer.pk, 'amount': '10.00', 'sales_agent_id': 99999}, format='json'
        )

        assert response.status_code == 400
        assert 'sales_agent_id' in response.data['error']

    def test_update_with_unknown_cashier(self, sales_client, txn):
        response = sales_client.patch(f'{URL}{txn.pk}/', {'cashier_id': 99999}, format='json')

        assert response.status_code == 400
        txn.refresh_from_db()
        assert txn.cashier_id is None


class TestSettlements:
    def test_record(self, cashier_client, cashier, txn, on_commit):
        with on_commit():
            response = cashier_client.post(
                f'{URL}{txn.pk}/settlements/', {'amount': '1000.00', 'payment_mode': 'cash'}, format='json'
            )

        assert response.status_code == 201
        assert response.data['payment_status'] == PaymentStatus.PAID
        assert Settlement.objects.get(transaction=txn).cashier_id == cashier.pk
        assert set(RealtimeEvent.objects.values_list('event_type', flat=True)) == {
            'payment_status_updated', 'transaction_updated', 'settlementCreated'
        }

    def test_overpayment(self, cashier_client, txn):
        response = cashier_client.post(
            f'{URL}{txn.pk}/settlements/', {'amount': '1000.01', 'payment_mode': 'cash'}, format='json'
        )

        assert response.status_code == 400
        assert response.data['code'] == 'validation_error'
        assert not Settlement.objects.exists()

    def test_unknown_cashier(self, cashier_client, txn):
        response = cashier_client.post(
            f'{URL}{txn.pk}/settlements/',
            {'amount': '50.00', 'payment_mode': 'cash', 'cashier_id': 99999},
            format='json'
        )

        assert response.status_code == 400
        assert response.data['code'] == 'validation_error'
        assert 'cashier_id' in response.data['error']
        assert not Settlement.objects.exists()

    def test_zero_amount_rejected_by_payload_validation(self, cashier_client, txn):
        response = cashier_client.post(
            f'{URL}{txn.pk}/settlements/', {'amount': '0', 'payment_mode': 'cash'}, format='json'
        )
        assert response.status_code == 400

    def test_sales_can_read_but_not_settle(self, sales_client, txn):
        assert sales_client.get(f'{URL}{txn.pk}/settlements/').status_code == 200
        response = sales_client.post(
            f'{URL}{txn.pk}/settlements/', {'amount': '10', 'payment_mode': 'cash'}, format='json'
        )
        assert response.status_code == 403

    def test_recalculate(self, cashier_client, txn):
        response = cashier_client.post(f'{URL}{txn.pk}/recalculate/')
        assert response.status_code == 200
        assert response.data['payment_status'] == PaymentStatus.UNPAID

    def test_unknown_transaction(self, cashier_client):
        response = cashier_client.post(f'{URL}999/recalculate/')
        assert response.status_code == 404
