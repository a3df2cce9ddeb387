"""
Tests for the transaction/settlement ledger.
"""
from decimal import Decimal

import pytest

from core.constants import PaymentModes, PaymentStatus, EventTypes
from core.exceptions import ValidationError, NotFoundError
from apps.payments.models import Settlement, Transaction
from apps.payments.services import (
    LedgerService, TransactionService, compute_payment_status, to_amount
)

pytestmark = pytest.mark.django_db


@pytest.fixture
def ledger(notifier):
    return LedgerService(notifier=notifier)


@pytest.fixture
def transactions(notifier, ledger):
    return TransactionService(notifier=notifier, ledger=ledger)


@pytest.fixture
def txn(make_customer, make_transaction):
    return make_transaction(make_customer('Buyer'), amount='1000.00')


class TestComputePaymentStatus:
    @pytest.mark.parametrize('paid, amount, expected', [
        ('0', '1000', PaymentStatus.UNPAID),
        ('0.01', '1000', PaymentStatus.PARTIAL),
        ('999.99', '1000', PaymentStatus.PARTIAL),
        ('1000', '1000', PaymentStatus.PAID),
        ('0', '0', PaymentStatus.UNPAID),
    ])
    def test_three_tiers(self, paid, amount, expected):
        assert compute_payment_status(Decimal(paid), Decimal(amount)) == expected


class TestToAmount:
    def test_quantizes(self):
        assert to_amount('12.3') == Decimal('12.30')
        assert to_amount(7) == Decimal('7.00')

    @pytest.mark.parametrize('value', ['abc', None, 'NaN', 'Infinity', '1e30'])
    def test_rejects_non_numbers(self, value):
        with pytest.raises(ValidationError):
            to_amount(value)


class TestRecordSettlement:
    def test_paid_amount_tracks_settlements(self, ledger, txn):
        ledger.record_settlement(txn.pk, '250.00', PaymentModes.CASH)
        ledger.record_settlement(txn.pk, '150.50', PaymentModes.GCASH)
        updated = ledger.record_settlement(txn.pk, '99.50', PaymentModes.MAYA)

        assert updated.paid_amount == Decimal('500.00')
        assert updated.payment_status == PaymentStatus.PARTIAL
        assert ledger.settled_total(txn.pk) == Decimal('500.00')

        stored = Transaction.objects.get(pk=txn.pk)
        assert stored.paid_amount == Decimal('500.00')
        assert stored.balance_amount == Decimal('500.00')

    def test_full_payment(self, ledger, txn):
        updated = ledger.record_settlement(txn.pk, '1000', PaymentModes.CREDIT_CARD)
        assert updated.payment_status == PaymentStatus.PAID
        assert updated.is_paid

    def test_overpayment_rejected_and_nothing_changes(self, ledger, txn):
        ledger.record_settlement(txn.pk, '600.00', PaymentModes.CASH)

        with pytest.raises(ValidationError):
            ledger.record_settlement(txn.pk, '400.01', PaymentModes.CASH)

        txn.refresh_from_db()
        assert txn.paid_amount == Decimal('600.00')
        assert txn.payment_status == PaymentStatus.PARTIAL
        assert Settlement.objects.filter(transaction=txn).count() == 1

    @pytest.mark.parametrize('amount', ['0', '-5'])
    def test_amount_must_be_positive(self, ledger, txn, amount):
        with pytest.raises(ValidationError):
            ledger.record_settlement(txn.pk, amount, PaymentModes.CASH)

    def test_unknown_mode(self, ledger, txn):
        with pytest.raises(ValidationError):
            ledger.record_settlement(txn.pk, '10', 'barter')

    def test_missing_transaction(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.record_settlement(4040, '10', PaymentModes.CASH)

    def test_records_processor(self, ledger, txn, cashier):
        ledger.record_settlement(txn.pk, '10', PaymentModes.CASH, processor_id=cashier.pk, notes='deposit')

        settlement = Settlement.objects.get(transaction=txn)
        assert settlement.cashier_id == cashier.pk
        assert settlement.notes == 'deposit'

    def test_unknown_processor(self, ledger, txn):
        with pytest.raises(ValidationError):
            ledger.record_settlement(txn.pk, '10', PaymentModes.CASH, processor_id=99999)
        assert not Settlement.objects.filter(transaction=txn).exists()

    def test_inactive_processor(self, ledger, txn, cashier):
        cashier.is_active = False
        cashier.save()
        with pytest.raises(ValidationError):
            ledger.record_settlement(txn.pk, '10', PaymentModes.CASH, processor_id=cashier.pk)

    def test_events(self, ledger, txn, broadcaster, on_commit):
        with on_commit():
            ledger.record_settlement(txn.pk, '100', PaymentModes.CASH)

        assert broadcaster.names() == [
            EventTypes.PAYMENT_STATUS_UPDATED,
            EventTypes.TRANSACTION_UPDATED,
            EventTypes.SETTLEMENT_CREATED,
        ]
        status_event = broadcaster.events[0]['data']
        assert status_event['previous_status'] == PaymentStatus.UNPAID
        assert status_event['payment_status'] == PaymentStatus.PARTIAL

    def test_settlements_are_append_only(self, ledger, txn):
        ledger.record_settlement(txn.pk, '100', PaymentModes.CASH)
        settlement = Settlement.objects.get(transaction=txn)
        settlement.amount = Decimal('1.00')

        with pytest.raises(ValueError):
            settlement.save()


class TestRecalculate:
    def test_idempotent(self, ledger, txn):
        ledger.record_settlement(txn.pk, '300', PaymentModes.CASH)

        first = ledger.recalculate(txn.pk)
        second = ledger.recalculate(txn.pk)

        assert (first.paid_amount, first.payment_status) == (second.paid_amount, second.payment_status)

    def test_repairs_drifted_columns(self, ledger, txn):
        ledger.record_settlement(txn.pk, '300', PaymentModes.CASH)
        Transaction.objects.filter(pk=txn.pk).update(paid_amount=0, payment_status=PaymentStatus.UNPAID)

        repaired = ledger.recalculate(txn.pk)

        assert repaired.paid_amount == Decimal('300.00')
        assert repaired.payment_status == PaymentStatus.PARTIAL

    def test_no_events_when_nothing_changed(self, ledger, txn, broadcaster, on_commit):
        with on_commit():
            ledger.recalculate(txn.pk)
        assert broadcaster.events == []


class TestTransactionService:
    def test_create(self, transactions, make_customer, broadcaster, on_commit):
        customer = make_customer('New')
        with on_commit():
            txn = transactions.create(customer, '750.00', PaymentModes.BANK_TRANSFER)

        assert txn.payment_status == PaymentStatus.UNPAID
        assert txn.paid_amount == Decimal('0.00')
        assert txn.or_number == customer.or_number
        assert broadcaster.names() == [EventTypes.TRANSACTION_CREATED]

    def test_one_transaction_per_customer(self, transactions, txn):
        with pytest.raises(ValidationError):
            transactions.create(txn.customer, '10')

    def test_negative_amount(self, transactions, make_customer):
        with pytest.raises(ValidationError):
            transactions.create(make_customer('New'), '-1')

    def test_initial_from_payment_info(self, transactions, make_customer, sales_agent):
        customer = make_customer('New', amount='1250.00', sales_agent=sales_agent)

        txn = transactions.create_initial_for_customer(customer)

        assert txn.amount == Decimal('1250.00')
        assert txn.payment_mode == PaymentModes.CASH
        assert txn.sales_agent_id == sales_agent.pk

    def test_amount_change_rederives_status(self, transactions, ledger, txn):
        ledger.record_settlement(txn.pk, '400', PaymentModes.CASH)

        updated = transactions.update(txn.pk, amount='400.00')

        assert updated.payment_status == PaymentStatus.PAID

    def test_amount_below_paid(self, transactions, ledger, txn):
        ledger.record_settlement(txn.pk, '400', PaymentModes.CASH)
        with pytest.raises(ValidationError):
            transactions.update(txn.pk, amount='399.99')

    def test_update_rejects_ledger_columns(self, transactions, txn):
        with pytest.raises(ValidationError):
            transactions.update(txn.pk, paid_amount='1000')

    def test_update_cashier(self, transactions, txn, cashier):
        updated = transactions.update(txn.pk, cashier_id=cashier.pk, payment_mode=PaymentModes.GCASH)

        assert updated.cashier_id == cashier.pk
        assert updated.payment_mode == PaymentModes.GCASH

    def test_list_filters(self, transactions, make_customer, make_transaction, ledger):
        paid = make_transaction(make_customer('Paid'), amount='100.00', payment_mode=PaymentModes.GCASH)
        make_transaction(make_customer('Open'), amount='100.00')
        ledger.record_settlement(paid.pk, '100', PaymentModes.GCASH)

        assert [t.pk for t in transactions.list({'payment_status': PaymentStatus.PAID})] == [paid.pk]
        assert [t.pk for t in transactions.list({'payment_mode': PaymentModes.GCASH})] == [paid.pk]
        assert [t.pk for t in transactions.list({'search': 'Paid'})] == [paid.pk]

    def test_list_bad_filter(self, transactions):
        with pytest.raises(ValidationError):
            transactions.list({'start_date': 'yesterday'})
