# apps/payments/services.py
import logging
from decimal import Decimal, InvalidOperation

from django.contrib.auth import get_user_model
from django.db.models import Sum
from django.utils import timezone

from core.constants import PaymentModes, PaymentStatus, EventTypes
from core.exceptions import ValidationError, NotFoundError
from core.utils.db import atomic_operation
from apps.notifications.services import EventNotifier
from .filters import TransactionFilter
from .models import Transaction, Settlement

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')


def compute_payment_status(paid, amount):
    """Nothing paid is unpaid, at least the total is paid, anything between is partial"""
    if paid <= 0:
        return PaymentStatus.UNPAID
    if paid >= amount:
        return PaymentStatus.PAID
    return PaymentStatus.PARTIAL


def to_amount(value, field='amount'):
    try:
        amount = Decimal(str(value)).quantize(Decimal('0.01'))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f'{field} must be a number')
    if not amount.is_finite():
        raise ValidationError(f'{field} must be a number')
    return amount


def _money(value):
    return str(value.quantize(Decimal('0.01')))


def _require_user(user_id, field):
    """Reject ids that do not name an active user before they reach a foreign key"""
    if user_id is None:
        return
    if not get_user_model().objects.filter(pk=user_id, is_active=True).exists():
        raise ValidationError(f'{field} {user_id} is not an active user')


class LedgerService:
    """
    Keeps paid_amount and payment_status in line with settlement history.

    Only this class writes those two columns.
    """

    def __init__(self, notifier=None):
        self.notifier = notifier or EventNotifier()

    def _lock(self, transaction_id):
        txn = Transaction.objects.select_for_update().filter(pk=transaction_id).first()
        if txn is None:
            raise NotFoundError(f'Transaction {transaction_id} not found')
        return txn

    def settled_total(self, transaction_id):
        total = Settlement.objects.filter(transaction_id=transaction_id).aggregate(total=Sum('amount'))['total']
        return total or ZERO

    def record_settlement(self, transaction_id, amount, payment_mode, processor_id=None, notes=''):
        """Append a settlement and return the updated transaction"""
        amount = to_amount(amount)
        if amount <= 0:
            raise ValidationError('Settlement amount must be greater than zero')
        if payment_mode not in PaymentModes.values:
            raise ValidationError(f'Unknown payment mode: {payment_mode}')
        _require_user(processor_id, 'cashier_id')

        with atomic_operation('record_settlement'):
            txn = self._lock(transaction_id)
            paid = self.settled_total(txn.pk)
            if paid + amount > txn.amount:
                raise ValidationError(
                    f'Settlement of {_money(amount)} exceeds the remaining balance of {_money(txn.amount - paid)}'
                )

            settlement = Settlement.objects.create(
                transaction=txn,
                amount=amount,
                payment_mode=payment_mode,
                cashier_id=processor_id,
                notes=notes or '',
            )
            txn = self._apply(txn)

            self.notifier.emit(EventTypes.SETTLEMENT_CREATED, 'transaction', txn.pk, {
                'settlement_id': settlement.pk,
                'transaction_id': txn.pk,
                'customer_id': txn.customer_id,
                'amount': _money(settlement.amount),
                'payment_mode': settlement.payment_mode,
                'cashier_id': settlement.cashier_id,
                'paid_amount': _money(txn.paid_amount),
                'balance_amount': _money(txn.balance_amount),
                'payment_status': txn.payment_status,
            })

        logger.info(f"Settlement {settlement.pk} of {amount} recorded on transaction {txn.pk}")
        return txn

    def recalculate(self, transaction_id):
        """Re-derive paid_amount and payment_status from settlements"""
        with atomic_operation('recalculate'):
            txn = self._lock(transaction_id)
            return self._apply(txn)

    def _apply(self, txn):
        previous_status = txn.payment_status
        previous_paid = txn.paid_amount

        paid = self.settled_total(txn.pk)
        payment_status = compute_payment_status(paid, txn.amount)

        if payment_status == previous_status and paid == previous_paid:
            logger.debug(f"Transaction {txn.pk} unchanged, skipping notification")
            return txn

        Transaction.objects.filter(pk=txn.pk).update(
            paid_amount=paid,
            payment_status=payment_status,
            updated_at=timezone.now(),
        )
        txn.paid_amount = paid
        txn.payment_status = payment_status

        data = {
            'transaction_id': txn.pk,
            'customer_id': txn.customer_id,
            'or_number': txn.or_number,
            'payment_status': payment_status,
            'previous_status': previous_status,
            'paid_amount': _money(paid),
            'previous_paid_amount': _money(previous_paid),
            'balance_amount': _money(txn.balance_amount),
        }
        self.notifier.emit(EventTypes.PAYMENT_STATUS_UPDATED, 'transaction', txn.pk, data)
        self.notifier.emit(
            EventTypes.TRANSACTION_UPDATED, 'transaction', txn.pk,
            dict(data, type=EventTypes.PAYMENT_STATUS_UPDATED)
        )
        logger.info(f"Transaction {txn.pk}: {previous_status} -> {payment_status}, paid {previous_paid} -> {paid}")
        return txn


class TransactionService:
    def __init__(self, notifier=None, ledger=None):
        self.notifier = notifier or EventNotifier()
        self.ledger = ledger or LedgerService(notifier=self.notifier)

    def get(self, transaction_id):
        txn = Transaction.objects.select_related(
            'customer', 'sales_agent', 'cashier'
        ).filter(pk=transaction_id).first()
        if txn is None:
            raise NotFoundError(f'Transaction {transaction_id} not found')
        return txn

    def list(self, params=None, queryset=None):
        if queryset is None:
            queryset = Transaction.objects.select_related('customer', 'sales_agent', 'cashier')
        filterset = TransactionFilter(params or {}, queryset=queryset)
        if not filterset.is_valid():
            raise ValidationError(f'Invalid filters: {dict(filterset.errors)}')
        return filterset.qs

    def settlements(self, transaction_id):
        self.get(transaction_id)
        return Settlement.objects.select_related('cashier').filter(transaction_id=transaction_id)

    def create(self, customer, amount, payment_mode=PaymentModes.CASH,
               sales_agent_id=None, cashier_id=None, or_number=None, transaction_date=None):
        """Open an unpaid transaction for customer"""
        amount = to_amount(amount)
        if amount < 0:
            raise ValidationError('Transaction amount cannot be negative')
        if payment_mode not in PaymentModes.values:
            raise ValidationError(f'Unknown payment mode: {payment_mode}')
        _require_user(sales_agent_id, 'sales_agent_id')
        _require_user(cashier_id, 'cashier_id')

        with atomic_operation('create_transaction'):
            if Transaction.objects.filter(customer=customer).exists():
                raise ValidationError(f'Customer {customer.pk} already has a transaction')

            txn = Transaction.objects.create(
                customer=customer,
                or_number=or_number or customer.or_number,
                amount=amount,
                payment_mode=payment_mode,
                sales_agent_id=sales_agent_id,
                cashier_id=cashier_id,
                transaction_date=transaction_date or timezone.now(),
                paid_amount=ZERO,
                payment_status=PaymentStatus.UNPAID,
            )
            self.notifier.emit(EventTypes.TRANSACTION_CREATED, 'transaction', txn.pk, {
                'transaction_id': txn.pk,
                'customer_id': customer.pk,
                'or_number': txn.or_number,
                'amount': _money(txn.amount),
                'payment_mode': txn.payment_mode,
                'payment_status': txn.payment_status,
            })

        logger.info(f"Transaction {txn.pk} created for customer {customer.pk}")
        return txn

    def create_initial_for_customer(self, customer):
        """Unpaid transaction built from the customer's payment info"""
        payment = customer.payment
        return self.create(
            customer,
            amount=payment.amount,
            payment_mode=payment.mode,
            sales_agent_id=customer.sales_agent_id,
        )

    def update(self, transaction_id, **changes):
        """Change amount, payment_mode or cashier; amount changes re-derive status"""
        allowed = {'amount', 'payment_mode', 'cashier_id'}
        unknown = set(changes) - allowed
        if unknown:
            raise ValidationError(f'Cannot update fields: {sorted(unknown)}')
        if not changes:
            raise ValidationError('No valid updates provided')
        if 'cashier_id' in changes:
            _require_user(changes['cashier_id'], 'cashier_id')

        with atomic_operation('update_transaction'):
            txn = Transaction.objects.select_for_update().filter(pk=transaction_id).first()
            if txn is None:
                raise NotFoundError(f'Transaction {transaction_id} not found')

            amount_changed = False
            if 'amount' in changes:
                amount = to_amount(changes['amount'])
                paid = self.ledger.settled_total(txn.pk)
                if amount < paid:
                    raise ValidationError(
                        f'Amount cannot be less than the {_money(paid)} already paid'
                    )
                amount_changed = amount != txn.amount
                txn.amount = amount

            if 'payment_mode' in changes:
                if changes['payment_mode'] not in PaymentModes.values:
                    raise ValidationError(f"Unknown payment mode: {changes['payment_mode']}")
                txn.payment_mode = changes['payment_mode']

            if 'cashier_id' in changes:
                txn.cashier_id = changes['cashier_id']

            txn.save(update_fields=['amount', 'payment_mode', 'cashier', 'updated_at'])

            if amount_changed:
                txn = self.ledger.recalculate(txn.pk)

            self.notifier.emit(EventTypes.TRANSACTION_UPDATED, 'transaction', txn.pk, {
                'type': EventTypes.TRANSACTION_UPDATED,
                'transaction_id': txn.pk,
                'customer_id': txn.customer_id,
                'amount': _money(txn.amount),
                'payment_mode': txn.payment_mode,
                'cashier_id': txn.cashier_id,
                'paid_amount': _money(txn.paid_amount),
                'payment_status': txn.payment_status,
            })

        logger.info(f"Transaction {transaction_id} updated: {sorted(changes)}")
        return txn
