"""
Pytest configuration and fixtures for the optical shop backend.
"""
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from core.constants import UserRoles, QueueStatus, PaymentModes
from apps.customers.services import next_token_number
from apps.notifications.broadcasters import BaseBroadcaster
from apps.notifications.services import EventNotifier


class RecordingBroadcaster(BaseBroadcaster):
    """Keeps every event it is handed"""

    def __init__(self):
        self.events = []

    def send(self, event):
        self.events.append(event)

    def names(self):
        return [event['event'] for event in self.events]


class FailingBroadcaster(BaseBroadcaster):
    def send(self, event):
        raise RuntimeError('broadcast channel is down')


@pytest.fixture
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture
def failing_broadcaster():
    return FailingBroadcaster()


@pytest.fixture
def notifier(broadcaster):
    return EventNotifier(broadcaster=broadcaster)


@pytest.fixture
def on_commit(django_capture_on_commit_callbacks):
    """Run on_commit callbacks (event dispatch) as soon as the block exits"""
    def capture():
        return django_capture_on_commit_callbacks(execute=True)
    return capture


# -----------------------------
# Users
# -----------------------------
@pytest.fixture
def make_user(db, django_user_model):
    def make(role, email=None, **extra):
        email = email or f'{role}{django_user_model.objects.count() + 1}@example.com'
        return django_user_model.objects.create_user(
            email=email,
            password='Passw0rd!23',
            full_name=f'{role.title()} User',
            role=role,
            **extra
        )
    return make


@pytest.fixture
def admin_user(make_user):
    return make_user(UserRoles.ADMIN, email='admin@example.com')


@pytest.fixture
def cashier(make_user):
    return make_user(UserRoles.CASHIER, email='cashier@example.com')


@pytest.fixture
def sales_agent(make_user):
    return make_user(UserRoles.SALES, email='sales@example.com')


# -----------------------------
# API clients
# -----------------------------
@pytest.fixture
def api_client():
    return APIClient()


def _client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def admin_client(admin_user):
    return _client_for(admin_user)


@pytest.fixture
def cashier_client(cashier):
    return _client_for(cashier)


@pytest.fixture
def sales_client(sales_agent):
    return _client_for(sales_agent)


# -----------------------------
# Domain objects
# -----------------------------
@pytest.fixture
def make_counter(db):
    from apps.queues.models import Counter

    def make(name=None, **extra):
        name = name or f'Counter {Counter.objects.count() + 1}'
        return Counter.objects.create(name=name, **extra)
    return make


@pytest.fixture
def make_customer(db):
    """
    Insert a customer directly, bypassing registration side effects.

    minutes_ago controls created_at so arrival order is deterministic.
    """
    from apps.customers.models import Customer

    def make(name='Customer', minutes_ago=0, flags=None, status=QueueStatus.WAITING,
             amount='0', sales_agent=None, **extra):
        today = timezone.localdate()
        token = next_token_number(today)
        return Customer.objects.create(
            or_number=f'OR-TEST-{token:04d}',
            name=name,
            token_number=token,
            token_date=today,
            queue_status=status,
            priority_flags=flags or {},
            payment_info={'mode': PaymentModes.CASH, 'amount': str(amount)},
            sales_agent=sales_agent,
            created_at=timezone.now() - timedelta(minutes=minutes_ago),
            **extra
        )
    return make


@pytest.fixture
def make_transaction(db):
    from apps.payments.models import Transaction

    def make(customer, amount='1000.00', payment_mode=PaymentModes.CASH, **extra):
        return Transaction.objects.create(
            customer=customer,
            or_number=customer.or_number,
            amount=Decimal(amount),
            payment_mode=payment_mode,
            **extra
        )
    return make
