# apps/customers/services.py
import logging
import secrets
import string
from datetime import timedelta

from django.db import IntegrityError, transaction
from django.db.models import Count, Max, Q
from django.utils import timezone

from core.constants import QueueStatus, QueueEventType, EventTypes
from core.exceptions import ValidationError, NotFoundError, ConflictError
from core.utils.db import atomic_operation
from apps.notifications.services import EventNotifier
from apps.payments.services import TransactionService
from apps.queues.models import QueueEvent
from .models import Customer
from .types import PriorityFlags, Prescription, PaymentInfo, EstimatedTime

logger = logging.getLogger(__name__)

OR_SUFFIX_CHARS = string.ascii_uppercase + string.digits
OR_SUFFIX_LENGTH = 6
TOKEN_RETRIES = 5

UPDATABLE_FIELDS = {
    'name', 'contact_number', 'email', 'age', 'address', 'occupation',
    'distribution_info', 'doctor_assigned', 'grade_type', 'lens_type',
    'frame_code', 'remarks', 'prescription', 'estimated_time',
    'payment_info', 'priority_flags',
}

TYPED_FIELDS = {
    'priority_flags': PriorityFlags,
    'prescription': Prescription,
    'payment_info': PaymentInfo,
    'estimated_time': EstimatedTime,
}


def next_token_number(day=None):
    day = day or timezone.localdate()
    current = Customer.objects.filter(token_date=day).aggregate(top=Max('token_number'))['top']
    return (current or 0) + 1


def generate_or_number(token_number, day=None):
    """OR<yymmdd><token:03d><6 random A-Z0-9>"""
    day = day or timezone.localdate()
    suffix = ''.join(secrets.choice(OR_SUFFIX_CHARS) for _ in range(OR_SUFFIX_LENGTH))
    return f"OR{day:%y%m%d}{token_number:03d}{suffix}"


def _normalize_json_fields(data):
    """Round-trip JSON columns through their typed records"""
    for field, record in TYPED_FIELDS.items():
        if field in data:
            value = data[field]
            if not isinstance(value, record):
                value = record.from_dict(value)
            data[field] = value.to_dict()
    return data


class CustomerService:
    """Customer registration and lookups"""

    def __init__(self, notifier=None, transactions=None):
        self.notifier = notifier or EventNotifier()
        self.transactions = transactions or TransactionService(notifier=self.notifier)

    def get(self, customer_id):
        customer = Customer.objects.select_related('sales_agent').filter(pk=customer_id).first()
        if customer is None:
            raise NotFoundError(f'Customer {customer_id} not found')
        return customer

    def list(self, status=None, sales_agent_id=None, search=None, start_date=None, end_date=None,
             ordering='-created_at'):
        queryset = Customer.objects.select_related('sales_agent')
        if status:
            queryset = queryset.filter(queue_status=status)
        if sales_agent_id:
            queryset = queryset.filter(sales_agent_id=sales_agent_id)
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) |
                Q(or_number__icontains=search) |
                Q(contact_number__icontains=search)
            )
        if start_date:
            queryset = queryset.filter(created_at__date__gte=start_date)
        if end_date:
            queryset = queryset.filter(created_at__date__lte=end_date)
        return queryset.order_by(ordering, '-id')

    # ===== REGISTRATION =====

    def register(self, data, sales_agent=None, create_initial_transaction=False):
        """
        Create a waiting customer with today's next token number.

        The initial transaction and the joined queue event are best effort:
        their failures are logged and the customer is still returned.
        """
        data = _normalize_json_fields(dict(data))
        unknown = set(data) - UPDATABLE_FIELDS - {'or_number'}
        if unknown:
            raise ValidationError(f'Unknown customer fields: {sorted(unknown)}')
        if not data.get('name'):
            raise ValidationError('Customer name is required')

        provided_or = data.pop('or_number', None)
        if provided_or and Customer.objects.filter(or_number=provided_or).exists():
            raise ValidationError(f'OR number {provided_or} is already in use')

        customer = self._insert(data, sales_agent, provided_or)
        has_transaction = False

        if create_initial_transaction:
            try:
                self.transactions.create_initial_for_customer(customer)
                has_transaction = True
            except Exception as e:
                logger.error(f"Failed to create initial transaction for customer {customer.pk}: {str(e)}")

        try:
            with transaction.atomic():
                QueueEvent.objects.create(
                    customer=customer,
                    event_type=QueueEventType.JOINED,
                    is_priority=customer.is_priority,
                )
        except Exception as e:
            logger.error(f"Failed to record join event for customer {customer.pk}: {str(e)}")

        self.notifier.emit(EventTypes.CUSTOMER_CREATED, 'customer', customer.pk, {
            'customer_id': customer.pk,
            'name': customer.name,
            'or_number': customer.or_number,
            'token_number': customer.token_number,
            'priority_flags': customer.priority_flags,
            'payment_info': customer.payment_info,
            'created_by': sales_agent.pk if sales_agent else None,
            'has_initial_transaction': has_transaction,
        })

        logger.info(f"Customer registered: {customer.name} token #{customer.formatted_token} ({customer.or_number})")
        return customer

    def _insert(self, data, sales_agent, provided_or):
        """Insert with the next free token, retrying if another request took it"""
        for attempt in range(TOKEN_RETRIES):
            today = timezone.localdate()
            token = next_token_number(today)
            or_number = provided_or or generate_or_number(token, today)
            try:
                with transaction.atomic():
                    return Customer.objects.create(
                        or_number=or_number,
                        sales_agent=sales_agent,
                        queue_status=QueueStatus.WAITING,
                        token_number=token,
                        token_date=today,
                        **data
                    )
            except IntegrityError as e:
                logger.warning(f"Token {token} collision on attempt {attempt + 1}: {str(e)}")

        raise ConflictError('Could not allocate a token number, please retry')

    # ===== UPDATES =====

    def update(self, customer_id, data):
        data = _normalize_json_fields(dict(data))
        unknown = set(data) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f'Cannot update fields: {sorted(unknown)}')

        with atomic_operation('update_customer'):
            customer = Customer.objects.select_for_update().filter(pk=customer_id).first()
            if customer is None:
                raise NotFoundError(f'Customer {customer_id} not found')

            for field, value in data.items():
                setattr(customer, field, value)
            customer.save()

            self.notifier.emit(EventTypes.QUEUE_UPDATED, 'customer', customer.pk, {
                'action': 'customer_updated',
                'customer_id': customer.pk,
                'fields': sorted(data),
            })

        logger.info(f"Customer {customer_id} updated: {sorted(data)}")
        return customer

    # ===== STATISTICS =====

    def _status_counts(self, queryset):
        return queryset.aggregate(
            total=Count('id'),
            waiting=Count('id', filter=Q(queue_status=QueueStatus.WAITING)),
            serving=Count('id', filter=Q(queue_status=QueueStatus.SERVING)),
            processing=Count('id', filter=Q(queue_status=QueueStatus.PROCESSING)),
            completed=Count('id', filter=Q(queue_status=QueueStatus.COMPLETED)),
            cancelled=Count('id', filter=Q(queue_status=QueueStatus.CANCELLED)),
        )

    def statistics(self):
        """Today's registrations per queue status"""
        return self._status_counts(Customer.objects.filter(token_date=timezone.localdate()))

    def sales_agent_statistics(self, sales_agent_id):
        today = timezone.localdate()
        mine = Customer.objects.filter(sales_agent_id=sales_agent_id)
        stats = self._status_counts(mine.filter(token_date=today))
        stats.update({
            'today_total': stats['total'],
            'this_week_total': mine.filter(token_date__gte=today - timedelta(days=7)).count(),
            'this_month_total': mine.filter(token_date__gte=today - timedelta(days=30)).count(),
        })
        return stats
