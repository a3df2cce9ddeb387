# apps/queues/services.py
import logging
from dataclasses import dataclass

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db.models import Avg, Count, Q
from django.utils import timezone

from core.constants import QueueStatus, QueueEventType, ResetPolicy, EventTypes
from core.exceptions import (
    ValidationError, NotFoundError, InvalidTransitionError, ConflictError
)
from core.utils.db import atomic_operation
from apps.customers.models import Customer
from apps.notifications.services import EventNotifier
from apps.payments.models import Transaction
from apps.payments.services import LedgerService
from . import priority
from .models import Counter, QueueEvent, QueueResetLog

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = (QueueStatus.WAITING, QueueStatus.SERVING, QueueStatus.PROCESSING)

TRANSITIONS = {
    QueueStatus.WAITING: {QueueStatus.SERVING, QueueStatus.CANCELLED},
    QueueStatus.SERVING: {QueueStatus.PROCESSING, QueueStatus.COMPLETED, QueueStatus.CANCELLED},
    QueueStatus.PROCESSING: {QueueStatus.COMPLETED, QueueStatus.CANCELLED},
    QueueStatus.COMPLETED: set(),
    QueueStatus.CANCELLED: set(),
}


def can_transition(current, target):
    return target in TRANSITIONS.get(current, set())


def _minutes_since(moment, now=None):
    if moment is None:
        return None
    now = now or timezone.now()
    return max(int((now - moment).total_seconds() // 60), 0)


@dataclass
class QueueEntry:
    customer: Customer
    position: int
    priority_score: int
    estimated_wait_minutes: int


class QueueService:
    """
    Customer status state machine and counter assignment.

    Every mutation runs in one atomic block. Status writes are conditional
    updates keyed on the status the caller observed, so two requests racing
    on the same customer cannot both win; the loser gets ConflictError.
    """

    def __init__(self, notifier=None, ledger=None):
        self.notifier = notifier or EventNotifier()
        self.ledger = ledger or LedgerService(notifier=self.notifier)

    # ===== LOOKUPS =====

    def _get_customer(self, customer_id):
        customer = Customer.objects.filter(pk=customer_id).first()
        if customer is None:
            raise NotFoundError(f'Customer {customer_id} not found')
        return customer

    def _get_counter(self, counter_id):
        counter = Counter.objects.filter(pk=counter_id).first()
        if counter is None:
            raise NotFoundError(f'Counter {counter_id} not found')
        return counter

    def _get_free_counter(self, counter_id):
        counter = self._get_counter(counter_id)
        if not counter.is_active:
            raise NotFoundError(f'Counter {counter.name} is not active')
        if counter.current_customer_id is not None:
            raise ConflictError(f'Counter {counter.name} is already serving a customer')
        return counter

    def _waiting_candidates(self):
        return priority.order_queue(Customer.objects.filter(queue_status=QueueStatus.WAITING))

    # ===== CONDITIONAL WRITES =====

    def _swap_status(self, customer_id, expected, target, **fields):
        """Move customer to target only if still in one of the expected statuses"""
        if isinstance(expected, str):
            expected = [expected]
        return Customer.objects.filter(
            pk=customer_id,
            queue_status__in=expected
        ).update(queue_status=target, updated_at=timezone.now(), **fields) == 1

    def _claim_counter(self, counter, customer_id):
        claimed = Counter.objects.filter(
            pk=counter.pk,
            is_active=True,
            current_customer__isnull=True
        ).update(current_customer_id=customer_id, updated_at=timezone.now())
        if not claimed:
            raise ConflictError(f'Counter {counter.name} is already serving a customer')

    def _release_counters(self, customer_id):
        """Clear every counter pointing at customer; returns the first one released"""
        counters = list(Counter.objects.filter(current_customer_id=customer_id))
        if counters:
            Counter.objects.filter(pk__in=[c.pk for c in counters]).update(
                current_customer=None, updated_at=timezone.now()
            )
        return counters[0] if counters else None

    # ===== EVENTS =====

    def _record_event(self, customer, event_type, counter=None, **fields):
        return QueueEvent.objects.create(
            customer=customer,
            event_type=event_type,
            counter=counter,
            is_priority=customer.is_priority,
            **fields
        )

    def _service_minutes(self, customer):
        called = customer.queue_events.filter(event_type=QueueEventType.CALLED).order_by('-created_at').first()
        return _minutes_since(called.created_at) if called else None

    def _announce(self, customer, action, previous_status=None, **extra):
        data = {
            'action': action,
            'customer_id': customer.pk,
            'token_number': customer.token_number,
            'queue_status': customer.queue_status,
            'previous_status': previous_status,
        }
        data.update(extra)
        self.notifier.emit(EventTypes.QUEUE_UPDATED, 'customer', customer.pk, data)

    # ===== CALLING =====

    def _serve(self, customer, counter, queue_position):
        """Bind an already-claimed customer to counter and record the call"""
        self._claim_counter(counter, customer.pk)
        customer.refresh_from_db()
        self._record_event(
            customer,
            QueueEventType.CALLED,
            counter=counter,
            queue_position=queue_position,
            wait_time_minutes=_minutes_since(customer.created_at),
        )
        self._announce(
            customer, 'called', QueueStatus.WAITING,
            counter_id=counter.pk, counter_name=counter.name
        )
        logger.info(f"Customer {customer.pk} called to counter {counter.name}")
        return customer

    def call_next(self, counter_id):
        """Serve the highest-ranked waiting customer at counter"""
        with atomic_operation('call_next'):
            counter = self._get_free_counter(counter_id)
            candidates = self._waiting_candidates()
            if not candidates:
                raise NotFoundError('No customers waiting in queue')

            for queue_position, candidate in enumerate(candidates, start=1):
                if self._swap_status(candidate.pk, QueueStatus.WAITING, QueueStatus.SERVING):
                    return self._serve(candidate, counter, queue_position)
                logger.debug(f"Customer {candidate.pk} already claimed, trying next")

            raise NotFoundError('No customers waiting in queue')

    def call_specific(self, customer_id, counter_id):
        """Serve a named waiting customer at counter"""
        with atomic_operation('call_specific'):
            customer = self._get_customer(customer_id)
            if customer.queue_status != QueueStatus.WAITING:
                raise NotFoundError(f'Customer {customer_id} is not currently waiting')

            counter = self._get_free_counter(counter_id)
            waiting = list(Customer.objects.filter(queue_status=QueueStatus.WAITING))
            queue_position = priority.position(customer, waiting)

            if not self._swap_status(customer.pk, QueueStatus.WAITING, QueueStatus.SERVING):
                raise ConflictError(f'Customer {customer_id} was claimed by another request')

            return self._serve(customer, counter, queue_position)

    # ===== STATUS CHANGES =====

    def change_status(self, customer_id, new_status, actor_id=None, actor_role=None):
        """
        Move a customer to new_status if the state machine allows it.

        actor_role is already authorized by the caller; it is only logged.
        """
        if new_status not in QueueStatus.values:
            raise ValidationError(f'Unknown queue status: {new_status}')

        if new_status == QueueStatus.COMPLETED:
            customer = self.complete_service(customer_id)
        elif new_status == QueueStatus.CANCELLED:
            customer = self.cancel_service(customer_id)
        else:
            with atomic_operation('change_status'):
                customer = self._get_customer(customer_id)
                current = customer.queue_status
                if not can_transition(current, new_status):
                    raise InvalidTransitionError(current, new_status)

                if not self._swap_status(customer.pk, current, new_status):
                    raise ConflictError(f'Customer {customer_id} was modified by another request')

                counter = None
                if new_status == QueueStatus.PROCESSING:
                    counter = self._release_counters(customer.pk)

                customer.refresh_from_db()
                if new_status == QueueStatus.SERVING:
                    self._record_event(
                        customer,
                        QueueEventType.CALLED,
                        wait_time_minutes=_minutes_since(customer.created_at),
                    )

                self._announce(
                    customer, 'status_changed', current,
                    counter_id=counter.pk if counter else None
                )

        logger.info(f"Customer {customer_id} set to {new_status} by user {actor_id} ({actor_role})")
        return customer

    def complete_service(self, customer_id, counter_id=None):
        """Finish service; the customer's transaction is re-derived, not settled"""
        with atomic_operation('complete_service'):
            customer = self._get_customer(customer_id)
            current = customer.queue_status
            if current not in (QueueStatus.SERVING, QueueStatus.PROCESSING):
                raise InvalidTransitionError(current, QueueStatus.COMPLETED)

            counter = None
            if counter_id is not None:
                counter = self._get_counter(counter_id)
                # processing customers already gave their counter up
                if current == QueueStatus.SERVING and counter.current_customer_id not in (None, customer.pk):
                    raise ValidationError(f'Counter {counter.name} is serving another customer')

            if not self._swap_status(customer.pk, current, QueueStatus.COMPLETED):
                raise ConflictError(f'Customer {customer_id} was modified by another request')

            released = self._release_counters(customer.pk)
            counter = counter or released

            customer.refresh_from_db()
            self._record_event(
                customer,
                QueueEventType.SERVED,
                counter=counter,
                service_time_minutes=self._service_minutes(customer),
            )

            transaction_id = Transaction.objects.filter(customer=customer).values_list('pk', flat=True).first()
            if transaction_id is not None:
                self.ledger.recalculate(transaction_id)

            self._announce(
                customer, 'completed', current,
                counter_id=counter.pk if counter else None
            )

        logger.info(f"Customer {customer_id} service completed")
        return customer

    def cancel_service(self, customer_id, reason=''):
        with atomic_operation('cancel_service'):
            customer = self._get_customer(customer_id)
            current = customer.queue_status
            if not can_transition(current, QueueStatus.CANCELLED):
                raise InvalidTransitionError(current, QueueStatus.CANCELLED)

            if not self._swap_status(
                customer.pk, current, QueueStatus.CANCELLED,
                cancellation_reason=reason or ''
            ):
                raise ConflictError(f'Customer {customer_id} was modified by another request')

            counter = self._release_counters(customer.pk)
            customer.refresh_from_db()
            self._record_event(customer, QueueEventType.CANCELLED, counter=counter)
            self._announce(customer, 'cancelled', current, reason=customer.cancellation_reason)

        logger.info(f"Customer {customer_id} cancelled: {reason}")
        return customer

    # ===== ORDERING =====

    def reorder_queue(self, customer_ids):
        """
        Pin the listed waiting customers to positions 1..n in list order.

        Waiting customers not in the list lose any previous manual position.
        """
        if not customer_ids:
            raise ValidationError('customerIds must not be empty')
        if len(set(customer_ids)) != len(customer_ids):
            raise ValidationError('customerIds contains duplicates')

        with atomic_operation('reorder_queue'):
            waiting_ids = set(
                Customer.objects.filter(
                    pk__in=customer_ids,
                    queue_status=QueueStatus.WAITING
                ).values_list('pk', flat=True)
            )
            missing = [pk for pk in customer_ids if pk not in waiting_ids]
            if missing:
                raise NotFoundError(f'Customers not waiting in queue: {missing}')

            now = timezone.now()
            Customer.objects.filter(
                queue_status=QueueStatus.WAITING,
                manual_position__isnull=False
            ).exclude(pk__in=customer_ids).update(manual_position=None, updated_at=now)

            for index, customer_id in enumerate(customer_ids, start=1):
                updated = Customer.objects.filter(
                    pk=customer_id,
                    queue_status=QueueStatus.WAITING
                ).update(manual_position=index, updated_at=now)
                if not updated:
                    raise ConflictError(f'Customer {customer_id} left the queue during reorder')

            self.notifier.emit(
                EventTypes.QUEUE_UPDATED, 'queue', 'waiting',
                {'action': 'reordered', 'customer_ids': list(customer_ids)}
            )

        logger.info(f"Queue reordered: {customer_ids}")
        return self.get_queue()

    def reset_queue(self, actor_id=None, reason=''):
        """Clear every non-terminal customer according to QUEUE_RESET_POLICY"""
        policy = getattr(settings, 'QUEUE_RESET_POLICY', ResetPolicy.CANCEL)
        if policy not in (ResetPolicy.CANCEL, ResetPolicy.DELETE):
            raise ImproperlyConfigured(f'Unknown QUEUE_RESET_POLICY: {policy}')

        reason = reason or 'Queue reset'
        with atomic_operation('reset_queue'):
            now = timezone.now()
            released = Counter.objects.filter(
                current_customer__isnull=False
            ).update(current_customer=None, updated_at=now)

            active = Customer.objects.filter(queue_status__in=ACTIVE_STATUSES)

            deleted = 0
            if policy == ResetPolicy.DELETE:
                unpaid_ids = list(
                    active.exclude(transaction__settlements__isnull=False).values_list('pk', flat=True)
                )
                if unpaid_ids:
                    deleted = len(unpaid_ids)
                    Customer.objects.filter(pk__in=unpaid_ids).delete()

            cancelled = list(active.values_list('pk', 'priority_flags'))
            if cancelled:
                Customer.objects.filter(
                    pk__in=[pk for pk, _ in cancelled],
                    queue_status__in=ACTIVE_STATUSES
                ).update(
                    queue_status=QueueStatus.CANCELLED,
                    cancellation_reason=reason,
                    manual_position=None,
                    updated_at=now,
                )
                QueueEvent.objects.bulk_create([
                    QueueEvent(
                        customer_id=pk,
                        event_type=QueueEventType.CANCELLED,
                        is_priority=priority.priority_score(flags) > 0,
                    )
                    for pk, flags in cancelled
                ])

            log = QueueResetLog.objects.create(
                actor_id=actor_id,
                reason=reason,
                policy=policy,
                cancelled_count=len(cancelled),
                deleted_count=deleted,
                released_counters=released,
            )

            summary = {
                'policy': policy,
                'cancelled': len(cancelled),
                'deleted': deleted,
                'released_counters': released,
                'reset_log_id': log.pk,
            }
            self.notifier.emit(EventTypes.QUEUE_UPDATED, 'queue', 'all', dict(summary, action='reset'))

        logger.info(f"Queue reset by {actor_id or 'scheduler'}: {summary}")
        return summary

    # ===== QUERIES =====

    def _entries(self, customers):
        minutes = priority.average_service_minutes()
        entries = []
        for queue_position, customer in enumerate(priority.order_queue(customers), start=1):
            wait = 0
            if customer.queue_status == QueueStatus.WAITING:
                wait = priority.estimated_wait(queue_position, minutes)
            entries.append(QueueEntry(
                customer=customer,
                position=queue_position,
                priority_score=priority.priority_score(customer.flags),
                estimated_wait_minutes=wait,
            ))
        return entries

    def get_queue(self, status=None):
        status = status or QueueStatus.WAITING
        if status not in QueueStatus.values:
            raise ValidationError(f'Unknown queue status: {status}')
        customers = Customer.objects.select_related('sales_agent').filter(queue_status=status)
        return self._entries(customers)

    def get_all_statuses(self):
        """Everyone except cancelled customers, serving first"""
        customers = Customer.objects.select_related('sales_agent').exclude(
            queue_status=QueueStatus.CANCELLED
        )
        return self._entries(customers)

    def get_display_queue(self):
        customers = Customer.objects.select_related('sales_agent').filter(
            queue_status__in=[QueueStatus.WAITING, QueueStatus.SERVING]
        )
        return self._entries(customers)

    def get_position(self, customer_id):
        customer = self._get_customer(customer_id)
        waiting = list(Customer.objects.filter(queue_status=QueueStatus.WAITING))
        queue_position = priority.position(customer, waiting)
        return {
            'customer_id': customer.pk,
            'position': queue_position,
            'estimated_wait_minutes': priority.estimated_wait(queue_position),
        }

    def get_statistics(self):
        """Today's queue counts and timing averages"""
        today = timezone.localdate()
        counts = Customer.objects.filter(created_at__date=today).aggregate(
            total=Count('id'),
            waiting=Count('id', filter=Q(queue_status=QueueStatus.WAITING)),
            serving=Count('id', filter=Q(queue_status=QueueStatus.SERVING)),
            processing=Count('id', filter=Q(queue_status=QueueStatus.PROCESSING)),
            completed=Count('id', filter=Q(queue_status=QueueStatus.COMPLETED)),
            cancelled=Count('id', filter=Q(queue_status=QueueStatus.CANCELLED)),
        )
        events = QueueEvent.objects.filter(created_at__date=today)
        timing = events.aggregate(
            avg_wait=Avg('wait_time_minutes', filter=Q(event_type=QueueEventType.CALLED)),
            avg_service=Avg('service_time_minutes', filter=Q(event_type=QueueEventType.SERVED)),
        )
        counts.update({
            'priority_waiting': sum(
                1 for c in Customer.objects.filter(queue_status=QueueStatus.WAITING) if c.is_priority
            ),
            'average_wait_minutes': round(timing['avg_wait'] or 0, 1),
            'average_service_minutes': round(timing['avg_service'] or 0, 1),
        })
        return counts


class CounterService:
    def __init__(self, notifier=None):
        self.notifier = notifier or EventNotifier()

    def list(self, active_only=False):
        queryset = Counter.objects.select_related('current_customer')
        if active_only:
            queryset = queryset.filter(is_active=True)
        return list(queryset)

    def list_for_display(self):
        """Active counters with whoever they are serving"""
        return self.list(active_only=True)

    def create(self, name, display_order=0, is_active=True):
        if Counter.objects.filter(name=name).exists():
            raise ValidationError(f'Counter {name} already exists')
        counter = Counter.objects.create(name=name, display_order=display_order, is_active=is_active)
        logger.info(f"Counter created: {name}")
        return counter

    def update(self, counter_id, **fields):
        with atomic_operation('update_counter'):
            counter = Counter.objects.select_for_update().filter(pk=counter_id).first()
            if counter is None:
                raise NotFoundError(f'Counter {counter_id} not found')

            name = fields.get('name')
            if name and Counter.objects.filter(name=name).exclude(pk=counter.pk).exists():
                raise ValidationError(f'Counter {name} already exists')

            if fields.get('is_active') is False and counter.current_customer_id is not None:
                raise ConflictError(f'Counter {counter.name} is serving a customer')

            for field in ('name', 'display_order', 'is_active'):
                if field in fields:
                    setattr(counter, field, fields[field])
            counter.save()

            self.notifier.emit(
                EventTypes.QUEUE_UPDATED, 'counter', counter.pk,
                {'action': 'counter_updated', 'name': counter.name, 'is_active': counter.is_active}
            )
        return counter
