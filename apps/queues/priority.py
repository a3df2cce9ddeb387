# apps/queues/priority.py
"""
Queue ordering.

Everything here is pure: functions take customers (or anything with the same
attributes) and return numbers or sorted lists. Nothing is cached; positions
are recomputed from whatever set the caller passes in.

Total order of a queue, smallest first:

    (status bucket, rank, id)

where rank puts manual positions ahead of everything else, then higher
priority score, then earlier arrival.
"""
from enum import IntEnum

from django.conf import settings

from core.constants import QueueStatus
from core.exceptions import NotFoundError
from apps.customers.types import PriorityFlags

SENIOR_CITIZEN_WEIGHT = 1000
PWD_WEIGHT = 900
PREGNANT_WEIGHT = 800

DEFAULT_AVERAGE_SERVICE_MINUTES = 15


class StatusBucket(IntEnum):
    SERVING = 0
    PROCESSING = 1
    WAITING = 2
    COMPLETED = 3
    CANCELLED = 4

    @classmethod
    def for_status(cls, queue_status):
        return cls[QueueStatus(queue_status).name]


def priority_score(flags):
    """Weight of the highest priority tier the customer holds"""
    if isinstance(flags, dict):
        flags = PriorityFlags.from_dict(flags)

    if flags.senior_citizen:
        return SENIOR_CITIZEN_WEIGHT
    if flags.pwd:
        return PWD_WEIGHT
    if flags.pregnant:
        return PREGNANT_WEIGHT
    return 0


def rank(customer):
    """
    Sortable key within a status bucket.

    Customers with a manual position come first, ordered by that position.
    The rest follow by descending score, then ascending created_at.
    """
    if customer.manual_position is not None:
        return (0, customer.manual_position, 0, 0.0)
    return (1, 0, -priority_score(customer.flags), customer.created_at.timestamp())


def sort_key(customer):
    return (StatusBucket.for_status(customer.queue_status), rank(customer), customer.pk)


def order_queue(customers):
    return sorted(customers, key=sort_key)


def position(customer, queue):
    """1-based position of customer within queue"""
    for index, member in enumerate(order_queue(queue), start=1):
        if member.pk == customer.pk:
            return index
    raise NotFoundError(f'Customer {customer.pk} is not in this queue')


def average_service_minutes():
    return getattr(settings, 'QUEUE_AVERAGE_SERVICE_MINUTES', DEFAULT_AVERAGE_SERVICE_MINUTES)


def estimated_wait(queue_position, minutes_per_customer=None):
    """Minutes until a customer at queue_position is called"""
    if queue_position < 1:
        raise ValueError('Queue positions start at 1')
    if minutes_per_customer is None:
        minutes_per_customer = average_service_minutes()
    return (queue_position - 1) * minutes_per_customer
