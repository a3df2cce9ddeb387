# apps/queues/tasks.py
import logging

from celery import shared_task

from .services import QueueService

logger = logging.getLogger(__name__)


@shared_task
def daily_queue_reset():
    """Midnight reset of whatever is still in the queue"""
    summary = QueueService().reset_queue(actor_id=None, reason='Daily automatic reset')
    logger.info(f"Daily queue reset completed: {summary}")
    return summary
