# core/utils/db.py
import logging
from contextlib import contextmanager

from django.db import DatabaseError, transaction

from core.exceptions import PersistenceError

logger = logging.getLogger(__name__)


@contextmanager
def atomic_operation(name):
    """Run a block in one transaction; store failures surface as PersistenceError"""
    try:
        with transaction.atomic():
            yield
    except DatabaseError as e:
        logger.error(f"{name} rolled back: {str(e)}")
        raise PersistenceError() from e
