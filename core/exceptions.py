# core/exceptions.py
import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for errors raised by the service layer"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = 'error'
    default_message = 'Request could not be processed'

    def __init__(self, message=None, code=None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        super().__init__(self.message)


class ValidationError(ServiceError):
    """Malformed or missing input"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = 'validation_error'
    default_message = 'Invalid input'


class NotFoundError(ServiceError):
    """Entity missing, or not in the state the operation expects"""
    status_code = status.HTTP_404_NOT_FOUND
    default_code = 'not_found'
    default_message = 'Not found'


class InvalidTransitionError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = 'invalid_transition'
    default_message = 'Invalid status transition'

    def __init__(self, current=None, target=None, message=None):
        self.current = current
        self.target = target
        if message is None and current and target:
            message = f'Invalid status transition from {current} to {target}'
        super().__init__(message)


class ConflictError(ServiceError):
    """Lost a compare-and-swap race; safe to retry with fresh state"""
    status_code = status.HTTP_409_CONFLICT
    default_code = 'conflict'
    default_message = 'The record was modified by another request'


class PersistenceError(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = 'internal_error'
    default_message = 'Internal server error'


class NotificationError(ServiceError):
    """Broadcaster failure. Caught by the notifier, never surfaced."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = 'notification_error'
    default_message = 'Notification delivery failed'


def api_exception_handler(exc, context):
    """DRF exception handler mapping service errors to JSON responses"""
    if isinstance(exc, PersistenceError):
        logger.error(f"Persistence failure in {context.get('view').__class__.__name__}: {exc}")
        return Response(
            {'error': PersistenceError.default_message, 'code': PersistenceError.default_code},
            status=exc.status_code
        )

    if isinstance(exc, ServiceError):
        return Response({'error': exc.message, 'code': exc.code}, status=exc.status_code)

    if isinstance(exc, DatabaseError):
        logger.exception(f"Database error: {exc}")
        return Response(
            {'error': PersistenceError.default_message, 'code': PersistenceError.default_code},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return exception_handler(exc, context)
