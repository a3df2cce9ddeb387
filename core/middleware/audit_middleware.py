# core/middleware/audit_middleware.py
import logging

from django.db import DatabaseError
from django.utils import timezone

logger = logging.getLogger(__name__)

SKIP_PATHS = [
    '/admin/',
    '/static/',
    '/media/',
    '/favicon.ico',
    '/health/',
    '/api/notifications/events/',
]


class AuditMiddleware:
    """Record authenticated API requests in the activity log"""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if self._should_skip_audit(request):
            return self.get_response(request)

        start_time = timezone.now()
        response = self.get_response(request)
        duration = timezone.now() - start_time

        if self._should_log_request(request, response):
            self._log_activity(request, response, duration)

        return response

    def _should_skip_audit(self, request):
        return not request.path.startswith('/api/') or any(
            request.path.startswith(path) for path in SKIP_PATHS
        )

    def _should_log_request(self, request, response):
        # CORS preflight
        if request.method == 'OPTIONS':
            return False

        user = getattr(request, 'user', None)
        return bool(user and user.is_authenticated)

    def _log_activity(self, request, response, duration):
        from apps.audit.models import ActivityLog

        try:
            ActivityLog.objects.create(
                user=request.user,
                action=self._get_action(request),
                method=request.method,
                path=request.path[:255],
                status_code=response.status_code,
                ip_address=self._get_client_ip(request),
                user_agent=request.META.get('HTTP_USER_AGENT', ''),
                details=self._get_details(request),
                duration=duration,
            )
        except DatabaseError as e:
            logger.error(f"Activity logging failed for {request.method} {request.path}: {str(e)}")

    def _get_action(self, request):
        """URL name of the matched route, e.g. queue-call-next"""
        match = getattr(request, 'resolver_match', None)
        if match and match.url_name:
            return match.url_name
        return f"{request.method.lower()}:{request.path}"[:100]

    def _get_details(self, request):
        match = getattr(request, 'resolver_match', None)
        details = {}
        if match and match.kwargs:
            details['kwargs'] = {k: str(v) for k, v in match.kwargs.items()}
        if request.GET:
            details['query'] = {k: request.GET.get(k) for k in request.GET}
        return details

    def _get_client_ip(self, request):
        x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
        if x_forwarded_for:
            return x_forwarded_for.split(',')[0].strip()
        return request.META.get('REMOTE_ADDR')
