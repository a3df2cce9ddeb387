# config/urls.py
from django.contrib import admin
from django.db import connection, DatabaseError
from django.http import JsonResponse
from django.urls import path, include
from django.utils import timezone


def health(request):
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
        database = 'ok'
    except DatabaseError:
        database = 'unavailable'
    return JsonResponse(
        {'status': 'ok' if database == 'ok' else 'degraded', 'database': database,
         'timestamp': timezone.now().isoformat()},
        status=200 if database == 'ok' else 503
    )


urlpatterns = [
    path('admin/', admin.site.urls),
    path('health/', health, name='health'),

    # API endpoints
    path('api/accounts/', include('apps.accounts.urls')),
    path('api/audit/', include('apps.audit.urls')),

    path('api/customers/', include('apps.customers.urls')),
    path('api/queue/', include('apps.queues.urls')),

    path('api/transactions/', include('apps.payments.urls')),
    path('api/reports/', include('apps.reports.urls')),

    path('api/notifications/', include('apps.notifications.urls')),
]
