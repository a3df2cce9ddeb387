"""
Celery configuration for the optical shop backend.
"""

import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.base')

app = Celery('optical_shop')

# All celery-related settings use the CELERY_ prefix, beat schedule included.
app.config_from_object('django.conf:settings', namespace='CELERY')

# Load task modules from all registered Django apps.
app.autodiscover_tasks()
