# config/settings/test.py
from .base import *  # noqa: F401,F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

REALTIME_BROADCASTER = 'apps.notifications.broadcasters.DatabaseBroadcaster'
QUEUE_RESET_POLICY = 'cancel'
QUEUE_AVERAGE_SERVICE_MINUTES = 15

LOGGING['root']['level'] = 'WARNING'  # noqa: F405
