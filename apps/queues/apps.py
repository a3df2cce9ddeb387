from django.apps import AppConfig


class QueuesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.queues'
    verbose_name = 'Queue Management'
