# apps/audit/models.py
from django.conf import settings
from django.db import models


class ActivityLog(models.Model):
    """One authenticated API request"""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='activity_logs'
    )
    action = models.CharField(max_length=100, db_index=True)
    method = models.CharField(max_length=10)
    path = models.CharField(max_length=255)
    status_code = models.PositiveSmallIntegerField()
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True)
    details = models.JSONField(default=dict, blank=True)
    duration = models.DurationField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'activity_logs'
        verbose_name = 'Activity Log'
        verbose_name_plural = 'Activity Logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'created_at'], name='activity_user_idx'),
            models.Index(fields=['created_at'], name='activity_created_idx'),
        ]

    def __str__(self):
        return f"{self.created_at} | {self.user} | {self.action}"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValueError('Activity logs cannot be modified')
        super().save(*args, **kwargs)
