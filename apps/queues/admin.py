from django.contrib import admin
from .models import Counter, QueueEvent, QueueResetLog


@admin.register(Counter)
class CounterAdmin(admin.ModelAdmin):
    list_display = ['name', 'display_order', 'is_active', 'current_customer', 'updated_at']
    list_filter = ['is_active']
    search_fields = ['name']
    ordering = ['display_order', 'name']


@admin.register(QueueEvent)
class QueueEventAdmin(admin.ModelAdmin):
    list_display = [
        'customer', 'event_type', 'counter', 'queue_position',
        'wait_time_minutes', 'service_time_minutes', 'is_priority', 'created_at'
    ]
    list_filter = ['event_type', 'is_priority', 'created_at']

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(QueueResetLog)
class QueueResetLogAdmin(admin.ModelAdmin):
    list_display = ['created_at', 'actor', 'policy', 'cancelled_count', 'deleted_count', 'released_counters']
    list_filter = ['policy']
    readonly_fields = [
        'actor', 'reason', 'policy', 'cancelled_count',
        'deleted_count', 'released_counters', 'created_at'
    ]
