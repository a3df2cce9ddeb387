from django.contrib import admin
from .models import RealtimeEvent


@admin.register(RealtimeEvent)
class RealtimeEventAdmin(admin.ModelAdmin):
    list_display = ['id', 'event_type', 'entity_type', 'entity_id', 'created_at']
    list_filter = ['event_type', 'entity_type']
    search_fields = ['entity_id']
    readonly_fields = ['event_type', 'entity_type', 'entity_id', 'payload', 'created_at']
