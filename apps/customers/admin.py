from django.contrib import admin
from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = [
        'token_number', 'token_date', 'name', 'or_number',
        'queue_status', 'sales_agent', 'created_at'
    ]
    list_filter = ['queue_status', 'distribution_info', 'token_date']
    search_fields = ['name', 'or_number', 'contact_number']
    readonly_fields = ['token_number', 'token_date', 'queue_status', 'created_at', 'updated_at']
    date_hierarchy = 'created_at'
