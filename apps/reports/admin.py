from django.contrib import admin
from .models import DailyReport


@admin.register(DailyReport)
class DailyReportAdmin(admin.ModelAdmin):
    list_display = ['date', 'cash_turnover', 'transaction_count', 'generated_by', 'updated_at']
    date_hierarchy = 'date'
    readonly_fields = ['created_at', 'updated_at']
