from django.contrib import admin
from .models import Transaction, Settlement


class SettlementInline(admin.TabularInline):
    model = Settlement
    extra = 0
    can_delete = False
    readonly_fields = ['amount', 'payment_mode', 'cashier', 'notes', 'paid_at']

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = [
        'or_number', 'customer', 'amount', 'paid_amount',
        'payment_status', 'payment_mode', 'transaction_date'
    ]
    list_filter = ['payment_status', 'payment_mode', 'transaction_date']
    search_fields = ['or_number', 'customer__name']
    readonly_fields = ['paid_amount', 'payment_status', 'created_at', 'updated_at']
    inlines = [SettlementInline]


@admin.register(Settlement)
class SettlementAdmin(admin.ModelAdmin):
    list_display = ['transaction', 'amount', 'payment_mode', 'cashier', 'paid_at']
    list_filter = ['payment_mode', 'paid_at']
    readonly_fields = ['transaction', 'amount', 'payment_mode', 'cashier', 'notes', 'paid_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
