# apps/payments/filters.py
import django_filters
from django.db.models import Q

from .models import Transaction


class TransactionFilter(django_filters.FilterSet):
    """Filter for transactions"""

    start_date = django_filters.DateFilter(field_name='transaction_date', lookup_expr='date__gte')
    end_date = django_filters.DateFilter(field_name='transaction_date', lookup_expr='date__lte')
    sales_agent_id = django_filters.NumberFilter(field_name='sales_agent_id')
    cashier_id = django_filters.NumberFilter(field_name='cashier_id')
    customer_id = django_filters.NumberFilter(field_name='customer_id')
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = Transaction
        fields = ['payment_mode', 'payment_status']

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(or_number__icontains=value) |
            Q(customer__name__icontains=value) |
            Q(customer__contact_number__icontains=value)
        )
