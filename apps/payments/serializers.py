# apps/payments/serializers.py
from decimal import Decimal

from rest_framework import serializers

from core.constants import PaymentModes
from .models import Transaction, Settlement


class SettlementSerializer(serializers.ModelSerializer):
    cashier_name = serializers.CharField(source='cashier.full_name', read_only=True, default=None)

    class Meta:
        model = Settlement
        fields = [
            'id', 'transaction', 'amount', 'payment_mode',
            'cashier', 'cashier_name', 'notes', 'paid_at'
        ]
        read_only_fields = fields


class TransactionSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer.name', read_only=True)
    token_number = serializers.IntegerField(source='customer.token_number', read_only=True)
    sales_agent_name = serializers.CharField(source='sales_agent.full_name', read_only=True, default=None)
    cashier_name = serializers.CharField(source='cashier.full_name', read_only=True, default=None)
    balance_amount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Transaction
        fields = [
            'id', 'customer', 'customer_name', 'token_number', 'or_number',
            'amount', 'payment_mode', 'sales_agent', 'sales_agent_name',
            'cashier', 'cashier_name', 'paid_amount', 'balance_amount',
            'payment_status', 'transaction_date', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class TransactionDetailSerializer(TransactionSerializer):
    settlements = SettlementSerializer(many=True, read_only=True)

    class Meta(TransactionSerializer.Meta):
        fields = TransactionSerializer.Meta.fields + ['settlements']
        read_only_fields = fields


class TransactionCreateSerializer(serializers.Serializer):
    customer_id = serializers.IntegerField(min_value=1)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'))
    payment_mode = serializers.ChoiceField(choices=PaymentModes.choices, default=PaymentModes.CASH)
    sales_agent_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    cashier_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    or_number = serializers.CharField(max_length=50, required=False, allow_blank=True)


class TransactionUpdateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'), required=False)
    payment_mode = serializers.ChoiceField(choices=PaymentModes.choices, required=False)
    cashier_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)


class SettlementCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    payment_mode = serializers.ChoiceField(choices=PaymentModes.choices)
    cashier_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
