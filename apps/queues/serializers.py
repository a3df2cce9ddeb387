# apps/queues/serializers.py
from rest_framework import serializers

from core.constants import QueueStatus
from apps.customers.serializers import CustomerSerializer
from .models import Counter


# -----------------------------
# Request payloads
# -----------------------------
class CallNextSerializer(serializers.Serializer):
    counterId = serializers.IntegerField(min_value=1)


class CallCustomerSerializer(serializers.Serializer):
    customerId = serializers.IntegerField(min_value=1)
    counterId = serializers.IntegerField(min_value=1)


class CompleteServiceSerializer(serializers.Serializer):
    customerId = serializers.IntegerField(min_value=1)
    counterId = serializers.IntegerField(min_value=1, required=False, allow_null=True)


class CancelServiceSerializer(serializers.Serializer):
    customerId = serializers.IntegerField(min_value=1)
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class StatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=QueueStatus.choices)


class ChangeStatusSerializer(StatusSerializer):
    customerId = serializers.IntegerField(min_value=1)


class ReorderSerializer(serializers.Serializer):
    customerIds = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        allow_empty=False
    )

    def validate_customerIds(self, value):
        if len(set(value)) != len(value):
            raise serializers.ValidationError('Duplicate customer ids.')
        return value


class ResetQueueSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='')


# -----------------------------
# Responses
# -----------------------------
class QueueEntrySerializer(serializers.Serializer):
    customer_id = serializers.IntegerField(source='customer.pk')
    customer = CustomerSerializer()
    position = serializers.IntegerField()
    priority_score = serializers.IntegerField()
    estimated_wait_time = serializers.IntegerField(source='estimated_wait_minutes')


class ServingCustomerSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    token_number = serializers.IntegerField()
    formatted_token = serializers.CharField()
    queue_status = serializers.CharField()


class CounterSerializer(serializers.ModelSerializer):
    current_customer = ServingCustomerSerializer(read_only=True)

    class Meta:
        model = Counter
        fields = [
            'id', 'name', 'display_order', 'is_active', 'is_available',
            'current_customer', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'is_available', 'current_customer', 'created_at', 'updated_at']


class CounterWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=50)
    display_order = serializers.IntegerField(min_value=0, required=False, default=0)
    is_active = serializers.BooleanField(required=False, default=True)
