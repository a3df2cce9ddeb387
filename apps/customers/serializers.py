# apps/customers/serializers.py
from decimal import Decimal

from rest_framework import serializers

from core.constants import DistributionType, PaymentModes
from apps.queues.priority import priority_score
from .models import Customer


# -----------------------------
# JSON column shapes
# -----------------------------
class PriorityFlagsSerializer(serializers.Serializer):
    senior_citizen = serializers.BooleanField(default=False)
    pregnant = serializers.BooleanField(default=False)
    pwd = serializers.BooleanField(default=False)


class PrescriptionSerializer(serializers.Serializer):
    od = serializers.CharField(required=False, allow_blank=True, default='')
    os = serializers.CharField(required=False, allow_blank=True, default='')
    ou = serializers.CharField(required=False, allow_blank=True, default='')
    pd = serializers.CharField(required=False, allow_blank=True, default='')
    add = serializers.CharField(required=False, allow_blank=True, default='')


class PaymentInfoSerializer(serializers.Serializer):
    mode = serializers.ChoiceField(choices=PaymentModes.choices, default=PaymentModes.CASH)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'), default=Decimal('0.00'))


class EstimatedTimeSerializer(serializers.Serializer):
    days = serializers.IntegerField(min_value=0, default=0)
    hours = serializers.IntegerField(min_value=0, default=0)
    minutes = serializers.IntegerField(min_value=0, default=0)


# -----------------------------
# Customer
# -----------------------------
class CustomerSerializer(serializers.ModelSerializer):
    sales_agent_name = serializers.CharField(source='sales_agent.full_name', read_only=True, default=None)
    priority_score = serializers.SerializerMethodField()
    formatted_token = serializers.CharField(read_only=True)

    class Meta:
        model = Customer
        fields = [
            'id', 'or_number', 'name', 'contact_number', 'email', 'age',
            'address', 'occupation', 'distribution_info', 'sales_agent',
            'sales_agent_name', 'doctor_assigned', 'prescription', 'grade_type',
            'lens_type', 'frame_code', 'estimated_time', 'payment_info',
            'remarks', 'priority_flags', 'priority_score', 'queue_status',
            'token_number', 'formatted_token', 'token_date', 'manual_position',
            'cancellation_reason', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_priority_score(self, obj):
        return priority_score(obj.flags)


class CustomerWriteSerializer(serializers.Serializer):
    """Registration payload; used with partial=True for updates"""

    or_number = serializers.CharField(max_length=50, required=False, allow_blank=True)
    name = serializers.CharField(max_length=150)
    contact_number = serializers.CharField(max_length=30, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    age = serializers.IntegerField(min_value=0, max_value=150, required=False, allow_null=True)
    address = serializers.CharField(required=False, allow_blank=True)
    occupation = serializers.CharField(max_length=100, required=False, allow_blank=True)
    distribution_info = serializers.ChoiceField(choices=DistributionType.choices, required=False)
    doctor_assigned = serializers.CharField(max_length=150, required=False, allow_blank=True)
    prescription = PrescriptionSerializer(required=False)
    grade_type = serializers.CharField(max_length=100, required=False, allow_blank=True)
    lens_type = serializers.CharField(max_length=100, required=False, allow_blank=True)
    frame_code = serializers.CharField(max_length=100, required=False, allow_blank=True)
    estimated_time = EstimatedTimeSerializer(required=False)
    payment_info = PaymentInfoSerializer(required=False)
    remarks = serializers.CharField(required=False, allow_blank=True)
    priority_flags = PriorityFlagsSerializer(required=False)
    create_initial_transaction = serializers.BooleanField(required=False, default=False)
