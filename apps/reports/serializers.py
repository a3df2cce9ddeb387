# apps/reports/serializers.py
from decimal import Decimal

from django.utils import timezone
from rest_framework import serializers


class DateQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)

    def validate(self, data):
        data.setdefault('date', timezone.localdate())
        return data


class MonthQuerySerializer(serializers.Serializer):
    year = serializers.IntegerField(min_value=2000, max_value=2100, required=False)
    month = serializers.IntegerField(min_value=1, max_value=12, required=False)

    def validate(self, data):
        today = timezone.localdate()
        data.setdefault('year', today.year)
        data.setdefault('month', today.month)
        return data


class RangeQuerySerializer(serializers.Serializer):
    start = serializers.DateField()
    end = serializers.DateField()

    def validate(self, data):
        if data['start'] > data['end']:
            raise serializers.ValidationError('start must not be after end')
        return data


class LineItemSerializer(serializers.Serializer):
    description = serializers.CharField(max_length=255, allow_blank=True, default='')
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0.00'))


class DailyReportInputSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    expenses = LineItemSerializer(many=True, required=False, default=list)
    funds = LineItemSerializer(many=True, required=False, default=list)
    petty_cash_start = serializers.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    petty_cash_end = serializers.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))

    def validate(self, data):
        data.setdefault('date', timezone.localdate())
        return data
