# apps/payments/views.py
import logging

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from core.exceptions import NotFoundError
from core.permissions import IsStaff, IsCashierOrAdmin, ReadOnlyOrCashierOrAdmin
from apps.customers.models import Customer
from .models import Transaction
from .serializers import (
    TransactionSerializer, TransactionDetailSerializer,
    TransactionCreateSerializer, TransactionUpdateSerializer,
    SettlementSerializer, SettlementCreateSerializer
)
from .services import LedgerService, TransactionService

logger = logging.getLogger(__name__)


class StandardPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


# ===========================================
# VIEWSETS
# ===========================================
class TransactionViewSet(viewsets.GenericViewSet):
    """Transactions and their settlements"""

    queryset = Transaction.objects.all()
    lookup_value_regex = r'\d+'
    serializer_class = TransactionSerializer
    pagination_class = StandardPagination

    def get_permissions(self):
        if self.action in ['list', 'retrieve', 'create', 'partial_update']:
            permission_classes = [IsStaff]
        elif self.action == 'settlements':
            permission_classes = [ReadOnlyOrCashierOrAdmin]
        else:
            permission_classes = [IsCashierOrAdmin]
        return [permission() for permission in permission_classes]

    @property
    def service(self):
        if not hasattr(self, '_service'):
            self._service = TransactionService()
        return self._service

    def list(self, request):
        queryset = self.service.list(request.query_params)
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(TransactionSerializer(page, many=True).data)
        return Response(TransactionSerializer(queryset, many=True).data)

    def retrieve(self, request, pk=None):
        txn = self.service.get(pk)
        return Response(TransactionDetailSerializer(txn).data)

    def create(self, request):
        serializer = TransactionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        customer = Customer.objects.filter(pk=data.pop('customer_id')).first()
        if customer is None:
            raise NotFoundError('Customer not found')

        txn = self.service.create(customer, **data)
        return Response(TransactionSerializer(txn).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        serializer = TransactionUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        txn = self.service.update(pk, **serializer.validated_data)
        return Response(TransactionSerializer(self.service.get(txn.pk)).data)

    @action(detail=True, methods=['get', 'post'])
    def settlements(self, request, pk=None):
        """List settlements or record a new one"""
        if request.method == 'GET':
            settlements = self.service.settlements(pk)
            return Response(SettlementSerializer(settlements, many=True).data)

        serializer = SettlementCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        txn = LedgerService(notifier=self.service.notifier).record_settlement(
            pk,
            amount=data['amount'],
            payment_mode=data['payment_mode'],
            processor_id=data.get('cashier_id') or request.user.pk,
            notes=data.get('notes', ''),
        )
        return Response(
            TransactionDetailSerializer(self.service.get(txn.pk)).data,
            status=status.HTTP_201_CREATED
        )

    @action(detail=True, methods=['post'])
    def recalculate(self, request, pk=None):
        """Re-derive payment status from settlement history"""
        txn = LedgerService(notifier=self.service.notifier).recalculate(pk)
        return Response(TransactionSerializer(self.service.get(txn.pk)).data)
