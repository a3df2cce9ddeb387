# apps/customers/views.py
import logging

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from core.constants import QueueStatus
from core.permissions import IsStaff
from .models import Customer
from .serializers import CustomerSerializer, CustomerWriteSerializer
from .services import CustomerService

logger = logging.getLogger(__name__)

ORDERING_FIELDS = ['created_at', 'updated_at', 'name', 'or_number', 'age', 'queue_status', 'token_number']


class StandardPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class CustomerViewSet(viewsets.GenericViewSet):
    """Customer registration, lookup and daily statistics"""

    queryset = Customer.objects.all()
    lookup_value_regex = r'\d+'
    serializer_class = CustomerSerializer
    permission_classes = [IsStaff]
    pagination_class = StandardPagination

    @property
    def service(self):
        if not hasattr(self, '_service'):
            self._service = CustomerService()
        return self._service

    def _ordering(self):
        ordering = self.request.query_params.get('ordering', '-created_at')
        if ordering.lstrip('-') not in ORDERING_FIELDS:
            return '-created_at'
        return ordering

    def list(self, request):
        params = request.query_params
        status_filter = params.get('status')
        if status_filter and status_filter not in QueueStatus.values:
            return Response({'error': f'Unknown status: {status_filter}'}, status=status.HTTP_400_BAD_REQUEST)

        queryset = self.service.list(
            status=status_filter,
            sales_agent_id=params.get('sales_agent_id'),
            search=params.get('search'),
            start_date=params.get('start_date'),
            end_date=params.get('end_date'),
            ordering=self._ordering(),
        )
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(CustomerSerializer(page, many=True).data)
        return Response(CustomerSerializer(queryset, many=True).data)

    def retrieve(self, request, pk=None):
        return Response(CustomerSerializer(self.service.get(pk)).data)

    def create(self, request):
        serializer = CustomerWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        create_transaction = data.pop('create_initial_transaction', False)
        if not data.get('or_number'):
            data.pop('or_number', None)

        customer = self.service.register(
            data,
            sales_agent=request.user,
            create_initial_transaction=create_transaction
        )
        return Response(CustomerSerializer(customer).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        serializer = CustomerWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        data.pop('create_initial_transaction', None)
        data.pop('or_number', None)

        customer = self.service.update(pk, data)
        return Response(CustomerSerializer(customer).data)

    @action(detail=False, methods=['get'])
    def stats(self, request):
        """Today's counts per queue status"""
        return Response(self.service.statistics())

    @action(detail=False, methods=['get'], url_path='agent-stats')
    def agent_stats(self, request):
        """Registration counts for a sales agent (defaults to the caller)"""
        agent_id = request.query_params.get('sales_agent_id') or request.user.pk
        return Response(self.service.sales_agent_statistics(agent_id))
