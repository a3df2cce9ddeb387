# apps/queues/views.py
import logging

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response

from core.permissions import IsStaff, IsAdmin, IsCashierOrAdmin, ReadOnlyOrCashierOrAdmin
from apps.customers.serializers import CustomerSerializer
from .models import Counter
from .serializers import (
    CallNextSerializer, CallCustomerSerializer, CompleteServiceSerializer,
    CancelServiceSerializer, StatusSerializer, ChangeStatusSerializer,
    ReorderSerializer, ResetQueueSerializer, QueueEntrySerializer,
    CounterSerializer, CounterWriteSerializer
)
from .services import QueueService, CounterService

logger = logging.getLogger(__name__)

READ_ACTIONS = ['list', 'all_statuses', 'display', 'position', 'stats']


# ===========================================
# QUEUE
# ===========================================
class QueueViewSet(viewsets.ViewSet):
    """Queue views and status changes"""

    lookup_value_regex = r'\d+'

    def get_permissions(self):
        if self.action in READ_ACTIONS:
            permission_classes = [IsStaff]
        elif self.action == 'reset':
            permission_classes = [IsAdmin]
        else:
            permission_classes = [IsCashierOrAdmin]
        return [permission() for permission in permission_classes]

    @property
    def service(self):
        if not hasattr(self, '_service'):
            self._service = QueueService()
        return self._service

    def _validated(self, serializer_class, data):
        serializer = serializer_class(data=data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data

    def _entries(self, entries):
        return Response(QueueEntrySerializer(entries, many=True).data)

    def list(self, request):
        """Queue for one status (waiting by default) with positions"""
        return self._entries(self.service.get_queue(request.query_params.get('status')))

    @action(detail=False, methods=['get'], url_path='all-statuses')
    def all_statuses(self, request):
        return self._entries(self.service.get_all_statuses())

    @action(detail=False, methods=['get'])
    def display(self, request):
        """Waiting and serving customers for the lobby display"""
        return self._entries(self.service.get_display_queue())

    @action(detail=False, methods=['post'], url_path='call-next')
    def call_next(self, request):
        data = self._validated(CallNextSerializer, request.data)
        customer = self.service.call_next(data['counterId'])
        return Response({
            'message': f'Customer #{customer.formatted_token} called',
            'customer': CustomerSerializer(customer).data,
            'counter_id': data['counterId'],
        })

    @action(detail=False, methods=['post'], url_path='call-customer')
    def call_customer(self, request):
        data = self._validated(CallCustomerSerializer, request.data)
        customer = self.service.call_specific(data['customerId'], data['counterId'])
        return Response({
            'message': f'Customer #{customer.formatted_token} called',
            'customer': CustomerSerializer(customer).data,
            'counter_id': data['counterId'],
        })

    @action(detail=False, methods=['post'])
    def complete(self, request):
        data = self._validated(CompleteServiceSerializer, request.data)
        customer = self.service.complete_service(data['customerId'], data.get('counterId'))
        return Response({
            'message': 'Service completed',
            'customer': CustomerSerializer(customer).data,
        })

    @action(detail=False, methods=['post'])
    def cancel(self, request):
        data = self._validated(CancelServiceSerializer, request.data)
        customer = self.service.cancel_service(data['customerId'], data['reason'])
        return Response({
            'message': 'Service cancelled',
            'customer': CustomerSerializer(customer).data,
        })

    @action(detail=False, methods=['post'], url_path='change-status')
    def change_status(self, request):
        data = self._validated(ChangeStatusSerializer, request.data)
        customer = self.service.change_status(
            data['customerId'], data['status'],
            actor_id=request.user.pk, actor_role=request.user.role
        )
        return Response({'customer': CustomerSerializer(customer).data})

    @action(detail=True, methods=['patch'], url_path='status')
    def set_status(self, request, pk=None):
        data = self._validated(StatusSerializer, request.data)
        customer = self.service.change_status(
            int(pk), data['status'],
            actor_id=request.user.pk, actor_role=request.user.role
        )
        return Response({'customer': CustomerSerializer(customer).data})

    @action(detail=False, methods=['put'])
    def reorder(self, request):
        data = self._validated(ReorderSerializer, request.data)
        return self._entries(self.service.reorder_queue(data['customerIds']))

    @action(detail=False, methods=['post'])
    def reset(self, request):
        data = self._validated(ResetQueueSerializer, request.data)
        summary = self.service.reset_queue(actor_id=request.user.pk, reason=data['reason'])
        logger.warning(f"Queue reset by {request.user}: {summary}")
        return Response(summary)

    @action(detail=False, methods=['get'], url_path=r'position/(?P<customer_id>\d+)')
    def position(self, request, customer_id=None):
        return Response(self.service.get_position(int(customer_id)))

    @action(detail=False, methods=['get'])
    def stats(self, request):
        return Response(self.service.get_statistics())


# ===========================================
# COUNTERS
# ===========================================
class CounterViewSet(viewsets.GenericViewSet):
    """Service counters"""

    queryset = Counter.objects.select_related('current_customer')
    serializer_class = CounterSerializer
    permission_classes = [ReadOnlyOrCashierOrAdmin]
    lookup_value_regex = r'\d+'

    @property
    def service(self):
        if not hasattr(self, '_service'):
            self._service = CounterService()
        return self._service

    def list(self, request):
        active_only = request.query_params.get('active') in ('1', 'true', 'True')
        return Response(CounterSerializer(self.service.list(active_only=active_only), many=True).data)

    def retrieve(self, request, pk=None):
        return Response(CounterSerializer(self.get_object()).data)

    def create(self, request):
        serializer = CounterWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        counter = self.service.create(**serializer.validated_data)
        return Response(CounterSerializer(counter).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        serializer = CounterWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        counter = self.service.update(int(pk), **serializer.validated_data)
        return Response(CounterSerializer(counter).data)

    @action(detail=False, methods=['get'])
    def display(self, request):
        """Active counters with the customer each is serving"""
        return Response(CounterSerializer(self.service.list_for_display(), many=True).data)
