# apps/notifications/views.py
from rest_framework import serializers, status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.permissions import IsStaff
from .models import RealtimeEvent

MAX_EVENTS = 200


class RealtimeEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = RealtimeEvent
        fields = ['id', 'event_type', 'entity_type', 'entity_id', 'payload', 'created_at']


class RealtimeEventListView(APIView):
    """Poll events newer than ?after=<id>"""
    permission_classes = [IsStaff]

    def get(self, request):
        after = request.query_params.get('after', '0')
        try:
            after = int(after)
        except ValueError:
            return Response({'error': 'after must be an integer'}, status=status.HTTP_400_BAD_REQUEST)

        queryset = RealtimeEvent.objects.filter(id__gt=after)
        event_type = request.query_params.get('event')
        if event_type:
            queryset = queryset.filter(event_type=event_type)

        events = list(queryset.order_by('id')[:MAX_EVENTS])
        return Response({
            'events': RealtimeEventSerializer(events, many=True).data,
            'last_id': events[-1].id if events else after,
        })
