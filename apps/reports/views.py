# apps/reports/views.py
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.permissions import IsCashierOrAdmin
from core.utils.excel_export import export_multiple_sheets
from .serializers import (
    DateQuerySerializer, MonthQuerySerializer, RangeQuerySerializer,
    DailyReportInputSerializer
)
from .services import ReportService

logger = logging.getLogger(__name__)


class ReportAPIView(APIView):
    permission_classes = [IsCashierOrAdmin]

    def query(self, serializer_class):
        serializer = serializer_class(data=self.request.query_params)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data


class DailyReportView(ReportAPIView):
    """Stored end-of-day cash report"""

    def get(self, request):
        day = self.query(DateQuerySerializer)['date']
        report = ReportService.get_daily_report(day)
        if report is None:
            return Response(
                {'error': f'No daily report for {day}'},
                status=status.HTTP_404_NOT_FOUND
            )
        return Response(report)

    def post(self, request):
        serializer = DailyReportInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        report = ReportService.generate_daily_report(
            data['date'],
            expenses=data['expenses'],
            funds=data['funds'],
            petty_cash_start=data['petty_cash_start'],
            petty_cash_end=data['petty_cash_end'],
        )
        saved = ReportService.save_daily_report(report, user=request.user)
        return Response(ReportService.normalize(saved), status=status.HTTP_201_CREATED)


class DailySummaryView(ReportAPIView):
    def get(self, request):
        return Response(ReportService.daily_summary(self.query(DateQuerySerializer)['date']))


class MonthlyReportView(ReportAPIView):
    def get(self, request):
        params = self.query(MonthQuerySerializer)
        return Response(ReportService.monthly_report(params['year'], params['month']))


class PaymentModeStatsView(ReportAPIView):
    def get(self, request):
        params = self.query(RangeQuerySerializer)
        return Response(ReportService.payment_mode_stats(params['start'], params['end']))


class DailyExportView(ReportAPIView):
    def get(self, request):
        day = self.query(DateQuerySerializer)['date']
        logger.info(f"Daily report export for {day} by {request.user}")
        return export_multiple_sheets(
            ReportService.daily_export_sheets(day),
            filename=f'daily_report_{day:%Y%m%d}'
        )


class MonthlyExportView(ReportAPIView):
    def get(self, request):
        params = self.query(MonthQuerySerializer)
        logger.info(f"Monthly report export for {params['year']}-{params['month']:02d} by {request.user}")
        return export_multiple_sheets(
            ReportService.monthly_export_sheets(params['year'], params['month']),
            filename=f"monthly_report_{params['year']}{params['month']:02d}"
        )
