# apps/reports/urls.py
from django.urls import path

from .views import (
    DailyReportView, DailySummaryView, MonthlyReportView,
    PaymentModeStatsView, DailyExportView, MonthlyExportView
)

urlpatterns = [
    path('daily/', DailyReportView.as_view(), name='daily-report'),
    path('summary/', DailySummaryView.as_view(), name='daily-summary'),
    path('monthly/', MonthlyReportView.as_view(), name='monthly-report'),
    path('payment-modes/', PaymentModeStatsView.as_view(), name='payment-mode-stats'),
    path('export/daily/', DailyExportView.as_view(), name='export-daily'),
    path('export/monthly/', MonthlyExportView.as_view(), name='export-monthly'),
]
