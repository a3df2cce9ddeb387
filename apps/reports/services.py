# apps/reports/services.py
import calendar
import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Sum, Count, Q
from django.db.models.functions import TruncDate

from core.constants import PaymentModes, PaymentStatus
from core.exceptions import ValidationError
from apps.customers.models import Customer
from apps.payments.models import Transaction
from apps.payments.services import to_amount
from .models import DailyReport

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')
TOP_AGENTS = 10

MODE_FIELDS = {
    PaymentModes.CASH: 'total_cash',
    PaymentModes.GCASH: 'total_gcash',
    PaymentModes.MAYA: 'total_maya',
    PaymentModes.CREDIT_CARD: 'total_credit_card',
    PaymentModes.BANK_TRANSFER: 'total_bank_transfer',
}


def _line_items(items, label):
    """Validate [{description, amount}] and store amounts as strings"""
    cleaned = []
    for item in items or []:
        if not isinstance(item, dict) or 'amount' not in item:
            raise ValidationError(f'Each {label} entry needs a description and an amount')
        cleaned.append({
            'description': str(item.get('description', '')),
            'amount': str(to_amount(item['amount'], field=f'{label} amount')),
        })
    return cleaned


def _line_total(items):
    return sum((Decimal(item['amount']) for item in items), ZERO)


class ReportService:
    """Read-only aggregates over transactions, plus the stored daily report"""

    @staticmethod
    def _transactions_between(start, end):
        return Transaction.objects.filter(
            transaction_date__date__gte=start,
            transaction_date__date__lte=end
        )

    @staticmethod
    def daily_summary(day):
        txns = ReportService._transactions_between(day, day)

        totals = txns.aggregate(
            total_amount=Sum('amount'),
            total_transactions=Count('id'),
            paid_transactions=Count('id', filter=Q(payment_status=PaymentStatus.PAID)),
            partial_transactions=Count('id', filter=Q(payment_status=PaymentStatus.PARTIAL)),
            unpaid_transactions=Count('id', filter=Q(payment_status=PaymentStatus.UNPAID)),
        )

        modes = {mode: {'amount': ZERO, 'count': 0} for mode in PaymentModes.values}
        for row in txns.values('payment_mode').annotate(amount=Sum('amount'), count=Count('id')):
            if row['payment_mode'] in modes:
                modes[row['payment_mode']] = {'amount': row['amount'] or ZERO, 'count': row['count']}

        agents = [
            {
                'sales_agent_id': row['sales_agent_id'],
                'agent_name': row['sales_agent__full_name'] or 'Unassigned',
                'amount': row['amount'] or ZERO,
                'count': row['count'],
            }
            for row in txns.values('sales_agent_id', 'sales_agent__full_name')
            .annotate(amount=Sum('amount'), count=Count('id'))
            .order_by('-amount')
        ]

        return {
            'date': day.isoformat(),
            'total_amount': totals['total_amount'] or ZERO,
            'total_transactions': totals['total_transactions'],
            'paid_transactions': totals['paid_transactions'],
            'partial_transactions': totals['partial_transactions'],
            'unpaid_transactions': totals['unpaid_transactions'],
            'registered_customers': Customer.objects.filter(token_date=day).count(),
            'payment_mode_breakdown': modes,
            'sales_agent_breakdown': agents,
        }

    @staticmethod
    def monthly_report(year, month):
        if not 1 <= month <= 12:
            raise ValidationError('month must be between 1 and 12')

        start = date(year, month, 1)
        end = date(year, month, calendar.monthrange(year, month)[1])
        txns = ReportService._transactions_between(start, end)

        daily = [
            {'date': row['day'].isoformat(), 'amount': row['amount'] or ZERO, 'transactions': row['transactions']}
            for row in txns.annotate(day=TruncDate('transaction_date'))
            .values('day')
            .annotate(amount=Sum('amount'), transactions=Count('id'))
            .order_by('-day')
        ]

        top_agents = [
            {'agent_name': row['sales_agent__full_name'], 'amount': row['amount'], 'transactions': row['transactions']}
            for row in txns.filter(sales_agent__isnull=False)
            .values('sales_agent_id', 'sales_agent__full_name')
            .annotate(amount=Sum('amount'), transactions=Count('id'))
            .order_by('-amount')[:TOP_AGENTS]
        ]

        totals = txns.aggregate(total_amount=Sum('amount'), total_transactions=Count('id'))
        return {
            'year': year,
            'month': month,
            'daily_breakdown': daily,
            'total_amount': totals['total_amount'] or ZERO,
            'total_transactions': totals['total_transactions'],
            'top_sales_agents': top_agents,
        }

    @staticmethod
    def payment_mode_stats(start, end):
        if start > end:
            raise ValidationError('start must not be after end')

        rows = list(
            ReportService._transactions_between(start, end)
            .values('payment_mode')
            .annotate(total_amount=Sum('amount'), transaction_count=Count('id'))
            .order_by('-total_amount')
        )
        grand_total = sum((row['total_amount'] or ZERO for row in rows), ZERO)

        for row in rows:
            row['total_amount'] = row['total_amount'] or ZERO
            if grand_total:
                share = row['total_amount'] * 100 / grand_total
                row['percentage'] = share.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
            else:
                row['percentage'] = ZERO
        return rows

    # ===== DAILY CASH REPORT =====

    @staticmethod
    def generate_daily_report(day, expenses=None, funds=None, petty_cash_start=0, petty_cash_end=0):
        """
        Build (not save) the daily cash report.

        cash_turnover = (petty start + all mode totals + funds) - expenses - petty end
        """
        expenses = _line_items(expenses, 'expense')
        funds = _line_items(funds, 'fund')
        petty_cash_start = to_amount(petty_cash_start, field='petty_cash_start')
        petty_cash_end = to_amount(petty_cash_end, field='petty_cash_end')

        summary = ReportService.daily_summary(day)
        breakdown = summary['payment_mode_breakdown']
        mode_total = sum((breakdown[mode]['amount'] for mode in MODE_FIELDS), ZERO)

        cash_turnover = (
            petty_cash_start + mode_total + _line_total(funds)
        ) - _line_total(expenses) - petty_cash_end

        report = {
            'date': day,
            'petty_cash_start': petty_cash_start,
            'petty_cash_end': petty_cash_end,
            'expenses': expenses,
            'funds': funds,
            'cash_turnover': cash_turnover,
            'transaction_count': summary['total_transactions'],
        }
        for mode, field in MODE_FIELDS.items():
            report[field] = breakdown[mode]['amount']
        return report

    @staticmethod
    def save_daily_report(report, user=None):
        """Insert or replace the report for report['date']"""
        defaults = {k: v for k, v in report.items() if k != 'date'}
        defaults['generated_by'] = user
        obj, created = DailyReport.objects.update_or_create(date=report['date'], defaults=defaults)
        logger.info(f"Daily report {'created' if created else 'updated'} for {obj.date}")
        return obj

    @staticmethod
    def get_daily_report(day):
        obj = DailyReport.objects.filter(date=day).first()
        if obj is None:
            return None
        return ReportService.normalize(obj)

    @staticmethod
    def normalize(obj):
        report = {
            'date': obj.date.isoformat(),
            'petty_cash_start': obj.petty_cash_start or ZERO,
            'petty_cash_end': obj.petty_cash_end or ZERO,
            'expenses': obj.expenses or [],
            'funds': obj.funds or [],
            'cash_turnover': obj.cash_turnover or ZERO,
            'transaction_count': obj.transaction_count or 0,
        }
        for field in MODE_FIELDS.values():
            report[field] = getattr(obj, field) or ZERO
        return report

    # ===== EXPORT ROWS =====

    @staticmethod
    def daily_export_sheets(day):
        summary = ReportService.daily_summary(day)
        overview = {k: v for k, v in summary.items() if not isinstance(v, (dict, list))}
        modes = [
            {'payment_mode': mode, 'amount': data['amount'], 'count': data['count']}
            for mode, data in summary['payment_mode_breakdown'].items()
        ]
        sheets = {
            'Summary': overview,
            'Payment Modes': modes,
            'Sales Agents': summary['sales_agent_breakdown'],
        }
        report = ReportService.get_daily_report(day)
        if report:
            sheets['Cash Report'] = {k: v for k, v in report.items() if k not in ('expenses', 'funds')}
            sheets['Expenses'] = report['expenses']
            sheets['Funds'] = report['funds']
        return sheets

    @staticmethod
    def monthly_export_sheets(year, month):
        report = ReportService.monthly_report(year, month)
        return {
            'Summary': {
                'year': year,
                'month': month,
                'total_amount': report['total_amount'],
                'total_transactions': report['total_transactions'],
            },
            'Daily': report['daily_breakdown'],
            'Top Sales Agents': report['top_sales_agents'],
        }
