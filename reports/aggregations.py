# reports/aggregations.py
"""
Dashboard figures: monthly rollups over the trailing twelve months and
counters for the current calendar month.

Every function takes an optional `now` so the reporting window can be pinned;
it defaults to the current time in the clinic's timezone.
"""
import logging
from decimal import Decimal

from django.conf import settings
from django.core.cache import cache
from django.db.models import Count, Sum
from django.db.models.functions import TruncMonth
from django.utils import timezone

from appointments.models import Appointment
from billing.models import Invoice
from core.results import Success, storage_guard
from core.signals import DASHBOARD_PATH, page_cache_key
from core.utils import months_before, quantize_money, start_of_month
from patients.models import Patient

logger = logging.getLogger(__name__)

ROLLUP_MONTHS = 12
MONTH_KEY_FORMAT = '%Y-%m'


def _local(now):
    return timezone.localtime(now or timezone.now())


def _rollup_start(now):
    return months_before(_local(now), ROLLUP_MONTHS)


@storage_guard('Failed to fetch appointments by month')
def appointments_by_month(now=None):
    """Appointment counts per YYYY-MM over the trailing twelve months, oldest first"""
    rows = (
        Appointment.objects
        .filter(appointment_date__gte=_rollup_start(now))
        .annotate(month=TruncMonth('appointment_date'))
        .values('month')
        .annotate(count=Count('id'))
        .order_by('month')
    )
    return Success([
        {'month': row['month'].strftime(MONTH_KEY_FORMAT), 'count': row['count']}
        for row in rows
    ])


@storage_guard('Failed to fetch revenue by month')
def revenue_by_month(now=None):
    """Paid invoice totals per YYYY-MM of issue date over the trailing twelve months"""
    rows = (
        Invoice.objects
        .filter(status=Invoice.PAID, issue_date__gte=_rollup_start(now))
        .annotate(month=TruncMonth('issue_date'))
        .values('month')
        .annotate(revenue=Sum('total_amount'))
        .order_by('month')
    )
    return Success([
        {'month': row['month'].strftime(MONTH_KEY_FORMAT), 'revenue': quantize_money(row['revenue'])}
        for row in rows
    ])


@storage_guard('Failed to fetch count')
def new_patients_this_month(now=None):
    since = start_of_month(_local(now))
    return Success(Patient.objects.filter(created_at__gte=since).count())


@storage_guard('Failed to fetch count')
def appointments_this_month(now=None):
    since = start_of_month(_local(now))
    return Success(Appointment.objects.filter(appointment_date__gte=since).count())


@storage_guard('Failed to fetch revenue')
def revenue_this_month(now=None):
    """Total of paid invoices issued since the first day of the month"""
    since = start_of_month(_local(now))
    total = (
        Invoice.objects
        .filter(status=Invoice.PAID, issue_date__gte=since)
        .aggregate(total=Sum('total_amount'))['total']
    )
    return Success(quantize_money(total or Decimal('0')))


SUMMARY_FIGURES = [
    ('new_patients_this_month', new_patients_this_month),
    ('appointments_this_month', appointments_this_month),
    ('revenue_this_month', revenue_this_month),
    ('appointments_by_month', appointments_by_month),
    ('revenue_by_month', revenue_by_month),
]


def dashboard_summary(now=None):
    """
    All dashboard figures in one payload.

    The live summary is cached under the dashboard route's key; any write that
    invalidates the dashboard drops it. Summaries for a pinned `now` are never
    cached.
    """
    cache_key = page_cache_key(DASHBOARD_PATH)
    if now is None:
        cached = cache.get(cache_key)
        if cached is not None:
            return Success(cached)

    summary = {}
    for name, figure in SUMMARY_FIGURES:
        result = figure(now)
        if not result.success:
            return result
        summary[name] = result.data

    if now is None:
        cache.set(cache_key, summary, getattr(settings, 'DASHBOARD_CACHE_TIMEOUT', 300))
    return Success(summary)
