"""
Date, money and request helpers shared by the clinic apps.
"""
import calendar
import json
from datetime import date, datetime, time
from decimal import Decimal, ROUND_HALF_UP

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

CENTS = Decimal('0.01')


def get_local_today():
    """Get today's date in the clinic's timezone."""
    return timezone.localtime(timezone.now()).date()


def start_of_month(now=None):
    """
    Midnight of the first calendar day of the month containing now.

    Args:
        now (datetime): Reference instant, defaults to the current time

    Returns:
        datetime: Timezone-aware start of month in the clinic's timezone
    """
    now = timezone.localtime(now or timezone.now())
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def months_before(dt, months):
    """Same instant `months` calendar months earlier, clamping the day to the month length"""
    month_index = dt.year * 12 + (dt.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def calculate_age(date_of_birth, today=None):
    """Full years elapsed since date_of_birth"""
    if date_of_birth is None:
        return None
    today = today or get_local_today()
    age = today.year - date_of_birth.year
    # Adjust if birthday hasn't occurred this year yet
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def quantize_money(amount):
    """Round a Decimal amount to cents"""
    return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_bound(value, end_of_day=False):
    """
    Parse a date range bound from a query string.

    Accepts an ISO datetime or a plain YYYY-MM-DD date. A plain date becomes the
    start of that day, or its last microsecond when end_of_day is set, so both
    bounds stay inclusive.

    Returns:
        datetime or None: Aware datetime, None for empty input

    Raises:
        ValueError: If the value is neither a date nor a datetime
    """
    if value in (None, ''):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.max if end_of_day else time.min)
    else:
        day = parse_date(value) if len(value) == 10 else None
        if day is not None:
            parsed = datetime.combine(day, time.max if end_of_day else time.min)
        else:
            parsed = parse_datetime(value)
            if parsed is None:
                raise ValueError(f'Invalid date: {value}')

    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def get_client_ip(request):
    """Get client IP address from request"""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('HTTP_X_REAL_IP') or request.META.get('REMOTE_ADDR') or 'unknown'


def parse_request_data(request):
    """
    Request payload as a mapping: decoded JSON body, or the POST QueryDict.

    Raises:
        ValueError: If a JSON body cannot be decoded to an object
    """
    if request.content_type == 'application/json':
        data = json.loads(request.body or b'{}')
        if not isinstance(data, dict):
            raise ValueError('Expected a JSON object')
        return data
    return request.POST


def date_range_filter(field, start_date=None, end_date=None):
    """
    Queryset filter kwargs for an inclusive range on field.

    Either bound may be omitted; a plain end date covers that whole day.

    Raises:
        ValueError: If a bound cannot be parsed
    """
    filters = {}
    start = parse_bound(start_date)
    end = parse_bound(end_date, end_of_day=True)
    if start is not None:
        filters[f'{field}__gte'] = start
    if end is not None:
        filters[f'{field}__lte'] = end
    return filters
