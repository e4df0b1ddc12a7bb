# core/numbering.py
"""
Human-readable sequential identifiers such as PT-2024-00001 and INV-2024-00001.

The sequence restarts at 00001 every calendar year. Numbers are handed out from
a SequenceCounter row locked for the duration of the caller's transaction; the
first time a (prefix, year) counter is needed it is seeded from the highest
identifier already stored, so existing data keeps its numbering.
"""
import logging

from django.apps import apps
from django.db import transaction
from django.utils import timezone

from .models import SequenceCounter
from .results import IdentifierError

logger = logging.getLogger(__name__)

SEQUENCE_WIDTH = 5

RECORD_NUMBER_PREFIX = 'PT'
INVOICE_NUMBER_PREFIX = 'INV'


def format_identifier(prefix, year, value):
    return f'{prefix}-{year}-{value:0{SEQUENCE_WIDTH}d}'


def last_issued_value(prefix, model, field, year):
    """
    Sequence value of the newest stored identifier for prefix and year, or 0.

    Identifiers are zero padded, so descending string order is numeric order.
    """
    last_identifier = (
        model.objects
        .filter(**{f'{field}__startswith': f'{prefix}-{year}-'})
        .order_by(f'-{field}')
        .values_list(field, flat=True)
        .first()
    )
    if not last_identifier:
        return 0

    try:
        return int(last_identifier.split('-')[-1])
    except ValueError:
        raise IdentifierError(f'Cannot parse sequence from identifier {last_identifier!r}')


def next_identifier(prefix, model, field, year=None):
    """
    Issue the next identifier for prefix in year (current local year by default).

    Call this inside the transaction that saves the new row so the counter
    increment is rolled back together with a failed insert.
    """
    if year is None:
        year = timezone.localdate().year

    with transaction.atomic():
        counter, created = SequenceCounter.objects.select_for_update().get_or_create(
            prefix=prefix,
            year=year,
            defaults={'last_value': lambda: last_issued_value(prefix, model, field, year)},
        )
        if created and counter.last_value:
            logger.info('Seeded %s-%s sequence from existing data at %s', prefix, year, counter.last_value)

        counter.last_value += 1
        counter.save(update_fields=['last_value', 'updated_at'])

    return format_identifier(prefix, year, counter.last_value)


def next_record_number(year=None):
    """Next patient record number, PT-YYYY-NNNNN"""
    Patient = apps.get_model('patients', 'Patient')
    return next_identifier(RECORD_NUMBER_PREFIX, Patient, 'record_number', year)


def next_invoice_number(year=None):
    """Next invoice number, INV-YYYY-NNNNN"""
    Invoice = apps.get_model('billing', 'Invoice')
    return next_identifier(INVOICE_NUMBER_PREFIX, Invoice, 'invoice_number', year)


def reset_sequences():
    """Forget every issued number so the next identifier starts at 00001 again"""
    deleted, _ = SequenceCounter.objects.all().delete()
    return deleted
