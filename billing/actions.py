# billing/actions.py
"""
Invoice generation and invoice data access.

An invoice bills the prices recorded on its appointment's treatment lines, not
the current catalog prices, and its total never changes after generation.
"""
import logging

from django.db import IntegrityError, transaction

from appointments.actions import appointment_path
from appointments.models import Appointment
from core.numbering import next_invoice_number
from core.results import (
    CONFLICT, VALIDATION, Failure, Success, not_found, storage_guard, validation_failure,
)
from core.signals import DASHBOARD_PATH, revalidate_path
from core.utils import date_range_filter, quantize_money

from .forms import InvoiceStatusForm
from .models import Invoice

logger = logging.getLogger(__name__)

INVOICES_PATH = '/dashboard/invoices'

DUPLICATE_INVOICE_MESSAGE = 'Invoice already exists for this appointment'


def invoice_path(invoice_id):
    return f'{INVOICES_PATH}/{invoice_id}'


def _with_patient(queryset):
    return queryset.select_related('appointment', 'appointment__patient')


@storage_guard('Failed to generate invoice')
def generate_invoice(appointment_id):
    """
    Bill an appointment: total its treatment price snapshots, assign the next
    invoice number and store the invoice as unpaid, all in one transaction.
    """
    try:
        with transaction.atomic():
            try:
                appointment = Appointment.objects.select_for_update().get(pk=appointment_id)
            except Appointment.DoesNotExist:
                return not_found('Appointment')

            if Invoice.objects.filter(appointment=appointment).exists():
                return Failure(DUPLICATE_INVOICE_MESSAGE, CONFLICT)

            prices = appointment.treatment_lines.values_list('price_at_time', flat=True)
            total = quantize_money(sum(prices, 0))

            invoice = Invoice.objects.create(
                invoice_number=next_invoice_number(),
                appointment=appointment,
                total_amount=total,
                status=Invoice.UNPAID,
            )
    except IntegrityError:
        # Another request invoiced the same appointment first
        logger.warning('Concurrent invoice generation for appointment %s', appointment_id)
        return Failure(DUPLICATE_INVOICE_MESSAGE, CONFLICT)

    logger.info(
        'Generated invoice %s for appointment %s, total %s',
        invoice.invoice_number, appointment_id, invoice.total_amount
    )
    revalidate_path(INVOICES_PATH, appointment_path(appointment_id), DASHBOARD_PATH)
    return Success(invoice)


@storage_guard('Failed to fetch invoices')
def get_invoices(start_date=None, end_date=None):
    """Invoices newest first, optionally limited to an inclusive issue date range"""
    try:
        filters = date_range_filter('issue_date', start_date, end_date)
    except ValueError as exc:
        return Failure(str(exc), VALIDATION)

    invoices = _with_patient(Invoice.objects).filter(**filters).order_by('-created_at')
    return Success(list(invoices))


@storage_guard('Failed to fetch invoice')
def get_invoice_by_id(invoice_id):
    try:
        invoice = (
            _with_patient(Invoice.objects)
            .prefetch_related('appointment__treatment_lines__treatment')
            .get(pk=invoice_id)
        )
    except Invoice.DoesNotExist:
        return not_found('Invoice')
    return Success(invoice)


@storage_guard('Failed to fetch invoice')
def get_invoice_by_appointment_id(appointment_id):
    try:
        return Success(_with_patient(Invoice.objects).get(appointment_id=appointment_id))
    except Invoice.DoesNotExist:
        return not_found('Invoice')


@storage_guard('Failed to update invoice')
def update_invoice_status(invoice_id, status):
    form = InvoiceStatusForm({'status': status})
    if not form.is_valid():
        return validation_failure(form)

    try:
        invoice = _with_patient(Invoice.objects).get(pk=invoice_id)
    except Invoice.DoesNotExist:
        return not_found('Invoice')

    invoice.status = form.cleaned_data['status']
    invoice.save(update_fields=['status'])

    logger.info('Invoice %s marked %s', invoice.invoice_number, invoice.status)
    revalidate_path(INVOICES_PATH, invoice_path(invoice.pk), DASHBOARD_PATH)
    return Success(invoice)


@storage_guard('Failed to delete invoice')
def delete_invoice(invoice_id):
    try:
        invoice = Invoice.objects.get(pk=invoice_id)
    except Invoice.DoesNotExist:
        return not_found('Invoice')

    invoice_number = invoice.invoice_number
    appointment_id = invoice.appointment_id
    invoice.delete()

    logger.info('Deleted invoice %s', invoice_number)
    revalidate_path(INVOICES_PATH, appointment_path(appointment_id), DASHBOARD_PATH)
    return Success()


@storage_guard('Failed to fetch invoices')
def get_invoices_for_export():
    """Every invoice with its patient and appointment, newest first"""
    return Success(list(_with_patient(Invoice.objects).order_by('-created_at')))
