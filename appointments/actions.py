# appointments/actions.py
"""
Appointment data access. Creating an appointment copies each treatment's
current catalog price onto the appointment, so invoices bill what was charged
on the day.
"""
import logging

from django.db import transaction

from core.results import (
    CONFLICT, VALIDATION, Failure, Success, not_found, storage_guard, validation_failure,
)
from core.signals import DASHBOARD_PATH, revalidate_path
from core.utils import date_range_filter
from patients.actions import patient_path
from patients.models import Patient

from .forms import AppointmentForm, AppointmentStatusForm, TreatmentNotesForm
from .models import Appointment, AppointmentTreatment

logger = logging.getLogger(__name__)

APPOINTMENTS_PATH = '/dashboard/appointments'


def appointment_path(appointment_id):
    return f'{APPOINTMENTS_PATH}/{appointment_id}'


def _with_lines(queryset):
    return queryset.select_related('patient').prefetch_related('treatment_lines__treatment')


@storage_guard('Failed to create appointment')
def create_appointment(data):
    form = AppointmentForm(data)
    if not form.is_valid():
        return validation_failure(form)

    with transaction.atomic():
        appointment = form.save()
        AppointmentTreatment.objects.bulk_create([
            AppointmentTreatment(
                appointment=appointment,
                treatment=treatment,
                price_at_time=treatment.price,
            )
            for treatment in form.cleaned_data['treatment_ids']
        ])

    logger.info(
        'Created appointment %s for patient %s with %d treatment(s)',
        appointment.pk, appointment.patient_id, len(form.cleaned_data['treatment_ids'])
    )
    revalidate_path(APPOINTMENTS_PATH, patient_path(appointment.patient_id), DASHBOARD_PATH)
    return Success(appointment)


@storage_guard('Failed to fetch appointments')
def get_appointments(start_date=None, end_date=None):
    """Appointments newest first, optionally within an inclusive date range"""
    try:
        filters = date_range_filter('appointment_date', start_date, end_date)
    except ValueError as exc:
        return Failure(str(exc), VALIDATION)

    appointments = (
        Appointment.objects
        .select_related('patient')
        .filter(**filters)
        .order_by('-appointment_date')
    )
    return Success(list(appointments))


@storage_guard('Failed to fetch appointment')
def get_appointment_by_id(appointment_id):
    try:
        return Success(_with_lines(Appointment.objects).get(pk=appointment_id))
    except Appointment.DoesNotExist:
        return not_found('Appointment')


@storage_guard('Failed to fetch appointments')
def get_appointments_by_patient_id(patient_id):
    if not Patient.objects.filter(pk=patient_id).exists():
        return not_found('Patient')

    appointments = (
        Appointment.objects
        .select_related('patient')
        .filter(patient_id=patient_id)
        .order_by('-appointment_date')
    )
    return Success(list(appointments))


@storage_guard('Failed to update appointment')
def update_appointment_status(appointment_id, status):
    form = AppointmentStatusForm({'status': status})
    if not form.is_valid():
        return validation_failure(form)

    try:
        appointment = Appointment.objects.select_related('patient').get(pk=appointment_id)
    except Appointment.DoesNotExist:
        return not_found('Appointment')

    appointment.status = form.cleaned_data['status']
    appointment.save(update_fields=['status'])

    logger.info('Appointment %s marked %s', appointment.pk, appointment.status)
    revalidate_path(APPOINTMENTS_PATH, appointment_path(appointment.pk))
    return Success(appointment)


@storage_guard('Failed to update treatment notes')
def update_treatment_notes(appointment_id, treatment_id, notes):
    """Replace the notes kept for one treatment given during an appointment"""
    form = TreatmentNotesForm({'notes': notes or ''})
    if not form.is_valid():
        return validation_failure(form)

    try:
        line = (
            AppointmentTreatment.objects
            .select_related('treatment')
            .get(appointment_id=appointment_id, treatment_id=treatment_id)
        )
    except AppointmentTreatment.DoesNotExist:
        return not_found('Treatment for this appointment')

    line.notes = form.cleaned_data['notes']
    line.save(update_fields=['notes'])

    revalidate_path(appointment_path(appointment_id))
    return Success(line)


@storage_guard('Failed to delete appointment')
def delete_appointment(appointment_id):
    """Delete an appointment and its treatment lines unless it has been invoiced"""
    try:
        appointment = Appointment.objects.get(pk=appointment_id)
    except Appointment.DoesNotExist:
        return not_found('Appointment')

    if hasattr(appointment, 'invoice'):
        return Failure(
            'Cannot delete appointment with existing invoices. Please delete the invoice first.',
            CONFLICT
        )

    patient_id = appointment.patient_id
    with transaction.atomic():
        AppointmentTreatment.objects.filter(appointment_id=appointment_id).delete()
        appointment.delete()

    logger.info('Deleted appointment %s', appointment_id)
    revalidate_path(APPOINTMENTS_PATH, patient_path(patient_id), DASHBOARD_PATH)
    return Success()
