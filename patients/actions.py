# patients/actions.py
"""
Patient data access: create, search, read, update and guarded delete.
"""
import logging

from django.db import transaction
from django.db.models import Q
from django.forms.models import model_to_dict

from core.numbering import next_record_number
from core.results import CONFLICT, Failure, Success, not_found, storage_guard, validation_failure
from core.signals import DASHBOARD_PATH, revalidate_path

from .forms import PatientForm
from .models import Patient

logger = logging.getLogger(__name__)

PATIENTS_PATH = '/dashboard/patients'


def patient_path(patient_id):
    return f'{PATIENTS_PATH}/{patient_id}'


@storage_guard('Failed to create patient')
def create_patient(data):
    form = PatientForm(data)
    if not form.is_valid():
        return validation_failure(form)

    with transaction.atomic():
        patient = form.save(commit=False)
        patient.record_number = next_record_number()
        patient.save()

    logger.info('Created patient %s (id=%s)', patient.record_number, patient.pk)
    revalidate_path(PATIENTS_PATH, DASHBOARD_PATH)
    return Success(patient)


@storage_guard('Failed to fetch patients')
def get_patients(search_query=None):
    """All patients newest first, optionally filtered by name or record number"""
    patients = Patient.objects.all()
    if search_query:
        search_query = search_query.strip()
        patients = patients.filter(
            Q(name__icontains=search_query) |
            Q(record_number__icontains=search_query)
        )
    return Success(list(patients.order_by('-created_at')))


@storage_guard('Failed to fetch patient')
def get_patient_by_id(patient_id):
    try:
        return Success(Patient.objects.get(pk=patient_id))
    except Patient.DoesNotExist:
        return not_found('Patient')


@storage_guard('Failed to update patient')
def update_patient(patient_id, data):
    """
    Update a patient. Fields missing from data keep their stored values; an
    age in data replaces the stored date of birth.
    """
    try:
        patient = Patient.objects.get(pk=patient_id)
    except Patient.DoesNotExist:
        return not_found('Patient')

    merged = model_to_dict(patient, fields=PatientForm._meta.fields)
    incoming = dict(data.items())
    if incoming.get('age') not in (None, ''):
        merged.pop('date_of_birth', None)
    merged.update(incoming)

    form = PatientForm(merged, instance=patient)
    if not form.is_valid():
        return validation_failure(form)

    patient = form.save()
    logger.info('Updated patient %s (id=%s)', patient.record_number, patient.pk)
    revalidate_path(PATIENTS_PATH, patient_path(patient.pk), DASHBOARD_PATH)
    return Success(patient)


@storage_guard('Failed to delete patient')
def delete_patient(patient_id):
    """Delete a patient that no appointment references"""
    try:
        patient = Patient.objects.get(pk=patient_id)
    except Patient.DoesNotExist:
        return not_found('Patient')

    appointment_count = patient.appointments.count()
    if appointment_count:
        invoice_count = patient.appointments.filter(invoice__isnull=False).count()
        if invoice_count:
            message = (
                f'Cannot delete patient. Patient has {appointment_count} appointment(s) '
                f'with {invoice_count} invoice(s). Please delete all invoices and appointments first.'
            )
        else:
            message = (
                f'Cannot delete patient. Patient has {appointment_count} appointment(s). '
                'Please delete all appointments first.'
            )
        return Failure(message, CONFLICT)

    record_number = patient.record_number
    patient.delete()
    logger.info('Deleted patient %s (id=%s)', record_number, patient_id)
    revalidate_path(PATIENTS_PATH, DASHBOARD_PATH)
    return Success()
