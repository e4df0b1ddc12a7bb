# treatments/actions.py
import logging

from django.db.models import ProtectedError

from core.results import CONFLICT, Failure, Success, not_found, storage_guard, validation_failure
from core.signals import revalidate_path

from .forms import TreatmentForm
from .models import Treatment

logger = logging.getLogger(__name__)

TREATMENTS_PATH = '/dashboard/treatments'


@storage_guard('Failed to create treatment')
def create_treatment(data):
    form = TreatmentForm(data)
    if not form.is_valid():
        return validation_failure(form)

    treatment = form.save()
    logger.info('Created treatment %s (id=%s)', treatment.name, treatment.pk)
    revalidate_path(TREATMENTS_PATH)
    return Success(treatment)


@storage_guard('Failed to fetch treatments')
def get_treatments():
    return Success(list(Treatment.objects.order_by('-created_at')))


@storage_guard('Failed to fetch treatment')
def get_treatment_by_id(treatment_id):
    try:
        return Success(Treatment.objects.get(pk=treatment_id))
    except Treatment.DoesNotExist:
        return not_found('Treatment')


@storage_guard('Failed to update treatment')
def update_treatment(treatment_id, data):
    """
    Change a catalog treatment. Appointments already recorded keep the price
    they were charged.
    """
    try:
        treatment = Treatment.objects.get(pk=treatment_id)
    except Treatment.DoesNotExist:
        return not_found('Treatment')

    merged = {'name': treatment.name, 'description': treatment.description, 'price': treatment.price}
    merged.update(dict(data.items()))

    form = TreatmentForm(merged, instance=treatment)
    if not form.is_valid():
        return validation_failure(form)

    treatment = form.save()
    logger.info('Updated treatment %s (id=%s)', treatment.name, treatment.pk)
    revalidate_path(TREATMENTS_PATH)
    return Success(treatment)


@storage_guard('Failed to delete treatment')
def delete_treatment(treatment_id):
    try:
        treatment = Treatment.objects.get(pk=treatment_id)
    except Treatment.DoesNotExist:
        return not_found('Treatment')

    try:
        treatment.delete()
    except ProtectedError:
        return Failure(
            'Cannot delete treatment. It is recorded on existing appointments.',
            CONFLICT
        )

    logger.info('Deleted treatment %s (id=%s)', treatment.name, treatment_id)
    revalidate_path(TREATMENTS_PATH)
    return Success()
