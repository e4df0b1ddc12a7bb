# core/actions.py
"""Maintenance actions that span every clinic app."""
import logging

from django.db import transaction

from appointments.models import Appointment, AppointmentTreatment
from billing.models import Invoice
from patients.models import Patient
from treatments.models import Treatment

from .numbering import reset_sequences
from .results import Success, storage_guard
from .signals import DASHBOARD_PATH, revalidate_path

logger = logging.getLogger(__name__)

# Children before parents so no foreign key is left dangling
WIPE_ORDER = [
    ('appointment_treatments', AppointmentTreatment),
    ('invoices', Invoice),
    ('appointments', Appointment),
    ('patients', Patient),
    ('treatments', Treatment),
]


@storage_guard('Failed to wipe data')
def wipe_all_data():
    """
    Delete every clinic record and restart identifier sequences.

    Runs in a single transaction: if any delete fails, nothing is removed.
    """
    deleted = {}
    with transaction.atomic():
        for label, model in WIPE_ORDER:
            deleted[label], _ = model.objects.all().delete()
        deleted['sequence_counters'] = reset_sequences()

    logger.warning('Wiped all clinic data: %s', deleted)
    revalidate_path(DASHBOARD_PATH)
    return Success(deleted)
