# appointments/views.py
from django.contrib.auth.decorators import login_required
from django.views.decorators.http import require_GET, require_POST

from core.results import invalid_payload_response, result_response, serialize_many
from core.utils import parse_request_data
from users.decorators import permission_required_json

from . import actions
from .models import Appointment, AppointmentTreatment


def appointment_with_treatments(appointment):
    return appointment.as_dict(include_treatments=True)


@login_required
@require_GET
@permission_required_json('appointments')
def appointment_list(request):
    """List appointments, optionally limited by ?start= and ?end= (inclusive)"""
    result = actions.get_appointments(request.GET.get('start'), request.GET.get('end'))
    return result_response(result, serialize=serialize_many(Appointment.as_dict))


@login_required
@require_POST
@permission_required_json('appointments')
def appointment_create(request):
    try:
        data = parse_request_data(request)
    except ValueError:
        return invalid_payload_response()
    return result_response(
        actions.create_appointment(data),
        serialize=appointment_with_treatments,
        status=201
    )


@login_required
@require_GET
@permission_required_json('appointments')
def appointment_detail(request, pk):
    return result_response(actions.get_appointment_by_id(pk), serialize=appointment_with_treatments)


@login_required
@require_GET
@permission_required_json('appointments')
def patient_appointments(request, patient_id):
    result = actions.get_appointments_by_patient_id(patient_id)
    return result_response(result, serialize=serialize_many(Appointment.as_dict))


@login_required
@require_POST
@permission_required_json('appointments')
def appointment_status(request, pk):
    try:
        data = parse_request_data(request)
    except ValueError:
        return invalid_payload_response()
    return result_response(
        actions.update_appointment_status(pk, data.get('status')),
        serialize=Appointment.as_dict
    )


@login_required
@require_POST
@permission_required_json('appointments')
def treatment_notes(request, pk, treatment_id):
    try:
        data = parse_request_data(request)
    except ValueError:
        return invalid_payload_response()
    return result_response(
        actions.update_treatment_notes(pk, treatment_id, data.get('notes')),
        serialize=AppointmentTreatment.as_dict
    )


@login_required
@require_POST
@permission_required_json('appointments')
def appointment_delete(request, pk):
    return result_response(actions.delete_appointment(pk))
