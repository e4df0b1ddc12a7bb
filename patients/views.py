# patients/views.py
from django.contrib.auth.decorators import login_required
from django.views.decorators.http import require_GET, require_POST

from core.results import invalid_payload_response, result_response, serialize_many
from core.utils import parse_request_data
from users.decorators import permission_required_json

from . import actions
from .models import Patient


@login_required
@require_GET
@permission_required_json('patients')
def patient_list(request):
    """List patients, filtered by ?search= on name or record number"""
    result = actions.get_patients(request.GET.get('search'))
    return result_response(result, serialize=serialize_many(Patient.as_dict))


@login_required
@require_POST
@permission_required_json('patients')
def patient_create(request):
    try:
        data = parse_request_data(request)
    except ValueError:
        return invalid_payload_response()
    return result_response(actions.create_patient(data), serialize=Patient.as_dict, status=201)


@login_required
@require_GET
@permission_required_json('patients')
def patient_detail(request, pk):
    return result_response(actions.get_patient_by_id(pk), serialize=Patient.as_dict)


@login_required
@require_POST
@permission_required_json('patients')
def patient_update(request, pk):
    try:
        data = parse_request_data(request)
    except ValueError:
        return invalid_payload_response()
    return result_response(actions.update_patient(pk, data), serialize=Patient.as_dict)


@login_required
@require_POST
@permission_required_json('patients')
def patient_delete(request, pk):
    return result_response(actions.delete_patient(pk))
