# treatments/views.py
from django.contrib.auth.decorators import login_required
from django.views.decorators.http import require_GET, require_POST

from core.results import invalid_payload_response, result_response, serialize_many
from core.utils import parse_request_data
from users.decorators import permission_required_json

from . import actions
from .models import Treatment


@login_required
@require_GET
@permission_required_json('treatments')
def treatment_list(request):
    return result_response(actions.get_treatments(), serialize=serialize_many(Treatment.as_dict))


@login_required
@require_POST
@permission_required_json('treatments')
def treatment_create(request):
    try:
        data = parse_request_data(request)
    except ValueError:
        return invalid_payload_response()
    return result_response(actions.create_treatment(data), serialize=Treatment.as_dict, status=201)


@login_required
@require_GET
@permission_required_json('treatments')
def treatment_detail(request, pk):
    return result_response(actions.get_treatment_by_id(pk), serialize=Treatment.as_dict)


@login_required
@require_POST
@permission_required_json('treatments')
def treatment_update(request, pk):
    try:
        data = parse_request_data(request)
    except ValueError:
        return invalid_payload_response()
    return result_response(actions.update_treatment(pk, data), serialize=Treatment.as_dict)


@login_required
@require_POST
@permission_required_json('treatments')
def treatment_delete(request, pk):
    return result_response(actions.delete_treatment(pk))
