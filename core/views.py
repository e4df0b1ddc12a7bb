# core/views.py
import logging

from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.views.decorators.http import require_POST

from users.decorators import permission_required_json

from .actions import wipe_all_data
from .results import invalid_payload_response, result_response
from .utils import parse_request_data

logger = logging.getLogger(__name__)

WIPE_CONFIRMATION = 'WIPE'


@login_required
@require_POST
@permission_required_json('maintenance')
def wipe_data(request):
    """Delete every patient, treatment, appointment and invoice"""
    try:
        data = parse_request_data(request)
    except ValueError:
        return invalid_payload_response()

    if data.get('confirm') != WIPE_CONFIRMATION:
        return JsonResponse(
            {'success': False, 'error': f'Type {WIPE_CONFIRMATION} to confirm deleting all data.'},
            status=400
        )

    logger.warning('User %s requested a full data wipe', request.user.username)
    return result_response(wipe_all_data())
