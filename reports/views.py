# reports/views.py
from django.contrib.auth.decorators import login_required
from django.views.decorators.http import require_GET

from core.results import result_response
from users.decorators import permission_required_json

from . import aggregations


@login_required
@require_GET
@permission_required_json('dashboard')
def dashboard(request):
    """Current-month counters and twelve-month rollups"""
    return result_response(aggregations.dashboard_summary())


@login_required
@require_GET
@permission_required_json('reports')
def appointments_by_month(request):
    return result_response(aggregations.appointments_by_month())


@login_required
@require_GET
@permission_required_json('reports')
def revenue_by_month(request):
    return result_response(aggregations.revenue_by_month())
