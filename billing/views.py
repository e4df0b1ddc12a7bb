# billing/views.py
import csv
import logging

from django.contrib.auth.decorators import login_required
from django.http import HttpResponse, JsonResponse
from django.template.loader import render_to_string
from django.utils import timezone
from django.views.decorators.http import require_GET, require_POST
from xhtml2pdf import pisa

from core.results import invalid_payload_response, result_response, serialize_many
from core.utils import get_local_today, parse_request_data
from users.decorators import permission_required_json

from . import actions
from .models import Invoice

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    'Invoice Number',
    'Patient Name',
    'Patient Record',
    'Appointment Date',
    'Issue Date',
    'Total Amount',
    'Status',
]


def invoice_with_treatments(invoice):
    return invoice.as_dict(include_treatments=True)


@login_required
@require_GET
@permission_required_json('billing')
def invoice_list(request):
    """List invoices, optionally limited by ?start= and ?end= on the issue date"""
    result = actions.get_invoices(request.GET.get('start'), request.GET.get('end'))
    return result_response(result, serialize=serialize_many(Invoice.as_dict))


@login_required
@require_POST
@permission_required_json('billing')
def invoice_generate(request):
    try:
        data = parse_request_data(request)
    except ValueError:
        return invalid_payload_response()

    appointment_id = data.get('appointment_id')
    if not str(appointment_id or '').isdigit():
        return JsonResponse({'success': False, 'error': 'A valid appointment is required.'}, status=400)

    return result_response(
        actions.generate_invoice(int(appointment_id)),
        serialize=invoice_with_treatments,
        status=201
    )


@login_required
@require_GET
@permission_required_json('billing')
def invoice_detail(request, pk):
    return result_response(actions.get_invoice_by_id(pk), serialize=invoice_with_treatments)


@login_required
@require_GET
@permission_required_json('billing')
def appointment_invoice(request, appointment_id):
    return result_response(actions.get_invoice_by_appointment_id(appointment_id), serialize=Invoice.as_dict)


@login_required
@require_POST
@permission_required_json('billing')
def invoice_status(request, pk):
    try:
        data = parse_request_data(request)
    except ValueError:
        return invalid_payload_response()
    return result_response(actions.update_invoice_status(pk, data.get('status')), serialize=Invoice.as_dict)


@login_required
@require_POST
@permission_required_json('billing')
def invoice_delete(request, pk):
    return result_response(actions.delete_invoice(pk))


@login_required
@require_GET
@permission_required_json('billing')
def export_invoices_csv(request):
    """Download every invoice as CSV"""
    result = actions.get_invoices_for_export()
    if not result.success:
        return result_response(result)

    response = HttpResponse(content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="invoices_{get_local_today()}.csv"'

    writer = csv.writer(response)
    writer.writerow(EXPORT_COLUMNS)
    for invoice in result.data:
        writer.writerow([
            invoice.invoice_number,
            invoice.patient.name,
            invoice.patient.record_number,
            timezone.localtime(invoice.appointment.appointment_date).strftime('%Y-%m-%d %H:%M'),
            timezone.localtime(invoice.issue_date).strftime('%Y-%m-%d'),
            f'{invoice.total_amount:.2f}',
            invoice.get_status_display(),
        ])

    logger.info('User %s exported %d invoice(s)', request.user.username, len(result.data))
    return response


@login_required
@require_GET
@permission_required_json('billing')
def invoice_pdf(request, pk):
    """Printable invoice rendered with xhtml2pdf"""
    result = actions.get_invoice_by_id(pk)
    if not result.success:
        return result_response(result)

    invoice = result.data
    context = {
        'invoice': invoice,
        'patient': invoice.patient,
        'appointment': invoice.appointment,
        'lines': invoice.appointment.treatment_lines.all(),
        'generated_at': timezone.now(),
    }

    # Clinic name, address and currency come from the clinic_settings context processor
    html_string = render_to_string('billing/invoice_pdf.html', context, request=request)

    response = HttpResponse(content_type='application/pdf')
    response['Content-Disposition'] = f'inline; filename="{invoice.invoice_number}.pdf"'

    pisa_status = pisa.CreatePDF(html_string, dest=response)
    if pisa_status.err:
        logger.error('PDF generation failed for invoice %s', invoice.invoice_number)
        return JsonResponse({'success': False, 'error': 'Error generating PDF. Please try again.'}, status=500)

    return response
