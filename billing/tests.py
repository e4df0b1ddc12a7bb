# billing/tests.py
"""
Unit tests for invoice generation, invoice reads and exports
"""
import csv
import io
from datetime import date, datetime
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from appointments.models import Appointment, AppointmentTreatment
from core.results import CONFLICT, NOT_FOUND, VALIDATION
from patients.models import Patient
from treatments.models import Treatment
from users.models import User

from . import actions
from .models import Invoice


class InvoiceTestMixin:

    def setUp(self):
        self.patient = Patient.objects.create(
            record_number='PT-2024-00001', name='Maria Santos', date_of_birth=date(1985, 6, 15)
        )
        self.massage = Treatment.objects.create(name='Massage', price=Decimal('40.00'))
        self.exercise = Treatment.objects.create(name='Exercise Therapy', price=Decimal('25.50'))
        self.appointment = self.make_appointment([self.massage, self.exercise])

    def make_appointment(self, treatments, appointment_date=None):
        appointment = Appointment.objects.create(
            patient=self.patient,
            appointment_date=appointment_date or timezone.now(),
        )
        for treatment in treatments:
            AppointmentTreatment.objects.create(
                appointment=appointment, treatment=treatment, price_at_time=treatment.price
            )
        return appointment


class GenerateInvoiceTest(InvoiceTestMixin, TestCase):
    """Test generate_invoice"""

    def test_totals_price_snapshots(self):
        result = actions.generate_invoice(self.appointment.pk)

        self.assertTrue(result.success)
        invoice = result.data
        self.assertEqual(invoice.total_amount, Decimal('65.50'))
        self.assertEqual(invoice.status, Invoice.UNPAID)
        self.assertEqual(invoice.invoice_number, f'INV-{timezone.localdate().year}-00001')

    def test_later_price_change_does_not_affect_total(self):
        self.massage.price = Decimal('100.00')
        self.massage.save()

        result = actions.generate_invoice(self.appointment.pk)

        self.assertEqual(result.data.total_amount, Decimal('65.50'))

    def test_total_is_not_recomputed(self):
        invoice = actions.generate_invoice(self.appointment.pk).data
        AppointmentTreatment.objects.filter(appointment=self.appointment, treatment=self.exercise).delete()
        invoice.refresh_from_db()
        self.assertEqual(invoice.total_amount, Decimal('65.50'))

    def test_appointment_without_treatments_totals_zero(self):
        appointment = self.make_appointment([])
        result = actions.generate_invoice(appointment.pk)
        self.assertEqual(result.data.total_amount, Decimal('0.00'))

    def test_duplicate_rejected(self):
        actions.generate_invoice(self.appointment.pk)
        result = actions.generate_invoice(self.appointment.pk)

        self.assertFalse(result.success)
        self.assertEqual(result.code, CONFLICT)
        self.assertEqual(result.error, 'Invoice already exists for this appointment')
        self.assertEqual(Invoice.objects.count(), 1)

    def test_missing_appointment(self):
        result = actions.generate_invoice(9999)
        self.assertEqual(result.code, NOT_FOUND)
        self.assertEqual(result.error, 'Appointment not found')

    def test_numbers_continue_after_delete(self):
        year = timezone.localdate().year
        first = actions.generate_invoice(self.appointment.pk).data
        actions.delete_invoice(first.pk)

        second = actions.generate_invoice(self.appointment.pk).data

        self.assertEqual(second.invoice_number, f'INV-{year}-00002')


class InvoiceQueryTest(InvoiceTestMixin, TestCase):
    """Test invoice reads and writes"""

    def setUp(self):
        super().setUp()
        self.march = Invoice.objects.create(
            invoice_number='INV-2024-00001',
            appointment=self.appointment,
            total_amount=Decimal('65.50'),
            issue_date=timezone.make_aware(datetime(2024, 3, 10, 12, 0)),
        )
        self.april = Invoice.objects.create(
            invoice_number='INV-2024-00002',
            appointment=self.make_appointment([self.massage]),
            total_amount=Decimal('40.00'),
            issue_date=timezone.make_aware(datetime(2024, 4, 2, 12, 0)),
        )

    def test_list_without_bounds(self):
        self.assertEqual(len(actions.get_invoices().data), 2)

    def test_list_with_start_only(self):
        self.assertEqual(actions.get_invoices(start_date='2024-04-01').data, [self.april])

    def test_list_with_end_only(self):
        self.assertEqual(actions.get_invoices(end_date='2024-03-10').data, [self.march])

    def test_list_with_both_bounds(self):
        result = actions.get_invoices('2024-03-01', '2024-04-30')
        self.assertEqual({invoice.pk for invoice in result.data}, {self.march.pk, self.april.pk})

    def test_list_with_invalid_bound(self):
        self.assertEqual(actions.get_invoices(end_date='31/12/2024').code, VALIDATION)

    def test_detail_includes_treatment_lines(self):
        invoice = actions.get_invoice_by_id(self.march.pk).data
        data = invoice.as_dict(include_treatments=True)
        self.assertEqual([line['name'] for line in data['treatments']], ['Massage', 'Exercise Therapy'])
        self.assertEqual(data['patient']['name'], 'Maria Santos')

    def test_by_appointment(self):
        result = actions.get_invoice_by_appointment_id(self.appointment.pk)
        self.assertEqual(result.data, self.march)

    def test_update_status(self):
        result = actions.update_invoice_status(self.march.pk, 'paid')
        self.assertTrue(result.success)
        self.march.refresh_from_db()
        self.assertEqual(self.march.status, Invoice.PAID)

    def test_update_status_rejects_unknown_value(self):
        self.assertEqual(actions.update_invoice_status(self.march.pk, 'refunded').code, VALIDATION)

    def test_delete(self):
        self.assertTrue(actions.delete_invoice(self.march.pk).success)
        self.assertEqual(actions.delete_invoice(self.march.pk).code, NOT_FOUND)

    def test_export_read(self):
        result = actions.get_invoices_for_export()
        self.assertEqual(len(result.data), 2)


class InvoiceViewTest(InvoiceTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.client.force_login(User.objects.create_superuser(username='admin', password='pass12345'))

    def test_generate(self):
        response = self.client.post(
            reverse('billing:invoice_generate'),
            {'appointment_id': self.appointment.pk},
            content_type='application/json'
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['data']['total_amount'], '65.50')

    def test_generate_twice_is_a_conflict(self):
        url = reverse('billing:invoice_generate')
        self.client.post(url, {'appointment_id': self.appointment.pk})
        response = self.client.post(url, {'appointment_id': self.appointment.pk})
        self.assertEqual(response.status_code, 409)

    def test_generate_requires_appointment(self):
        response = self.client.post(reverse('billing:invoice_generate'), {'appointment_id': 'abc'})
        self.assertEqual(response.status_code, 400)

    def test_generate_for_missing_appointment(self):
        response = self.client.post(reverse('billing:invoice_generate'), {'appointment_id': 9999})
        self.assertEqual(response.status_code, 404)

    def test_csv_export(self):
        actions.generate_invoice(self.appointment.pk)

        response = self.client.get(reverse('billing:invoice_export'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'text/csv')
        rows = list(csv.reader(io.StringIO(response.content.decode())))
        self.assertEqual(rows[0][0], 'Invoice Number')
        self.assertEqual(rows[1][1:3], ['Maria Santos', 'PT-2024-00001'])
        self.assertEqual(rows[1][5], '65.50')
        self.assertEqual(rows[1][6], 'Unpaid')

    def test_pdf(self):
        invoice = actions.generate_invoice(self.appointment.pk).data

        response = self.client.get(reverse('billing:invoice_pdf', args=[invoice.pk]))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_pdf_for_missing_invoice(self):
        response = self.client.get(reverse('billing:invoice_pdf', args=[9999]))
        self.assertEqual(response.status_code, 404)

    def test_billing_permission_required(self):
        self.client.force_login(User.objects.create_user(username='guest', password='pass12345'))
        response = self.client.get(reverse('billing:invoice_list'))
        self.assertEqual(response.status_code, 403)
