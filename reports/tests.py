# reports/tests.py
"""
Unit tests for dashboard rollups and current-month counters
"""
from datetime import date, datetime, timedelta
from decimal import Decimal

from django.core.cache import cache
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from appointments.models import Appointment, AppointmentTreatment
from billing.models import Invoice
from patients import actions as patient_actions
from patients.models import Patient
from treatments.models import Treatment
from users.models import User

from . import aggregations


def aware(*args):
    return timezone.make_aware(datetime(*args))


class MonthlyRollupTest(TestCase):
    """Test the twelve-month rollups"""

    def setUp(self):
        cache.clear()
        self.now = aware(2024, 4, 15, 12, 0)
        self.patient = Patient.objects.create(
            record_number='PT-2024-00001', name='Maria Santos', date_of_birth=date(1985, 6, 15)
        )
        self.treatment = Treatment.objects.create(name='Massage', price=Decimal('50.00'))

        for number, (when, price) in enumerate([
            (aware(2024, 3, 5, 10, 0), Decimal('100.00')),
            (aware(2024, 3, 20, 10, 0), Decimal('150.00')),
            (aware(2024, 4, 1, 10, 0), Decimal('200.00')),
        ], start=1):
            self.add_visit(number, when, price, Invoice.PAID)

    def add_visit(self, number, when, price, status):
        appointment = Appointment.objects.create(patient=self.patient, appointment_date=when)
        AppointmentTreatment.objects.create(appointment=appointment, treatment=self.treatment, price_at_time=price)
        return Invoice.objects.create(
            invoice_number=f'INV-{when.year}-{number:05d}',
            appointment=appointment,
            total_amount=price,
            issue_date=when,
            status=status,
        )

    def test_appointments_by_month(self):
        result = aggregations.appointments_by_month(self.now)
        self.assertEqual(result.data, [
            {'month': '2024-03', 'count': 2},
            {'month': '2024-04', 'count': 1},
        ])

    def test_revenue_by_month(self):
        result = aggregations.revenue_by_month(self.now)
        self.assertEqual(result.data, [
            {'month': '2024-03', 'revenue': Decimal('250.00')},
            {'month': '2024-04', 'revenue': Decimal('200.00')},
        ])

    def test_rows_older_than_twelve_months_are_excluded(self):
        self.add_visit(4, aware(2023, 4, 14, 10, 0), Decimal('80.00'), Invoice.PAID)
        self.add_visit(5, aware(2023, 4, 16, 10, 0), Decimal('90.00'), Invoice.PAID)

        appointments = aggregations.appointments_by_month(self.now).data
        revenue = aggregations.revenue_by_month(self.now).data

        self.assertEqual(appointments[0], {'month': '2023-04', 'count': 1})
        self.assertEqual(revenue[0], {'month': '2023-04', 'revenue': Decimal('90.00')})

    def test_unpaid_and_void_invoices_are_not_revenue(self):
        self.add_visit(4, aware(2024, 4, 3, 10, 0), Decimal('70.00'), Invoice.UNPAID)
        self.add_visit(5, aware(2024, 4, 4, 10, 0), Decimal('60.00'), Invoice.VOID)

        revenue = aggregations.revenue_by_month(self.now).data
        self.assertEqual(revenue[-1], {'month': '2024-04', 'revenue': Decimal('200.00')})

    def test_current_month_counters(self):
        self.assertEqual(aggregations.appointments_this_month(self.now).data, 1)
        self.assertEqual(aggregations.revenue_this_month(self.now).data, Decimal('200.00'))

    def test_revenue_this_month_without_invoices(self):
        later = aware(2024, 6, 10, 9, 0)
        self.assertEqual(aggregations.revenue_this_month(later).data, Decimal('0.00'))

    def test_new_patients_this_month(self):
        self.assertEqual(aggregations.new_patients_this_month().data, 1)
        next_month = timezone.now() + timedelta(days=40)
        self.assertEqual(aggregations.new_patients_this_month(next_month).data, 0)

    def test_pinned_summary(self):
        summary = aggregations.dashboard_summary(self.now).data
        self.assertEqual(summary['appointments_this_month'], 1)
        self.assertEqual(len(summary['appointments_by_month']), 2)


class DashboardCacheTest(TestCase):
    """Test caching of the live dashboard summary"""

    def setUp(self):
        cache.clear()

    def test_summary_is_cached_until_a_write(self):
        first = aggregations.dashboard_summary().data
        self.assertEqual(first['new_patients_this_month'], 0)

        Patient.objects.create(record_number='PT-2024-00001', name='Maria Santos', date_of_birth=date(1985, 6, 15))
        self.assertEqual(aggregations.dashboard_summary().data['new_patients_this_month'], 0)

        patient_actions.create_patient({'name': 'Juan Reyes', 'date_of_birth': '1990-01-01'})
        self.assertEqual(aggregations.dashboard_summary().data['new_patients_this_month'], 2)


class ReportsViewTest(TestCase):

    def setUp(self):
        cache.clear()
        self.client.force_login(User.objects.create_superuser(username='admin', password='pass12345'))

    def test_dashboard(self):
        response = self.client.get(reverse('reports:dashboard'))
        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['revenue_this_month'], '0.00')
        self.assertEqual(data['appointments_by_month'], [])

    def test_rollup_endpoints(self):
        for name in ('reports:appointments_by_month', 'reports:revenue_by_month'):
            response = self.client.get(reverse(name))
            self.assertEqual(response.status_code, 200)
            self.assertTrue(response.json()['success'])
