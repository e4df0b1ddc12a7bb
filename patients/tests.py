# patients/tests.py
"""
Unit tests for patient records
"""
from datetime import date, timedelta
from decimal import Decimal

from django.core.cache import cache
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from appointments.models import Appointment
from billing.models import Invoice
from core.results import CONFLICT, NOT_FOUND, VALIDATION
from core.signals import DASHBOARD_PATH, page_cache_key
from core.utils import get_local_today
from users.models import User

from . import actions
from .models import Patient


def make_patient(name='Maria Santos', record_number='PT-2020-00001', **kwargs):
    kwargs.setdefault('date_of_birth', date(1985, 6, 15))
    return Patient.objects.create(name=name, record_number=record_number, **kwargs)


class PatientModelTest(TestCase):
    """Test Patient model"""

    def test_age_in_full_years(self):
        patient = make_patient(date_of_birth=date(get_local_today().year - 30, 1, 1))
        self.assertEqual(patient.age, 30)

    def test_str(self):
        patient = make_patient()
        self.assertEqual(str(patient), 'Maria Santos (PT-2020-00001)')


class CreatePatientTest(TestCase):
    """Test create_patient"""

    def test_assigns_sequential_record_numbers(self):
        year = timezone.localdate().year
        first = actions.create_patient({'name': 'Maria Santos', 'date_of_birth': '1985-06-15'})
        second = actions.create_patient({'name': 'Juan Reyes', 'date_of_birth': '1990-01-01'})

        self.assertTrue(first.success)
        self.assertTrue(second.success)
        self.assertEqual(first.data.record_number, f'PT-{year}-00001')
        self.assertEqual(second.data.record_number, f'PT-{year}-00002')

    def test_age_becomes_january_first(self):
        result = actions.create_patient({'name': 'Ana Cruz', 'age': 40})
        self.assertTrue(result.success)
        self.assertEqual(result.data.date_of_birth, date(get_local_today().year - 40, 1, 1))

    def test_age_out_of_range(self):
        result = actions.create_patient({'name': 'Ana Cruz', 'age': 151})
        self.assertFalse(result.success)
        self.assertEqual(result.code, VALIDATION)
        self.assertIn('age', result.field_errors)

    def test_requires_date_of_birth_or_age(self):
        result = actions.create_patient({'name': 'Ana Cruz'})
        self.assertFalse(result.success)
        self.assertIn('date_of_birth', result.field_errors)

    def test_rejects_future_date_of_birth(self):
        tomorrow = get_local_today() + timedelta(days=1)
        result = actions.create_patient({'name': 'Ana Cruz', 'date_of_birth': tomorrow.isoformat()})
        self.assertFalse(result.success)
        self.assertEqual(result.error, 'Date of birth cannot be in the future.')

    def test_rejects_short_name(self):
        result = actions.create_patient({'name': 'A', 'date_of_birth': '1985-06-15'})
        self.assertFalse(result.success)
        self.assertIn('name', result.field_errors)

    def test_collapses_whitespace_in_name(self):
        result = actions.create_patient({'name': '  Maria   Santos ', 'date_of_birth': '1985-06-15'})
        self.assertEqual(result.data.name, 'Maria Santos')

    def test_write_drops_cached_dashboard(self):
        cache.set(page_cache_key(DASHBOARD_PATH), {'stale': True})
        actions.create_patient({'name': 'Maria Santos', 'date_of_birth': '1985-06-15'})
        self.assertIsNone(cache.get(page_cache_key(DASHBOARD_PATH)))


class PatientQueryTest(TestCase):
    """Test patient search and lookup"""

    def setUp(self):
        self.maria = make_patient('Maria Santos', 'PT-2024-00001')
        self.juan = make_patient('Juan Reyes', 'PT-2024-00002')
        Patient.objects.filter(pk=self.maria.pk).update(created_at=timezone.now() - timedelta(days=1))

    def test_search_by_name_is_case_insensitive(self):
        result = actions.get_patients('maria')
        self.assertEqual(result.data, [self.maria])

    def test_search_by_record_number(self):
        result = actions.get_patients('00002')
        self.assertEqual(result.data, [self.juan])

    def test_no_search_returns_newest_first(self):
        result = actions.get_patients()
        self.assertEqual(result.data, [self.juan, self.maria])

    def test_get_missing_patient(self):
        result = actions.get_patient_by_id(9999)
        self.assertEqual(result.code, NOT_FOUND)
        self.assertEqual(result.error, 'Patient not found')

    def test_partial_update_keeps_other_fields(self):
        result = actions.update_patient(self.maria.pk, {'address': '12 Rizal Ave'})
        self.assertTrue(result.success)
        self.maria.refresh_from_db()
        self.assertEqual(self.maria.address, '12 Rizal Ave')
        self.assertEqual(self.maria.name, 'Maria Santos')
        self.assertEqual(self.maria.date_of_birth, date(1985, 6, 15))
        self.assertEqual(self.maria.record_number, 'PT-2024-00001')

    def test_update_with_age_replaces_date_of_birth(self):
        actions.update_patient(self.maria.pk, {'age': 50})
        self.maria.refresh_from_db()
        self.assertEqual(self.maria.date_of_birth, date(get_local_today().year - 50, 1, 1))


class DeletePatientTest(TestCase):
    """Test the patient delete guard"""

    def setUp(self):
        self.patient = make_patient()

    def test_delete_without_appointments(self):
        result = actions.delete_patient(self.patient.pk)
        self.assertTrue(result.success)
        self.assertFalse(Patient.objects.exists())

    def test_delete_blocked_by_appointments(self):
        Appointment.objects.create(patient=self.patient)
        Appointment.objects.create(patient=self.patient)

        result = actions.delete_patient(self.patient.pk)

        self.assertEqual(result.code, CONFLICT)
        self.assertEqual(
            result.error,
            'Cannot delete patient. Patient has 2 appointment(s). Please delete all appointments first.'
        )
        self.assertTrue(Patient.objects.filter(pk=self.patient.pk).exists())

    def test_delete_blocked_by_invoiced_appointments(self):
        invoiced = Appointment.objects.create(patient=self.patient)
        Appointment.objects.create(patient=self.patient)
        Invoice.objects.create(invoice_number='INV-2024-00001', appointment=invoiced, total_amount=Decimal('100.00'))

        result = actions.delete_patient(self.patient.pk)

        self.assertEqual(result.code, CONFLICT)
        self.assertEqual(
            result.error,
            'Cannot delete patient. Patient has 2 appointment(s) with 1 invoice(s). '
            'Please delete all invoices and appointments first.'
        )

    def test_delete_missing_patient(self):
        self.assertEqual(actions.delete_patient(9999).code, NOT_FOUND)


class PatientViewTest(TestCase):
    """Test patient endpoints and status codes"""

    def setUp(self):
        self.user = User.objects.create_superuser(username='admin', password='pass12345')
        self.client.force_login(self.user)

    def test_list_requires_login(self):
        self.client.logout()
        response = self.client.get(reverse('patients:patient_list'))
        self.assertEqual(response.status_code, 302)

    def test_list_requires_permission(self):
        self.client.force_login(User.objects.create_user(username='guest', password='pass12345'))
        response = self.client.get(reverse('patients:patient_list'))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['error'], 'Permission denied')

    def test_create(self):
        response = self.client.post(
            reverse('patients:patient_create'),
            {'name': 'Maria Santos', 'date_of_birth': '1985-06-15'},
            content_type='application/json'
        )
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertTrue(data['success'])
        self.assertTrue(data['data']['record_number'].startswith('PT-'))

    def test_create_invalid(self):
        response = self.client.post(reverse('patients:patient_create'), {'name': 'Maria Santos'})
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()['success'])
        self.assertIn('date_of_birth', response.json()['errors'])

    def test_create_malformed_json(self):
        response = self.client.post(reverse('patients:patient_create'), '[1, 2', content_type='application/json')
        self.assertEqual(response.status_code, 400)

    def test_search(self):
        make_patient('Maria Santos', 'PT-2024-00001')
        make_patient('Juan Reyes', 'PT-2024-00002')
        response = self.client.get(reverse('patients:patient_list'), {'search': 'juan'})
        names = [patient['name'] for patient in response.json()['data']]
        self.assertEqual(names, ['Juan Reyes'])

    def test_detail_not_found(self):
        response = self.client.get(reverse('patients:patient_detail', args=[9999]))
        self.assertEqual(response.status_code, 404)

    def test_delete_conflict(self):
        patient = make_patient()
        Appointment.objects.create(patient=patient)
        response = self.client.post(reverse('patients:patient_delete', args=[patient.pk]))
        self.assertEqual(response.status_code, 409)
