# treatments/tests.py
from datetime import date
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse

from appointments.models import Appointment, AppointmentTreatment
from core.results import CONFLICT, NOT_FOUND, VALIDATION
from patients.models import Patient
from users.models import User

from . import actions
from .models import Treatment


class TreatmentActionsTest(TestCase):
    """Test treatment catalog actions"""

    def test_create(self):
        result = actions.create_treatment({'name': 'Manual Therapy', 'price': '45.50'})
        self.assertTrue(result.success)
        self.assertEqual(result.data.price, Decimal('45.50'))

    def test_free_treatment_is_allowed(self):
        result = actions.create_treatment({'name': 'Assessment', 'price': '0'})
        self.assertTrue(result.success)

    def test_negative_price_rejected(self):
        result = actions.create_treatment({'name': 'Manual Therapy', 'price': '-1'})
        self.assertEqual(result.code, VALIDATION)
        self.assertIn('price', result.field_errors)

    def test_short_name_rejected(self):
        result = actions.create_treatment({'name': 'X', 'price': '10'})
        self.assertIn('name', result.field_errors)

    def test_update_price(self):
        treatment = Treatment.objects.create(name='Ultrasound', price=Decimal('30.00'))
        result = actions.update_treatment(treatment.pk, {'price': '35.00'})
        self.assertTrue(result.success)
        treatment.refresh_from_db()
        self.assertEqual(treatment.price, Decimal('35.00'))
        self.assertEqual(treatment.name, 'Ultrasound')

    def test_get_missing(self):
        self.assertEqual(actions.get_treatment_by_id(9999).code, NOT_FOUND)

    def test_delete_unused(self):
        treatment = Treatment.objects.create(name='Ultrasound', price=Decimal('30.00'))
        self.assertTrue(actions.delete_treatment(treatment.pk).success)
        self.assertFalse(Treatment.objects.exists())

    def test_delete_used_treatment_is_a_conflict(self):
        treatment = Treatment.objects.create(name='Ultrasound', price=Decimal('30.00'))
        patient = Patient.objects.create(
            record_number='PT-2024-00001', name='Maria Santos', date_of_birth=date(1985, 6, 15)
        )
        appointment = Appointment.objects.create(patient=patient)
        AppointmentTreatment.objects.create(appointment=appointment, treatment=treatment, price_at_time=treatment.price)

        result = actions.delete_treatment(treatment.pk)

        self.assertEqual(result.code, CONFLICT)
        self.assertTrue(Treatment.objects.filter(pk=treatment.pk).exists())


class TreatmentViewTest(TestCase):

    def setUp(self):
        self.client.force_login(User.objects.create_superuser(username='admin', password='pass12345'))

    def test_create_and_list(self):
        response = self.client.post(reverse('treatments:treatment_create'), {'name': 'Dry Needling', 'price': '60'})
        self.assertEqual(response.status_code, 201)

        response = self.client.get(reverse('treatments:treatment_list'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data'][0]['price'], '60.00')

    def test_update_invalid(self):
        treatment = Treatment.objects.create(name='Ultrasound', price=Decimal('30.00'))
        response = self.client.post(reverse('treatments:treatment_update', args=[treatment.pk]), {'price': 'abc'})
        self.assertEqual(response.status_code, 400)
