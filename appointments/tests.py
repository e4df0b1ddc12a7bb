# appointments/tests.py
"""
Unit tests for appointments, price snapshots and the appointment delete guard
"""
from datetime import date, datetime
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from billing.models import Invoice
from core.results import CONFLICT, NOT_FOUND, VALIDATION
from patients.models import Patient
from treatments.models import Treatment
from users.models import User

from . import actions
from .models import Appointment, AppointmentTreatment


class AppointmentTestMixin:

    def setUp(self):
        self.patient = Patient.objects.create(
            record_number='PT-2024-00001', name='Maria Santos', date_of_birth=date(1985, 6, 15)
        )
        self.massage = Treatment.objects.create(name='Massage', price=Decimal('40.00'))
        self.exercise = Treatment.objects.create(name='Exercise Therapy', price=Decimal('25.50'))

    def appointment_data(self, **overrides):
        data = {
            'patient': self.patient.pk,
            'treatment_ids': [self.massage.pk, self.exercise.pk],
            'blood_pressure': '120/80',
            'heart_rate': 72,
            'respiration_rate': 16,
            'borg_scale': 12,
        }
        data.update(overrides)
        return data


class CreateAppointmentTest(AppointmentTestMixin, TestCase):
    """Test create_appointment"""

    def test_snapshots_current_prices(self):
        result = actions.create_appointment(self.appointment_data())

        self.assertTrue(result.success)
        prices = dict(result.data.treatment_lines.values_list('treatment_id', 'price_at_time'))
        self.assertEqual(prices, {self.massage.pk: Decimal('40.00'), self.exercise.pk: Decimal('25.50')})

    def test_status_defaults_to_completed(self):
        result = actions.create_appointment(self.appointment_data())
        self.assertEqual(result.data.status, Appointment.COMPLETED)

    def test_explicit_status_and_date(self):
        when = timezone.make_aware(datetime(2024, 3, 5, 10, 0))
        result = actions.create_appointment(self.appointment_data(status='scheduled', appointment_date=when))
        self.assertEqual(result.data.status, Appointment.SCHEDULED)
        self.assertEqual(result.data.appointment_date, when)

    def test_requires_a_treatment(self):
        result = actions.create_appointment(self.appointment_data(treatment_ids=[]))
        self.assertEqual(result.code, VALIDATION)
        self.assertEqual(result.field_errors['treatment_ids'], ['Please select at least one treatment.'])
        self.assertFalse(Appointment.objects.exists())

    def test_requires_existing_patient(self):
        result = actions.create_appointment(self.appointment_data(patient=9999))
        self.assertEqual(result.field_errors['patient'], ['Patient not found.'])

    def test_heart_rate_range(self):
        for heart_rate in (39, 221):
            result = actions.create_appointment(self.appointment_data(heart_rate=heart_rate))
            self.assertEqual(result.field_errors['heart_rate'], ['Heart rate must be between 40 and 220.'])

        self.assertTrue(actions.create_appointment(self.appointment_data(heart_rate=40)).success)

    def test_borg_scale_range(self):
        for borg_scale in (5, 21):
            result = actions.create_appointment(self.appointment_data(borg_scale=borg_scale))
            self.assertEqual(result.field_errors['borg_scale'], ['Borg scale must be between 6 and 20.'])

    def test_respiration_rate_must_be_positive(self):
        result = actions.create_appointment(self.appointment_data(respiration_rate=0))
        self.assertIn('respiration_rate', result.field_errors)

    def test_blood_pressure_format(self):
        result = actions.create_appointment(self.appointment_data(blood_pressure='high'))
        self.assertIn('blood_pressure', result.field_errors)

    def test_vital_signs_are_optional(self):
        data = {'patient': self.patient.pk, 'treatment_ids': [self.massage.pk]}
        result = actions.create_appointment(data)
        self.assertTrue(result.success)
        self.assertIsNone(result.data.heart_rate)


class PriceSnapshotTest(AppointmentTestMixin, TestCase):
    """Test that recorded prices do not follow the catalog"""

    def test_catalog_change_leaves_snapshot(self):
        appointment = actions.create_appointment(self.appointment_data()).data
        self.massage.price = Decimal('99.00')
        self.massage.save()

        line = appointment.treatment_lines.get(treatment=self.massage)
        self.assertEqual(line.price_at_time, Decimal('40.00'))

    def test_snapshot_cannot_be_changed(self):
        appointment = actions.create_appointment(self.appointment_data()).data
        line = appointment.treatment_lines.get(treatment=self.massage)
        line.price_at_time = Decimal('10.00')
        with self.assertRaises(ValidationError):
            line.save()


class AppointmentQueryTest(AppointmentTestMixin, TestCase):
    """Test appointment reads"""

    def setUp(self):
        super().setUp()
        self.march = Appointment.objects.create(
            patient=self.patient, appointment_date=timezone.make_aware(datetime(2024, 3, 5, 9, 0))
        )
        self.april = Appointment.objects.create(
            patient=self.patient, appointment_date=timezone.make_aware(datetime(2024, 4, 1, 9, 0))
        )

    def test_list_newest_first(self):
        self.assertEqual(actions.get_appointments().data, [self.april, self.march])

    def test_list_with_inclusive_range(self):
        result = actions.get_appointments('2024-03-01', '2024-03-31')
        self.assertEqual(result.data, [self.march])

        result = actions.get_appointments(start_date='2024-04-01')
        self.assertEqual(result.data, [self.april])

        result = actions.get_appointments(end_date='2024-03-05')
        self.assertEqual(result.data, [self.march])

    def test_list_with_invalid_bound(self):
        self.assertEqual(actions.get_appointments('not-a-date').code, VALIDATION)

    def test_by_patient(self):
        other = Patient.objects.create(record_number='PT-2024-00002', name='Juan Reyes', date_of_birth=date(1990, 1, 1))
        Appointment.objects.create(patient=other)
        result = actions.get_appointments_by_patient_id(self.patient.pk)
        self.assertEqual(result.data, [self.april, self.march])

    def test_by_missing_patient(self):
        self.assertEqual(actions.get_appointments_by_patient_id(9999).code, NOT_FOUND)

    def test_detail_includes_treatment_lines(self):
        AppointmentTreatment.objects.create(appointment=self.march, treatment=self.massage, price_at_time=Decimal('40.00'))
        result = actions.get_appointment_by_id(self.march.pk)
        data = result.data.as_dict(include_treatments=True)
        self.assertEqual(data['treatments'][0]['name'], 'Massage')
        self.assertEqual(data['treatments'][0]['price_at_time'], '40.00')


class AppointmentUpdateTest(AppointmentTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.appointment = actions.create_appointment(self.appointment_data()).data

    def test_update_status(self):
        result = actions.update_appointment_status(self.appointment.pk, 'cancelled')
        self.assertTrue(result.success)
        self.appointment.refresh_from_db()
        self.assertEqual(self.appointment.status, Appointment.CANCELLED)

    def test_update_status_rejects_unknown_value(self):
        result = actions.update_appointment_status(self.appointment.pk, 'archived')
        self.assertEqual(result.code, VALIDATION)

    def test_update_treatment_notes(self):
        result = actions.update_treatment_notes(self.appointment.pk, self.massage.pk, 'Lower back, 20 minutes')
        self.assertTrue(result.success)
        line = AppointmentTreatment.objects.get(appointment=self.appointment, treatment=self.massage)
        self.assertEqual(line.notes, 'Lower back, 20 minutes')
        self.assertEqual(line.price_at_time, Decimal('40.00'))

    def test_notes_for_treatment_not_given(self):
        other = Treatment.objects.create(name='Ultrasound', price=Decimal('30.00'))
        result = actions.update_treatment_notes(self.appointment.pk, other.pk, 'n/a')
        self.assertEqual(result.code, NOT_FOUND)


class DeleteAppointmentTest(AppointmentTestMixin, TestCase):
    """Test the appointment delete guard"""

    def setUp(self):
        super().setUp()
        self.appointment = actions.create_appointment(self.appointment_data()).data

    def test_delete_removes_treatment_lines(self):
        result = actions.delete_appointment(self.appointment.pk)
        self.assertTrue(result.success)
        self.assertFalse(Appointment.objects.exists())
        self.assertFalse(AppointmentTreatment.objects.exists())

    def test_delete_blocked_by_invoice(self):
        Invoice.objects.create(
            invoice_number='INV-2024-00001', appointment=self.appointment, total_amount=Decimal('65.50')
        )
        result = actions.delete_appointment(self.appointment.pk)

        self.assertEqual(result.code, CONFLICT)
        self.assertEqual(
            result.error,
            'Cannot delete appointment with existing invoices. Please delete the invoice first.'
        )
        self.assertEqual(AppointmentTreatment.objects.count(), 2)


class AppointmentViewTest(AppointmentTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.client.force_login(User.objects.create_superuser(username='admin', password='pass12345'))

    def test_create(self):
        response = self.client.post(
            reverse('appointments:appointment_create'),
            self.appointment_data(),
            content_type='application/json'
        )
        self.assertEqual(response.status_code, 201)
        data = response.json()['data']
        self.assertEqual(len(data['treatments']), 2)
        self.assertEqual(data['patient']['record_number'], 'PT-2024-00001')

    def test_create_from_form_post(self):
        response = self.client.post(reverse('appointments:appointment_create'), self.appointment_data())
        self.assertEqual(response.status_code, 201)

    def test_create_invalid(self):
        response = self.client.post(
            reverse('appointments:appointment_create'),
            self.appointment_data(borg_scale=25),
            content_type='application/json'
        )
        self.assertEqual(response.status_code, 400)

    def test_list_with_range(self):
        response = self.client.get(reverse('appointments:appointment_list'), {'start': 'yesterday'})
        self.assertEqual(response.status_code, 400)

    def test_delete_conflict(self):
        appointment = actions.create_appointment(self.appointment_data()).data
        Invoice.objects.create(invoice_number='INV-2024-00001', appointment=appointment, total_amount=Decimal('1'))
        response = self.client.post(reverse('appointments:appointment_delete', args=[appointment.pk]))
        self.assertEqual(response.status_code, 409)
