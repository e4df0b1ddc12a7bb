# appointments/forms.py
import re

from django import forms
from django.core.exceptions import ValidationError
from django.utils import timezone

from patients.models import Patient
from treatments.models import Treatment

from .models import Appointment

BLOOD_PRESSURE_PATTERN = re.compile(r'^\d{2,3}/\d{2,3}$')


class AppointmentForm(forms.ModelForm):
    """Form for recording an appointment and the treatments given"""

    patient = forms.ModelChoiceField(
        queryset=Patient.objects.all(),
        error_messages={
            'required': 'Please select a patient.',
            'invalid_choice': 'Patient not found.',
        }
    )
    treatment_ids = forms.ModelMultipleChoiceField(
        queryset=Treatment.objects.all(),
        error_messages={
            'required': 'Please select at least one treatment.',
            'invalid_choice': 'Treatment %(value)s not found.',
        }
    )

    class Meta:
        model = Appointment
        fields = [
            'patient', 'appointment_date', 'blood_pressure', 'respiration_rate',
            'heart_rate', 'borg_scale', 'status'
        ]
        error_messages = {
            'heart_rate': {
                'min_value': 'Heart rate must be between 40 and 220.',
                'max_value': 'Heart rate must be between 40 and 220.',
            },
            'borg_scale': {
                'min_value': 'Borg scale must be between 6 and 20.',
                'max_value': 'Borg scale must be between 6 and 20.',
            },
            'respiration_rate': {
                'min_value': 'Respiration rate must be a positive number.',
            },
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['appointment_date'].required = False
        self.fields['status'].required = False

    def clean_appointment_date(self):
        return self.cleaned_data.get('appointment_date') or timezone.now()

    def clean_blood_pressure(self):
        blood_pressure = (self.cleaned_data.get('blood_pressure') or '').replace(' ', '')
        if blood_pressure and not BLOOD_PRESSURE_PATTERN.match(blood_pressure):
            raise ValidationError('Blood pressure must look like 120/80.')
        return blood_pressure

    def clean_status(self):
        return self.cleaned_data.get('status') or Appointment.COMPLETED


class AppointmentStatusForm(forms.Form):
    status = forms.ChoiceField(
        choices=Appointment.STATUS_CHOICES,
        error_messages={'invalid_choice': 'Invalid appointment status.'}
    )


class TreatmentNotesForm(forms.Form):
    notes = forms.CharField(required=False, strip=True)
