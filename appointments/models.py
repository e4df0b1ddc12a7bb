# appointments/models.py
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone


class Appointment(models.Model):
    """
    A physiotherapy session with the vital signs taken and the treatments given
    """
    SCHEDULED = 'scheduled'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    STATUS_CHOICES = [
        (SCHEDULED, 'Scheduled'),
        (COMPLETED, 'Completed'),
        (CANCELLED, 'Cancelled'),
    ]

    patient = models.ForeignKey(
        'patients.Patient',
        on_delete=models.PROTECT,
        related_name='appointments'
    )
    appointment_date = models.DateTimeField(default=timezone.now, db_index=True)

    # Vital signs
    blood_pressure = models.CharField(max_length=10, blank=True, help_text="Systolic/diastolic, e.g. 120/80")
    respiration_rate = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
        help_text="Breaths per minute"
    )
    heart_rate = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(40), MaxValueValidator(220)],
        help_text="Beats per minute"
    )
    borg_scale = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(6), MaxValueValidator(20)],
        help_text="Perceived exertion, 6 to 20"
    )

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=COMPLETED)
    treatments = models.ManyToManyField(
        'treatments.Treatment',
        through='AppointmentTreatment',
        related_name='appointments'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-appointment_date']

    def __str__(self):
        return f"{self.patient.name} - {timezone.localtime(self.appointment_date):%Y-%m-%d %H:%M}"

    def as_dict(self, include_treatments=False):
        data = {
            'id': self.pk,
            'patient_id': self.patient_id,
            'appointment_date': self.appointment_date.isoformat() if self.appointment_date else None,
            'blood_pressure': self.blood_pressure,
            'respiration_rate': self.respiration_rate,
            'heart_rate': self.heart_rate,
            'borg_scale': self.borg_scale,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'patient': {
                'id': self.patient.pk,
                'name': self.patient.name,
                'record_number': self.patient.record_number,
            },
        }
        if include_treatments:
            data['treatments'] = [line.as_dict() for line in self.treatment_lines.all()]
        return data


class AppointmentTreatment(models.Model):
    """
    Treatment given during an appointment, with the price charged at the time.

    price_at_time is copied from the catalog when the line is created and never
    changes afterwards, so later price edits leave past appointments and their
    invoices untouched.
    """
    appointment = models.ForeignKey(Appointment, on_delete=models.CASCADE, related_name='treatment_lines')
    treatment = models.ForeignKey('treatments.Treatment', on_delete=models.PROTECT, related_name='appointment_lines')
    price_at_time = models.DecimalField(max_digits=10, decimal_places=2)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ['id']
        constraints = [
            models.UniqueConstraint(fields=['appointment', 'treatment'], name='unique_appointment_treatment'),
        ]

    def __str__(self):
        return f"{self.treatment.name} - {self.price_at_time}"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            stored_price = (
                AppointmentTreatment.objects
                .filter(pk=self.pk)
                .values_list('price_at_time', flat=True)
                .first()
            )
            if stored_price is not None and stored_price != self.price_at_time:
                raise ValidationError('The price charged for a treatment cannot be changed.')
        super().save(*args, **kwargs)

    def as_dict(self):
        return {
            'treatment_id': self.treatment_id,
            'name': self.treatment.name,
            'price_at_time': str(self.price_at_time),
            'notes': self.notes,
        }
