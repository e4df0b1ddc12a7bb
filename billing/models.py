# billing/models.py
from django.db import models
from django.utils import timezone


class Invoice(models.Model):
    """
    Bill for one appointment. total_amount is fixed when the invoice is
    generated from the appointment's price snapshots.
    """
    UNPAID = 'unpaid'
    PAID = 'paid'
    VOID = 'void'

    STATUS_CHOICES = [
        (UNPAID, 'Unpaid'),
        (PAID, 'Paid'),
        (VOID, 'Void'),
    ]

    invoice_number = models.CharField(
        max_length=20,
        unique=True,
        editable=False,
        help_text="Sequential invoice number, INV-YYYY-NNNNN"
    )
    appointment = models.OneToOneField(
        'appointments.Appointment',
        on_delete=models.PROTECT,
        related_name='invoice'
    )
    total_amount = models.DecimalField(max_digits=10, decimal_places=2)
    issue_date = models.DateTimeField(default=timezone.now, db_index=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=UNPAID, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.invoice_number

    @property
    def patient(self):
        return self.appointment.patient

    def as_dict(self, include_treatments=False):
        data = {
            'id': self.pk,
            'invoice_number': self.invoice_number,
            'appointment_id': self.appointment_id,
            'total_amount': str(self.total_amount),
            'issue_date': self.issue_date.isoformat() if self.issue_date else None,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'appointment_date': self.appointment.appointment_date.isoformat(),
            'patient': {
                'id': self.patient.pk,
                'name': self.patient.name,
                'record_number': self.patient.record_number,
            },
        }
        if include_treatments:
            data['treatments'] = [line.as_dict() for line in self.appointment.treatment_lines.all()]
        return data
