# patients/models.py
from django.db import models

from core.utils import calculate_age


class Patient(models.Model):
    record_number = models.CharField(
        max_length=20,
        unique=True,
        editable=False,
        help_text="Sequential record number, PT-YYYY-NNNNN"
    )
    name = models.CharField(max_length=256, db_index=True)
    date_of_birth = models.DateField()
    address = models.TextField(blank=True)
    initial_diagnosis = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.record_number})"

    @property
    def age(self):
        """Calculate patient's age"""
        return calculate_age(self.date_of_birth)

    def as_dict(self):
        return {
            'id': self.pk,
            'record_number': self.record_number,
            'name': self.name,
            'date_of_birth': self.date_of_birth.isoformat() if self.date_of_birth else None,
            'age': self.age,
            'address': self.address,
            'initial_diagnosis': self.initial_diagnosis,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
