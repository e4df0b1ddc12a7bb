# treatments/models.py
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models


class Treatment(models.Model):
    name = models.CharField(max_length=256)
    description = models.TextField(blank=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))],
        help_text="Current list price; appointments keep the price charged at the time"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.name

    def as_dict(self):
        return {
            'id': self.pk,
            'name': self.name,
            'description': self.description,
            'price': str(self.price),
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
