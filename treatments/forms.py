# treatments/forms.py
from decimal import Decimal

from django import forms

from .models import Treatment


class TreatmentForm(forms.ModelForm):
    """Form for creating and updating catalog treatments"""

    class Meta:
        model = Treatment
        fields = ['name', 'description', 'price']

    def clean_name(self):
        name = ' '.join((self.cleaned_data.get('name') or '').split())
        if len(name) < 2:
            raise forms.ValidationError('Treatment name must be at least 2 characters long.')
        return name

    def clean_price(self):
        price = self.cleaned_data.get('price')

        if price is None:
            raise forms.ValidationError('Price is required.')

        if price < Decimal('0'):
            raise forms.ValidationError('Price cannot be negative.')

        return price
