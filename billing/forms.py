# billing/forms.py
from django import forms

from .models import Invoice


class InvoiceStatusForm(forms.Form):
    status = forms.ChoiceField(
        choices=Invoice.STATUS_CHOICES,
        error_messages={'invalid_choice': 'Invalid invoice status.'}
    )
