# patients/forms.py
import re
from datetime import date

from django import forms
from django.core.exceptions import ValidationError

from core.utils import calculate_age, get_local_today

from .models import Patient

MAX_AGE = 150


def clean_name(name, field_name="name"):
    """
    Utility function to clean and validate names.

    Args:
        name: The name string to clean
        field_name: Name of the field for error messages

    Returns:
        Cleaned name string

    Raises:
        ValidationError: If name format is invalid
    """
    if not name:
        raise ValidationError(f'Please enter a {field_name}.')

    # Strip whitespace and remove extra spaces
    name = ' '.join(name.split())

    if len(name) < 2:
        raise ValidationError(f'{field_name.capitalize()} must be at least 2 characters long.')

    if len(name) > 256:
        raise ValidationError(f'{field_name.capitalize()} must not exceed 256 characters.')

    # Letters (including accented), spaces, hyphens, apostrophes and periods
    pattern = r"^[a-zA-ZÀ-ÿ\s'\-\.]+$"
    if not re.match(pattern, name):
        raise ValidationError(
            f'{field_name.capitalize()} can only contain letters, spaces, hyphens, apostrophes, and periods.'
        )

    if not any(c.isalpha() for c in name):
        raise ValidationError(f'{field_name.capitalize()} must contain at least one letter.')

    return name


def date_of_birth_from_age(age, today=None):
    """An age in years becomes January 1st of the birth year"""
    today = today or get_local_today()
    return date(today.year - age, 1, 1)


class PatientForm(forms.ModelForm):
    """
    Validate patient input.

    Either date_of_birth or age must be supplied. When age is given it takes
    precedence and is converted to January 1st of (current year - age).
    """

    age = forms.IntegerField(
        required=False,
        min_value=0,
        max_value=MAX_AGE,
        error_messages={
            'min_value': 'Age cannot be negative.',
            'max_value': f'Age cannot exceed {MAX_AGE}.',
        }
    )

    class Meta:
        model = Patient
        fields = ['name', 'date_of_birth', 'address', 'initial_diagnosis']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['date_of_birth'].required = False

    def clean_name(self):
        return clean_name(self.cleaned_data.get('name'))

    def clean_date_of_birth(self):
        """Validate date of birth"""
        dob = self.cleaned_data.get('date_of_birth')
        if dob:
            today = get_local_today()
            if dob > today:
                raise ValidationError('Date of birth cannot be in the future.')

            if calculate_age(dob, today) > MAX_AGE:
                raise ValidationError('Please enter a valid date of birth.')

        return dob

    def clean(self):
        cleaned_data = super().clean()
        age = cleaned_data.get('age')

        if age is not None:
            cleaned_data['date_of_birth'] = date_of_birth_from_age(age)
        elif not cleaned_data.get('date_of_birth') and 'date_of_birth' not in self.errors and 'age' not in self.errors:
            self.add_error('date_of_birth', 'Please enter a date of birth or an age.')

        return cleaned_data
