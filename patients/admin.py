from django.contrib import admin

from .models import Patient


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ['record_number', 'name', 'date_of_birth', 'created_at']
    search_fields = ['name', 'record_number']
    readonly_fields = ['record_number', 'created_at']
