from django.contrib import admin

from .models import Invoice


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ['invoice_number', 'appointment', 'total_amount', 'status', 'issue_date']
    list_filter = ['status', 'issue_date']
    search_fields = ['invoice_number', 'appointment__patient__name', 'appointment__patient__record_number']
    readonly_fields = ['invoice_number', 'total_amount', 'created_at']
