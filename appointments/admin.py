from django.contrib import admin

from .models import Appointment, AppointmentTreatment


class AppointmentTreatmentInline(admin.TabularInline):
    model = AppointmentTreatment
    extra = 0
    readonly_fields = ['treatment', 'price_at_time']

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ['patient', 'appointment_date', 'status', 'heart_rate', 'borg_scale']
    list_filter = ['status', 'appointment_date']
    search_fields = ['patient__name', 'patient__record_number']
    inlines = [AppointmentTreatmentInline]
