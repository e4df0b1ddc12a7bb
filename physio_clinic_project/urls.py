# physio_clinic_project/urls.py
from django.contrib import admin
from django.urls import path, include

from core.health_check import health_check

urlpatterns = [
    path('admin/', admin.site.urls),
    path('health/', health_check, name='health_check'),
    path('maintenance/', include('core.urls', namespace='core')),
    path('users/', include('users.urls', namespace='users')),
    path('patients/', include('patients.urls', namespace='patients')),
    path('treatments/', include('treatments.urls', namespace='treatments')),
    path('appointments/', include('appointments.urls', namespace='appointments')),
    path('invoices/', include('billing.urls', namespace='billing')),
    path('reports/', include('reports.urls', namespace='reports')),
]
