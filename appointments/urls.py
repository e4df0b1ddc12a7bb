from django.urls import path
from . import views

app_name = 'appointments'

urlpatterns = [
    path('', views.appointment_list, name='appointment_list'),
    path('create/', views.appointment_create, name='appointment_create'),
    path('<int:pk>/', views.appointment_detail, name='appointment_detail'),
    path('<int:pk>/status/', views.appointment_status, name='appointment_status'),
    path('<int:pk>/treatments/<int:treatment_id>/notes/', views.treatment_notes, name='treatment_notes'),
    path('<int:pk>/delete/', views.appointment_delete, name='appointment_delete'),
    path('patient/<int:patient_id>/', views.patient_appointments, name='patient_appointments'),
]
