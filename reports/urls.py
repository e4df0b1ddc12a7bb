# reports/urls.py
from django.urls import path
from . import views

app_name = 'reports'

urlpatterns = [
    path('', views.dashboard, name='dashboard'),
    path('appointments-by-month/', views.appointments_by_month, name='appointments_by_month'),
    path('revenue-by-month/', views.revenue_by_month, name='revenue_by_month'),
]
