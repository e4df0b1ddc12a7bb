from django.urls import path
from . import views

app_name = 'billing'

urlpatterns = [
    path('', views.invoice_list, name='invoice_list'),
    path('generate/', views.invoice_generate, name='invoice_generate'),
    path('export/', views.export_invoices_csv, name='invoice_export'),
    path('<int:pk>/', views.invoice_detail, name='invoice_detail'),
    path('<int:pk>/pdf/', views.invoice_pdf, name='invoice_pdf'),
    path('<int:pk>/status/', views.invoice_status, name='invoice_status'),
    path('<int:pk>/delete/', views.invoice_delete, name='invoice_delete'),
    path('appointment/<int:appointment_id>/', views.appointment_invoice, name='appointment_invoice'),
]
