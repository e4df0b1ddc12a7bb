from django.urls import path
from . import views

app_name = 'treatments'

urlpatterns = [
    path('', views.treatment_list, name='treatment_list'),
    path('create/', views.treatment_create, name='treatment_create'),
    path('<int:pk>/', views.treatment_detail, name='treatment_detail'),
    path('<int:pk>/edit/', views.treatment_update, name='treatment_update'),
    path('<int:pk>/delete/', views.treatment_delete, name='treatment_delete'),
]
