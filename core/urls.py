# core/urls.py
from django.urls import path
from . import views

app_name = 'core'

urlpatterns = [
    path('wipe/', views.wipe_data, name='wipe_data'),
]
