# core/admin.py
from django.contrib import admin

from .models import SequenceCounter, SystemSetting


@admin.register(SystemSetting)
class SystemSettingAdmin(admin.ModelAdmin):
    list_display = ['key', 'value', 'is_active', 'updated_at']
    list_filter = ['is_active']
    search_fields = ['key', 'description']


@admin.register(SequenceCounter)
class SequenceCounterAdmin(admin.ModelAdmin):
    list_display = ['prefix', 'year', 'last_value', 'updated_at']
    list_filter = ['prefix', 'year']
    readonly_fields = ['updated_at']
