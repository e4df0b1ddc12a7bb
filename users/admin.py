# users/admin.py
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import Role, User


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ['name', 'display_name', 'is_default', 'updated_at']
    search_fields = ['name', 'display_name']


@admin.register(User)
class ClinicUserAdmin(UserAdmin):
    list_display = ['username', 'first_name', 'last_name', 'email', 'role', 'is_active']
    list_filter = ['role', 'is_active', 'is_superuser']
    fieldsets = UserAdmin.fieldsets + (
        ('Clinic', {'fields': ('role', 'phone')}),
    )
