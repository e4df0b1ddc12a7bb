# users/models.py
from django.contrib.auth.models import AbstractUser
from django.db import models

# Modules a role can be granted access to
MODULES = ['dashboard', 'patients', 'treatments', 'appointments', 'billing', 'reports', 'maintenance']

DEFAULT_ROLE_PERMISSIONS = {
    'admin': {module: True for module in MODULES},
    'physiotherapist': {
        'dashboard': True,
        'patients': True,
        'treatments': True,
        'appointments': True,
        'billing': True,
        'reports': False,
        'maintenance': False,
    },
    'staff': {
        'dashboard': True,
        'patients': True,
        'treatments': False,
        'appointments': True,
        'billing': False,
        'reports': False,
        'maintenance': False,
    },
}


class Role(models.Model):
    ADMIN = 'admin'
    PHYSIOTHERAPIST = 'physiotherapist'
    STAFF = 'staff'

    ROLE_CHOICES = [
        (ADMIN, 'Admin'),
        (PHYSIOTHERAPIST, 'Physiotherapist'),
        (STAFF, 'Staff'),
    ]

    name = models.CharField(max_length=50, unique=True)
    display_name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    permissions = models.JSONField(default=dict, help_text="Module permissions")
    is_default = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.display_name

    def save(self, *args, **kwargs):
        # Set default permissions for default roles only if permissions are empty
        if self.is_default and not self.permissions:
            self.permissions = dict(DEFAULT_ROLE_PERMISSIONS.get(self.name, {}))
        super().save(*args, **kwargs)


class User(AbstractUser):

    role = models.ForeignKey(Role, on_delete=models.PROTECT, null=True, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.get_full_name()} ({self.username})"

    def has_permission(self, module_name):
        """Check if user has permission for a specific module"""
        if self.is_superuser:
            return True
        if not self.role:
            return False
        return self.role.permissions.get(module_name, False)

    @property
    def full_name(self):
        return self.get_full_name() or self.username
