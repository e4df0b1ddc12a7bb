# core/models.py
from django.db import models


class SystemSetting(models.Model):
    """Simplified system settings - just key-value pairs"""
    key = models.CharField(max_length=100, unique=True)
    value = models.TextField()
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'System Setting'
        verbose_name_plural = 'System Settings'
        ordering = ['key']

    def __str__(self):
        return f"{self.key}: {self.value}"

    @classmethod
    def get_setting(cls, key, default=None):
        """Get a setting value by key"""
        try:
            setting = cls.objects.get(key=key, is_active=True)
            return setting.value
        except cls.DoesNotExist:
            return default


class SequenceCounter(models.Model):
    """
    Last issued sequence value per identifier prefix and calendar year.

    Rows are locked with select_for_update() while a new identifier is being
    issued, so two concurrent requests can never hand out the same number.
    """
    prefix = models.CharField(max_length=10)
    year = models.PositiveIntegerField()
    last_value = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['prefix', '-year']
        verbose_name = 'Sequence Counter'
        verbose_name_plural = 'Sequence Counters'
        constraints = [
            models.UniqueConstraint(fields=['prefix', 'year'], name='unique_sequence_prefix_year'),
        ]

    def __str__(self):
        return f"{self.prefix}-{self.year}: {self.last_value}"
