from django.core.management.base import BaseCommand
from core.models import SystemSetting


class Command(BaseCommand):
    help = 'Initialize default system settings'

    def handle(self, *args, **options):
        settings_data = {
            'clinic_name': ('Physiotherapy Clinic', 'Name printed on invoices'),
            'clinic_address': ('', 'Postal address printed on invoices'),
            'clinic_phone': ('', 'Contact phone number'),
            'clinic_email': ('', 'Contact email address'),
            'currency_symbol': ('$', 'Symbol shown before money amounts'),
        }

        created_count = 0
        skipped_count = 0

        for key, (value, description) in settings_data.items():
            setting, created = SystemSetting.objects.get_or_create(
                key=key,
                defaults={
                    'value': value,
                    'is_active': True,
                    'description': description
                }
            )

            if created:
                created_count += 1
                self.stdout.write(self.style.SUCCESS(f'Created setting: {key}'))
            else:
                skipped_count += 1
                if options.get('verbosity', 1) >= 2:
                    self.stdout.write(self.style.WARNING(f'Already exists: {key}'))

        if created_count > 0:
            self.stdout.write(self.style.SUCCESS(
                f'\nSettings initialization complete: {created_count} created, {skipped_count} already existed'
            ))
        else:
            self.stdout.write(self.style.SUCCESS(
                f'All settings already initialized ({skipped_count} settings)'
            ))
