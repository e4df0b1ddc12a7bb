from django.core.management.base import BaseCommand

from users.models import DEFAULT_ROLE_PERMISSIONS, Role


class Command(BaseCommand):
    help = 'Create the default admin, physiotherapist and staff roles'

    def handle(self, *args, **options):
        labels = dict(Role.ROLE_CHOICES)
        for name in DEFAULT_ROLE_PERMISSIONS:
            role, created = Role.objects.get_or_create(
                name=name,
                defaults={
                    'display_name': labels.get(name, name.title()),
                    'is_default': True,
                }
            )
            if created:
                self.stdout.write(self.style.SUCCESS(f'Created role: {role.display_name}'))
            else:
                self.stdout.write(f'Role already exists: {role.display_name}')
