from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.db import DatabaseError, connection

from users.providers import get_identity_providers


class Command(BaseCommand):
    help = 'Check configuration and database connectivity before deploying'

    def handle(self, *args, **options):
        problems = []

        if settings.SECRET_KEY.startswith('django-insecure') and not settings.DEBUG:
            problems.append('DJANGO_SECRET_KEY is not set')
        if len(settings.SECRET_KEY) < 32:
            problems.append('DJANGO_SECRET_KEY must be at least 32 characters')

        try:
            with connection.cursor() as cursor:
                cursor.execute('SELECT 1')
            self.stdout.write(self.style.SUCCESS(f"Database reachable ({settings.DATABASES['default']['ENGINE']})"))
        except DatabaseError as e:
            problems.append(f'Database unreachable: {e}')

        for provider in get_identity_providers():
            status = 'enabled' if provider.enabled else 'disabled'
            self.stdout.write(f'Identity provider {provider.name}: {status}')

        if problems:
            for problem in problems:
                self.stderr.write(self.style.ERROR(problem))
            raise CommandError(f'{len(problems)} configuration problem(s) found')

        self.stdout.write(self.style.SUCCESS('Environment looks good.'))
