from django.core.management.base import BaseCommand, CommandError

from core.actions import wipe_all_data


class Command(BaseCommand):
    help = 'Delete all patients, treatments, appointments and invoices (test/reset use only)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--noinput', '--no-input',
            action='store_false',
            dest='interactive',
            help='Do not prompt for confirmation',
        )

    def handle(self, *args, **options):
        if options['interactive']:
            answer = input('This permanently deletes ALL clinic data. Type "yes" to continue: ')
            if answer.strip().lower() != 'yes':
                self.stdout.write(self.style.WARNING('Wipe cancelled.'))
                return

        result = wipe_all_data()
        if not result.success:
            raise CommandError(result.error)

        for table, count in result.data.items():
            self.stdout.write(f'  {table}: {count} deleted')
        self.stdout.write(self.style.SUCCESS('All clinic data wiped.'))
