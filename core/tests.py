# core/tests.py
"""
Unit tests for identifiers, throttling, cache invalidation and maintenance
"""
from datetime import date, datetime, time
from decimal import Decimal
from io import StringIO

from django.core.cache import cache
from django.core.management import CommandError, call_command
from django.db import DatabaseError
from django.http import HttpResponse
from django.test import Client, RequestFactory, TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from appointments.models import Appointment, AppointmentTreatment
from billing.models import Invoice
from patients.models import Patient
from treatments.forms import TreatmentForm
from treatments.models import Treatment
from users.models import Role, User

from .actions import wipe_all_data
from .middleware import RateLimitMiddleware
from .models import SequenceCounter, SystemSetting
from .numbering import next_invoice_number, next_record_number, reset_sequences
from .ratelimit import CacheRateLimitBackend, InMemoryRateLimitBackend, RateLimiter, build_rate_limiter
from .results import CONFLICT, STORAGE, Failure, IdentifierError, Success, storage_guard, validation_failure
from .signals import DASHBOARD_PATH, page_cache_key, revalidate_path
from .utils import calculate_age, get_client_ip, months_before, parse_bound, quantize_money


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


def make_patient(record_number, name='Maria Santos'):
    return Patient.objects.create(record_number=record_number, name=name, date_of_birth=date(1985, 6, 15))


class SequenceNumberTest(TestCase):
    """Test sequential identifier generation"""

    def test_first_number_of_the_year(self):
        self.assertEqual(next_record_number(2024), 'PT-2024-00001')

    def test_numbers_increment(self):
        next_invoice_number(2024)
        self.assertEqual(next_invoice_number(2024), 'INV-2024-00002')

    def test_defaults_to_current_year(self):
        self.assertEqual(next_record_number(), f'PT-{timezone.localdate().year}-00001')

    def test_years_are_independent(self):
        next_record_number(2023)
        next_record_number(2023)
        self.assertEqual(next_record_number(2024), 'PT-2024-00001')
        self.assertEqual(next_record_number(2023), 'PT-2023-00003')

    def test_prefixes_are_independent(self):
        next_record_number(2024)
        self.assertEqual(next_invoice_number(2024), 'INV-2024-00001')

    def test_counter_is_seeded_from_existing_rows(self):
        make_patient('PT-2024-00007')
        make_patient('PT-2024-00003', name='Juan Reyes')
        make_patient('PT-2023-00042', name='Ana Cruz')

        self.assertEqual(next_record_number(2024), 'PT-2024-00008')

    def test_numbers_are_not_reused_after_delete(self):
        make_patient(next_record_number(2024))
        Patient.objects.all().delete()
        self.assertEqual(next_record_number(2024), 'PT-2024-00002')

    def test_unparseable_identifier(self):
        make_patient('PT-2024-ABCDE')
        with self.assertRaises(IdentifierError):
            next_record_number(2024)

    def test_reset(self):
        next_record_number(2024)
        next_invoice_number(2024)
        self.assertEqual(reset_sequences(), 2)
        self.assertEqual(next_record_number(2024), 'PT-2024-00001')


class ResultTest(TestCase):
    """Test result helpers"""

    def test_success_dict(self):
        self.assertEqual(Success({'id': 1}).to_dict(), {'success': True, 'data': {'id': 1}})
        self.assertEqual(Success().to_dict(), {'success': True})

    def test_failure_status_codes(self):
        self.assertEqual(Failure('Nope', CONFLICT).status_code, 409)
        self.assertEqual(Failure('Broken').status_code, 500)

    def test_storage_guard_hides_database_errors(self):
        @storage_guard('Failed to do the thing')
        def broken():
            raise DatabaseError('connection reset')

        with self.assertLogs('core.results', level='ERROR'):
            result = broken()

        self.assertEqual(result.code, STORAGE)
        self.assertEqual(result.to_dict(), {'success': False, 'error': 'Failed to do the thing'})

    def test_validation_failure_uses_first_message(self):
        form = TreatmentForm({'name': 'X', 'price': '10'})
        form.is_valid()
        result = validation_failure(form)
        self.assertEqual(result.error, 'Treatment name must be at least 2 characters long.')
        self.assertIn('name', result.to_dict()['errors'])


class UtilsTest(TestCase):

    def test_months_before_clamps_day(self):
        self.assertEqual(months_before(datetime(2024, 3, 31), 1), datetime(2024, 2, 29))
        self.assertEqual(months_before(datetime(2024, 4, 15), 12), datetime(2023, 4, 15))
        self.assertEqual(months_before(datetime(2024, 1, 10), 1), datetime(2023, 12, 10))

    def test_calculate_age(self):
        dob = date(1990, 6, 15)
        self.assertEqual(calculate_age(dob, today=date(2024, 6, 14)), 33)
        self.assertEqual(calculate_age(dob, today=date(2024, 6, 15)), 34)

    def test_quantize_money_rounds_half_up(self):
        self.assertEqual(quantize_money(Decimal('10.005')), Decimal('10.01'))

    def test_parse_bound(self):
        self.assertIsNone(parse_bound(''))
        start = parse_bound('2024-03-01')
        end = parse_bound('2024-03-01', end_of_day=True)
        self.assertEqual((start.hour, start.minute), (0, 0))
        self.assertEqual((end.hour, end.minute, end.second), (23, 59, 59))
        self.assertTrue(timezone.is_aware(start))
        with self.assertRaises(ValueError):
            parse_bound('March 1st')

    def test_plain_end_date_covers_whole_day(self):
        end = parse_bound('2024-03-10', end_of_day=True)
        self.assertEqual(end.date(), date(2024, 3, 10))
        self.assertEqual(end.time(), time.max)
        self.assertLess(parse_bound('2024-03-10T12:00:00'), end)

    def test_datetime_bound_is_kept_as_given(self):
        bound = parse_bound('2024-03-10T12:30:00', end_of_day=True)
        self.assertEqual((bound.hour, bound.minute), (12, 30))

    def test_client_ip(self):
        factory = RequestFactory()
        request = factory.get('/', HTTP_X_FORWARDED_FOR='203.0.113.7, 10.0.0.1', REMOTE_ADDR='10.0.0.2')
        self.assertEqual(get_client_ip(request), '203.0.113.7')

        request = factory.get('/', HTTP_X_REAL_IP='198.51.100.4', REMOTE_ADDR='10.0.0.2')
        self.assertEqual(get_client_ip(request), '198.51.100.4')

        request = factory.get('/', REMOTE_ADDR='10.0.0.2')
        self.assertEqual(get_client_ip(request), '10.0.0.2')


class RateLimiterTest(TestCase):
    """Test fixed-window rate limiting"""

    def test_blocks_after_budget(self):
        limiter = RateLimiter(InMemoryRateLimitBackend(), window_seconds=60, max_requests=3)
        self.assertEqual([limiter.allow('1.2.3.4') for _ in range(4)], [True, True, True, False])
        self.assertTrue(limiter.allow('5.6.7.8'))

    def test_window_resets(self):
        clock = FakeClock()
        limiter = RateLimiter(InMemoryRateLimitBackend(clock=clock), window_seconds=60, max_requests=1)
        self.assertTrue(limiter.allow('1.2.3.4'))
        self.assertFalse(limiter.allow('1.2.3.4'))

        clock.now = 60
        self.assertTrue(limiter.allow('1.2.3.4'))

    def test_in_memory_backend_prunes(self):
        clock = FakeClock()
        backend = InMemoryRateLimitBackend(max_entries=2, clock=clock)
        backend.increment('a', 10)
        backend.increment('b', 20)
        clock.now = 15
        backend.increment('c', 10)

        self.assertEqual(len(backend), 2)
        self.assertEqual(backend.increment('b', 20), 2)

    def test_cache_backend(self):
        cache.clear()
        backend = CacheRateLimitBackend(key_prefix='test-ratelimit')
        self.assertEqual(backend.increment('1.2.3.4', 60), 1)
        self.assertEqual(backend.increment('1.2.3.4', 60), 2)

    def test_build_from_settings(self):
        self.assertIsNone(build_rate_limiter({'ENABLED': False}))

        limiter = build_rate_limiter({
            'ENABLED': True,
            'BACKEND': 'core.ratelimit.CacheRateLimitBackend',
            'BACKEND_OPTIONS': {'key_prefix': 'built'},
            'WINDOW_SECONDS': 30,
            'MAX_REQUESTS': 5,
        })
        self.assertIsInstance(limiter.backend, CacheRateLimitBackend)
        self.assertEqual((limiter.window_seconds, limiter.max_requests), (30, 5))

    def test_middleware_returns_429(self):
        limiter = RateLimiter(InMemoryRateLimitBackend(), window_seconds=60, max_requests=2)
        middleware = RateLimitMiddleware(lambda request: HttpResponse('ok'), limiter=limiter)
        factory = RequestFactory()

        responses = [middleware(factory.get('/', REMOTE_ADDR='10.0.0.1')) for _ in range(3)]

        self.assertEqual([r.status_code for r in responses], [200, 200, 429])
        self.assertIn('Content-Security-Policy', responses[0])
        self.assertEqual(responses[2].content, b'{"error": "Too many requests. Please try again later."}')

    @override_settings(RATE_LIMIT={'ENABLED': True, 'WINDOW_SECONDS': 60, 'MAX_REQUESTS': 1})
    def test_anonymous_requests_are_throttled_before_sessions(self):
        client = Client(REMOTE_ADDR='10.0.0.9')

        first = client.get(reverse('health_check'))
        second = client.get(reverse('health_check'))

        self.assertEqual(first.status_code, 200)
        self.assertEqual(second.status_code, 429)
        self.assertNotIn('sessionid', second.cookies)


class RevalidateTest(TestCase):

    def test_drops_cached_routes(self):
        cache.set(page_cache_key(DASHBOARD_PATH), {'cached': True})
        cache.set(page_cache_key('/dashboard/patients'), ['cached'])

        revalidate_path('/dashboard/patients/', DASHBOARD_PATH)

        self.assertIsNone(cache.get(page_cache_key(DASHBOARD_PATH)))
        self.assertIsNone(cache.get(page_cache_key('/dashboard/patients')))


class WipeAllDataTest(TestCase):
    """Test the wipe-all-data maintenance action"""

    def setUp(self):
        patient = make_patient(next_record_number(2024))
        treatment = Treatment.objects.create(name='Massage', price=Decimal('40.00'))
        appointment = Appointment.objects.create(patient=patient)
        AppointmentTreatment.objects.create(appointment=appointment, treatment=treatment, price_at_time=treatment.price)
        Invoice.objects.create(invoice_number=next_invoice_number(2024), appointment=appointment, total_amount=Decimal('40.00'))

    def assertEverythingDeleted(self):
        for model in (AppointmentTreatment, Invoice, Appointment, Patient, Treatment, SequenceCounter):
            self.assertEqual(model.objects.count(), 0, model.__name__)

    def test_wipe(self):
        result = wipe_all_data()

        self.assertTrue(result.success)
        self.assertEqual(result.data['invoices'], 1)
        self.assertEqual(result.data['sequence_counters'], 2)
        self.assertEverythingDeleted()
        self.assertEqual(next_record_number(2024), 'PT-2024-00001')

    def test_management_command(self):
        out = StringIO()
        call_command('wipe_clinic_data', '--noinput', stdout=out)
        self.assertIn('All clinic data wiped.', out.getvalue())
        self.assertEverythingDeleted()

    def test_endpoint_requires_confirmation(self):
        self.client.force_login(User.objects.create_superuser(username='admin', password='pass12345'))

        response = self.client.post(reverse('core:wipe_data'))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(Patient.objects.count(), 1)

        response = self.client.post(reverse('core:wipe_data'), {'confirm': 'WIPE'})
        self.assertEqual(response.status_code, 200)
        self.assertEverythingDeleted()

    def test_endpoint_accepts_json_confirmation(self):
        self.client.force_login(User.objects.create_superuser(username='admin', password='pass12345'))

        response = self.client.post(
            reverse('core:wipe_data'), data='{"confirm": "WIPE"}', content_type='application/json'
        )
        self.assertEqual(response.status_code, 200)
        self.assertEverythingDeleted()

    def test_endpoint_rejects_malformed_json(self):
        self.client.force_login(User.objects.create_superuser(username='admin', password='pass12345'))

        response = self.client.post(reverse('core:wipe_data'), data='{confirm', content_type='application/json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(Patient.objects.count(), 1)

    def test_endpoint_requires_maintenance_permission(self):
        role = Role.objects.create(name='physiotherapist', display_name='Physiotherapist', is_default=True)
        self.client.force_login(User.objects.create_user(username='pt', password='pass12345', role=role))

        response = self.client.post(reverse('core:wipe_data'), {'confirm': 'WIPE'})

        self.assertEqual(response.status_code, 403)
        self.assertEqual(Patient.objects.count(), 1)


class HealthCheckTest(TestCase):

    def test_healthy(self):
        response = self.client.get(reverse('health_check'))
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertIn(data['checks']['database'], ('healthy', 'slow'))
        self.assertIn('no-cache', response['Cache-Control'])


class InitializeSettingsTest(TestCase):

    def test_seeds_clinic_settings_once(self):
        call_command('initialize_settings', stdout=StringIO())
        call_command('initialize_settings', stdout=StringIO())

        self.assertEqual(SystemSetting.get_setting('currency_symbol'), '$')
        self.assertEqual(SystemSetting.objects.filter(key='clinic_name').count(), 1)


class VerifyEnvironmentTest(TestCase):

    @override_settings(SECRET_KEY='s' * 50)
    def test_passes_with_real_secret(self):
        out = StringIO()
        call_command('verify_environment', stdout=out)
        self.assertIn('Environment looks good.', out.getvalue())

    @override_settings(SECRET_KEY='django-insecure-short', DEBUG=False)
    def test_rejects_development_secret(self):
        with self.assertRaises(CommandError):
            call_command('verify_environment', stdout=StringIO(), stderr=StringIO())
