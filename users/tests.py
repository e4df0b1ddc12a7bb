# users/tests.py
"""
Unit tests for roles, sign-in endpoints and identity provider configuration
"""
from io import StringIO

from django.core.management import call_command
from django.test import TestCase, override_settings
from django.urls import reverse

from .middleware import SESSION_REFRESHED_KEY
from .models import Role, User
from .providers import get_enabled_providers, get_identity_providers

PROVIDER_CREDENTIALS = {
    'google': {'client_id': 'google-id', 'client_secret': 'google-secret'},
    'github': {'client_id': '', 'client_secret': ''},
    'microsoft': {'client_id': '', 'client_secret': 'orphan-secret'},
}


class RolePermissionTest(TestCase):
    """Test module permissions granted through roles"""

    def test_default_role_gets_default_permissions(self):
        role = Role.objects.create(name='staff', display_name='Staff', is_default=True)
        self.assertTrue(role.permissions['patients'])
        self.assertFalse(role.permissions['billing'])

    def test_user_permission_follows_role(self):
        role = Role.objects.create(name='staff', display_name='Staff', is_default=True)
        user = User.objects.create_user(username='frontdesk', password='pass12345', role=role)
        self.assertTrue(user.has_permission('appointments'))
        self.assertFalse(user.has_permission('maintenance'))

    def test_user_without_role_has_no_permission(self):
        user = User.objects.create_user(username='nobody', password='pass12345')
        self.assertFalse(user.has_permission('patients'))

    def test_superuser_has_every_permission(self):
        user = User.objects.create_superuser(username='root', password='pass12345')
        self.assertTrue(user.has_permission('maintenance'))


@override_settings(IDENTITY_PROVIDER_CREDENTIALS=PROVIDER_CREDENTIALS)
class IdentityProviderTest(TestCase):
    """Test provider configuration read from settings"""

    def test_provider_enabled_only_with_client_id(self):
        providers = {provider.name: provider for provider in get_identity_providers()}
        self.assertTrue(providers['google'].enabled)
        self.assertFalse(providers['github'].enabled)
        self.assertFalse(providers['microsoft'].enabled)

    def test_enabled_providers(self):
        self.assertEqual([p.name for p in get_enabled_providers()], ['google'])

    def test_public_description_hides_secret(self):
        google = get_enabled_providers()[0]
        self.assertNotIn('client_secret', google.as_public_dict())
        self.assertEqual(google.as_public_dict()['label'], 'Google')

    def test_login_options_endpoint(self):
        response = self.client.get(reverse('users:login'))
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data['email_password'])
        self.assertEqual(len(data['providers']), 3)


class LoginViewTest(TestCase):
    """Test JSON sign-in and sign-out"""

    def setUp(self):
        self.user = User.objects.create_user(
            username='therapist', password='pass12345', first_name='Ana', last_name='Cruz'
        )

    def test_login_with_valid_credentials(self):
        response = self.client.post(
            reverse('users:login'),
            {'username': 'therapist', 'password': 'pass12345'},
            content_type='application/json'
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['full_name'], 'Ana Cruz')
        self.assertEqual(int(self.client.session['_auth_user_id']), self.user.pk)

    def test_login_with_wrong_password(self):
        response = self.client.post(reverse('users:login'), {'username': 'therapist', 'password': 'nope'})
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()['success'])

    def test_login_requires_both_fields(self):
        response = self.client.post(reverse('users:login'), {'username': 'therapist'})
        self.assertEqual(response.status_code, 400)

    def test_login_rejects_malformed_json(self):
        response = self.client.post(reverse('users:login'), '{not json', content_type='application/json')
        self.assertEqual(response.status_code, 400)

    def test_logout(self):
        self.client.force_login(self.user)
        response = self.client.post(reverse('users:logout'))
        self.assertEqual(response.status_code, 200)
        self.assertNotIn('_auth_user_id', self.client.session)

    def test_session_requires_login(self):
        response = self.client.get(reverse('users:session'))
        self.assertEqual(response.status_code, 302)

    def test_session_is_refreshed_for_signed_in_user(self):
        self.client.force_login(self.user)
        response = self.client.get(reverse('users:session'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['username'], 'therapist')
        self.assertIn(SESSION_REFRESHED_KEY, self.client.session)


class SetupRolesCommandTest(TestCase):

    def test_creates_default_roles(self):
        call_command('setup_roles', stdout=StringIO())
        call_command('setup_roles', stdout=StringIO())

        self.assertEqual(
            list(Role.objects.values_list('name', flat=True)),
            ['admin', 'physiotherapist', 'staff']
        )
        self.assertTrue(Role.objects.get(name='admin').permissions['maintenance'])
