# users/providers.py
"""
Identity providers offered on the login screen.

Credentials are verified by the providers themselves; this module only
describes which ones are configured. A provider is enabled as soon as its
client id is present in the environment.
"""
from dataclasses import dataclass

from django.conf import settings

PROVIDER_LABELS = {
    'google': 'Google',
    'github': 'GitHub',
    'microsoft': 'Microsoft',
}


@dataclass(frozen=True)
class IdentityProvider:
    name: str
    label: str
    client_id: str
    client_secret: str

    @property
    def enabled(self):
        return bool(self.client_id)

    def as_public_dict(self):
        """Provider description safe to send to the browser (no secret)"""
        return {'name': self.name, 'label': self.label, 'enabled': self.enabled}


def get_identity_providers():
    credentials = getattr(settings, 'IDENTITY_PROVIDER_CREDENTIALS', {})
    return [
        IdentityProvider(
            name=name,
            label=PROVIDER_LABELS.get(name, name.title()),
            client_id=config.get('client_id', ''),
            client_secret=config.get('client_secret', ''),
        )
        for name, config in credentials.items()
    ]


def get_enabled_providers():
    return [provider for provider in get_identity_providers() if provider.enabled]


def get_session_policy():
    """Session lifetime and refresh cadence, in seconds"""
    return {
        'expires_in': settings.SESSION_COOKIE_AGE,
        'update_age': getattr(settings, 'SESSION_REFRESH_AGE', 60 * 60 * 24),
    }
