# physio_clinic_project/settings.py
"""
Settings for the physiotherapy clinic project.

Everything deployment-specific comes from environment variables so the same
module serves local development (SQLite) and production (PostgreSQL).
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in ('true', '1', 'yes', 'on')


def env_int(name, default):
    try:
        return int(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'django-insecure-physio-clinic-development-key')

DEBUG = env_bool('DJANGO_DEBUG', False)

ALLOWED_HOSTS = [host.strip() for host in os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',') if host.strip()]


INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    'core',
    'users',
    'patients',
    'treatments',
    'appointments',
    'billing',
    'reports',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    # Keyed on client address only, so it needs no session or user and also
    # throttles the health check and login.
    'core.middleware.RateLimitMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'users.middleware.SessionRefreshMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'physio_clinic_project.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
                'core.context_processors.clinic_settings',
            ],
        },
    },
]

WSGI_APPLICATION = 'physio_clinic_project.wsgi.application'


# Database
DB_ENGINE = os.environ.get('DB_ENGINE', 'django.db.backends.sqlite3')

if DB_ENGINE == 'django.db.backends.sqlite3':
    DATABASES = {
        'default': {
            'ENGINE': DB_ENGINE,
            'NAME': os.environ.get('DB_NAME', str(BASE_DIR / 'db.sqlite3')),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': DB_ENGINE,
            'NAME': os.environ.get('DB_NAME', 'physio_clinic'),
            'USER': os.environ.get('DB_USER', ''),
            'PASSWORD': os.environ.get('DB_PASSWORD', ''),
            'HOST': os.environ.get('DB_HOST', 'localhost'),
            'PORT': os.environ.get('DB_PORT', '5432'),
            'CONN_MAX_AGE': env_int('DB_CONN_MAX_AGE', 60),
            'OPTIONS': {
                'connect_timeout': 2,
                # Runaway queries are cancelled by the server
                'options': f"-c statement_timeout={env_int('DB_STATEMENT_TIMEOUT_MS', 30000)}",
            },
        }
    }


# Authentication
AUTH_USER_MODEL = 'users.User'
LOGIN_URL = 'users:login'

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
    {'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator'},
    {'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator'},
]

# External identity providers, each enabled only when a client id is configured
IDENTITY_PROVIDER_CREDENTIALS = {
    name: {
        'client_id': os.environ.get(f'{name.upper()}_CLIENT_ID', ''),
        'client_secret': os.environ.get(f'{name.upper()}_CLIENT_SECRET', ''),
    }
    for name in ('google', 'github', 'microsoft')
}

# Session policy: 7 day lifetime, expiry pushed forward at most once a day
SESSION_COOKIE_AGE = 60 * 60 * 24 * 7
SESSION_REFRESH_AGE = 60 * 60 * 24
SESSION_COOKIE_SECURE = env_bool('SESSION_COOKIE_SECURE', not DEBUG)
CSRF_COOKIE_SECURE = SESSION_COOKIE_SECURE


# Caching (dashboard figures, shared rate limit counters)
CACHES = {
    'default': {
        'BACKEND': os.environ.get('CACHE_BACKEND', 'django.core.cache.backends.locmem.LocMemCache'),
        'LOCATION': os.environ.get('CACHE_LOCATION', 'physio-clinic'),
    }
}

DASHBOARD_CACHE_TIMEOUT = env_int('DASHBOARD_CACHE_TIMEOUT', 300)


# Rate limiting per client address
RATE_LIMIT = {
    'ENABLED': env_bool('RATE_LIMIT_ENABLED', True),
    'BACKEND': os.environ.get('RATE_LIMIT_BACKEND', 'core.ratelimit.InMemoryRateLimitBackend'),
    'WINDOW_SECONDS': env_int('RATE_LIMIT_WINDOW_SECONDS', 60),
    'MAX_REQUESTS': env_int('RATE_LIMIT_MAX_REQUESTS', 100),
}

CONTENT_SECURITY_POLICY = (
    "default-src 'self'; script-src 'self' 'unsafe-eval' 'unsafe-inline'; "
    "style-src 'self' 'unsafe-inline'; img-src 'self' data: https:; "
    "font-src 'self' data:; connect-src 'self';"
)


# Internationalization
LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.environ.get('TIME_ZONE', 'UTC')
USE_I18N = True
USE_TZ = True


STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

APP_VERSION = os.environ.get('APP_VERSION', '0.1.0')


# Logging
LOG_LEVEL = 'DEBUG' if DEBUG else os.environ.get('LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '[{asctime}] {levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'WARNING',
            'propagate': False,
        },
        **{
            app: {
                'handlers': ['console'],
                'level': LOG_LEVEL,
                'propagate': False,
            }
            for app in ('core', 'users', 'patients', 'treatments', 'appointments', 'billing', 'reports')
        },
    },
}
