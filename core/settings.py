"""
Django settings for the MyCurrency exchange service.

Values are read from the environment (a local .env file is loaded first).
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent


def env_list(name: str, default: str) -> list[str]:
    return [item.strip().upper() for item in os.getenv(name, default).split(',') if item.strip()]


def warm_interval(ttl: int) -> int:
    # Refresh a minute before entries expire, never more often than once a minute
    return max(ttl - 60, 60)


# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.getenv('SECRET_KEY', 'django-insecure-mycurrency-dev-key')

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = os.getenv('DEBUG', 'True').lower() == 'true'

ALLOWED_HOSTS = os.getenv('ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',')

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'django.contrib.staticfiles',
    'rest_framework',
    'drf_spectacular',
    'apps.exchange',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'core.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
            ],
        },
    },
]

WSGI_APPLICATION = 'core.wsgi.application'

# The exchange app keeps no database models; Django still expects a default alias.
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }
}

LANGUAGE_CODE = 'en-us'

TIME_ZONE = 'UTC'

USE_I18N = True

USE_TZ = True

STATIC_URL = 'static/'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# Cache
REDIS_URL = os.getenv('REDIS_URL', '')

if REDIS_URL:
    CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.redis.RedisCache',
            'LOCATION': REDIS_URL,
        }
    }
else:
    CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        }
    }


# Django REST Framework
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': [],
    'UNAUTHENTICATED_USER': None,
    'DEFAULT_SCHEMA_CLASS': 'drf_spectacular.openapi.AutoSchema',
    'EXCEPTION_HANDLER': 'apps.exchange.api.exceptions.exchange_exception_handler',
    'DEFAULT_THROTTLE_CLASSES': [
        'rest_framework.throttling.AnonRateThrottle',
    ],
    'DEFAULT_THROTTLE_RATES': {
        'anon': os.getenv('API_THROTTLE_RATE', '100/minute'),
    },
}

SPECTACULAR_SETTINGS = {
    'TITLE': 'MyCurrency API',
    'DESCRIPTION': 'Currency conversion and latest/historical exchange rates',
    'VERSION': '1.0.0',
}


# Exchange rates
EXCHANGE_RATE_PROVIDER = os.getenv('EXCHANGE_RATE_PROVIDER', 'frankfurter')
FRANKFURTER_URL = os.getenv('FRANKFURTER_URL', 'https://api.frankfurter.app')
EXCHANGE_PROVIDER_TIMEOUT = float(os.getenv('EXCHANGE_PROVIDER_TIMEOUT', '10'))
EXCHANGE_PROVIDER_RETRIES = int(os.getenv('EXCHANGE_PROVIDER_RETRIES', '3'))
EXCHANGE_BREAKER_FAILURE_THRESHOLD = int(os.getenv('EXCHANGE_BREAKER_FAILURE_THRESHOLD', '5'))
EXCHANGE_BREAKER_RESET_TIMEOUT = float(os.getenv('EXCHANGE_BREAKER_RESET_TIMEOUT', '30'))

EXCHANGE_EXCLUDED_CURRENCIES = env_list('EXCHANGE_EXCLUDED_CURRENCIES', 'TRY,PLN,THB,MXN')
EXCHANGE_CACHE_ALIAS = os.getenv('EXCHANGE_CACHE_ALIAS', 'default')
EXCHANGE_LATEST_RATES_TTL = int(os.getenv('EXCHANGE_LATEST_RATES_TTL', str(15 * 60)))
EXCHANGE_HISTORICAL_RATES_TTL = int(os.getenv('EXCHANGE_HISTORICAL_RATES_TTL', str(60 * 60)))
EXCHANGE_WARM_BASE_CURRENCIES = env_list('EXCHANGE_WARM_BASE_CURRENCIES', 'EUR,USD,GBP')


# Celery
CELERY_BROKER_URL = os.getenv('CELERY_BROKER_URL', REDIS_URL or 'redis://localhost:6379/0')
CELERY_RESULT_BACKEND = os.getenv('CELERY_RESULT_BACKEND', CELERY_BROKER_URL)
CELERY_BEAT_SCHEDULE = {
    'warm-latest-rates': {
        'task': 'warm_latest_rates',
        'schedule': warm_interval(EXCHANGE_LATEST_RATES_TTL),
    },
}


# Logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG' if DEBUG else 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {name} {message}',
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
            'level': 'INFO',
            'propagate': False,
        },
        'apps': {
            'level': LOG_LEVEL,
        },
    },
}
