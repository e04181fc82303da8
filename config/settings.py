"""
Django settings for the Dropship Store API.

All deploy-time configuration comes from environment variables.
Runtime pricing knobs (exchange rate, markup, shipping fallback) are
stored in the SiteSetting table and fall back to the values below.
"""
import os
from pathlib import Path

from .database import get_database_config

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'django-insecure-dev-only-change-me')
DEBUG = os.getenv('DEBUG', 'true').lower() == 'true'
ALLOWED_HOSTS = [h.strip() for h in os.getenv('ALLOWED_HOSTS', '*').split(',') if h.strip()]

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'apps.core',
    'apps.identity',
    'apps.siteconfig',
    'apps.supplier',
    'apps.catalog',
    'apps.monitoring',
    'apps.shipping',
    'apps.orders',
    'apps.payments',
    'apps.reviews',
    'apps.notifications',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    'apps.core.middleware.RequestLogMiddleware',
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'config.wsgi.application'
ASGI_APPLICATION = 'config.asgi.application'

DATABASES = {
    'default': get_database_config(BASE_DIR),
}

AUTH_USER_MODEL = 'identity.User'
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

CACHES = {
    'default': {
        'BACKEND': os.getenv('CACHE_BACKEND', 'django.core.cache.backends.locmem.LocMemCache'),
        'LOCATION': os.getenv('CACHE_LOCATION', 'dropship-store'),
    }
}

# =============================================================================
# Store
# =============================================================================

STORE_NAME = os.getenv('STORE_NAME', 'SnuggleUp')
FRONTEND_URL = os.getenv('FRONTEND_URL', 'http://localhost:5173')
STORE_TIME_ZONE = 'Africa/Johannesburg'

# Pricing defaults (overridable at runtime through SiteSetting)
USD_TO_ZAR = os.getenv('USD_TO_ZAR', '18.0')
PRICE_MARKUP = os.getenv('PRICE_MARKUP', '1.12')
SHIPPING_FALLBACK_PRICE_ZAR = os.getenv('SHIPPING_FALLBACK_PRICE_ZAR', '150.00')

# =============================================================================
# Supplier (CJ Dropshipping)
# =============================================================================

CJ_API_BASE_URL = os.getenv('CJ_API_BASE_URL', 'https://developers.cjdropshipping.com/api2.0/v1')
CJ_EMAIL = os.getenv('CJ_EMAIL', '')
CJ_API_KEY = os.getenv('CJ_API_KEY', '')
CJ_ACCESS_TOKEN = os.getenv('CJ_ACCESS_TOKEN', '')
CJ_WEBHOOK_SECRET = os.getenv('CJ_WEBHOOK_SECRET', '')
CJ_MIN_REQUEST_INTERVAL = float(os.getenv('CJ_MIN_REQUEST_INTERVAL', '1.1'))
CJ_MAX_RETRIES = int(os.getenv('CJ_MAX_RETRIES', '3'))
CJ_BACKOFF_BASE = float(os.getenv('CJ_BACKOFF_BASE', '1.0'))
CJ_TIMEOUT = float(os.getenv('CJ_TIMEOUT', '30'))

CJ_INVENTORY_SYNC_ENABLED = os.getenv('CJ_INVENTORY_SYNC_ENABLED', 'true').lower() != 'false'
CJ_PRICE_SYNC_ENABLED = os.getenv('CJ_PRICE_SYNC_ENABLED', 'true').lower() != 'false'
CJ_INVENTORY_SYNC_BATCH_SIZE = int(os.getenv('CJ_INVENTORY_SYNC_BATCH_SIZE', '100'))
CJ_PRICE_SYNC_LIMIT = int(os.getenv('CJ_PRICE_SYNC_LIMIT', '50'))
CJ_AUTO_SUBMIT_ORDERS = os.getenv('CJ_AUTO_SUBMIT_ORDERS', 'false').lower() == 'true'

# =============================================================================
# Payments (PayFast)
# =============================================================================

PAYFAST_MERCHANT_ID = os.getenv('PAYFAST_MERCHANT_ID', '')
PAYFAST_MERCHANT_KEY = os.getenv('PAYFAST_MERCHANT_KEY', '')
PAYFAST_PASSPHRASE = os.getenv('PAYFAST_PASSPHRASE', '')
PAYFAST_TEST_MODE = os.getenv('PAYFAST_TEST_MODE', 'false').lower() == 'true'

# =============================================================================
# Authentication
# =============================================================================

JWT_SECRET = os.getenv('JWT_SECRET', SECRET_KEY)
SUPABASE_JWT_SECRET = os.getenv('SUPABASE_JWT_SECRET', '')
SUPABASE_URL = os.getenv('SUPABASE_URL', '')

# =============================================================================
# Email
# =============================================================================

EMAIL_BACKEND = os.getenv('EMAIL_BACKEND', 'django.core.mail.backends.smtp.EmailBackend')
EMAIL_HOST = os.getenv('EMAIL_HOST', 'smtpout.secureserver.net')
EMAIL_PORT = int(os.getenv('EMAIL_PORT', '465'))
EMAIL_HOST_USER = os.getenv('EMAIL_HOST_USER', '')
EMAIL_HOST_PASSWORD = os.getenv('EMAIL_HOST_PASSWORD', '')
EMAIL_USE_SSL = EMAIL_PORT == 465
EMAIL_USE_TLS = EMAIL_PORT == 587
DEFAULT_FROM_EMAIL = os.getenv('DEFAULT_FROM_EMAIL', EMAIL_HOST_USER or 'noreply@localhost')

# =============================================================================
# Background tasks
# =============================================================================

TASK_BACKEND = os.getenv('TASK_BACKEND', 'local')
CELERY_BROKER_URL = os.getenv('CELERY_BROKER_URL', 'redis://localhost:6379/0')
CELERY_RESULT_BACKEND = os.getenv('CELERY_RESULT_BACKEND', CELERY_BROKER_URL)
CELERY_TIMEZONE = STORE_TIME_ZONE
CELERY_TASK_SERIALIZER = 'json'
CELERY_ACCEPT_CONTENT = ['json']

# =============================================================================
# Logging
# =============================================================================

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'standard',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'apps': {
            'handlers': ['console'],
            'level': os.getenv('LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
        'django.request': {
            'handlers': ['console'],
            'level': 'WARNING',
            'propagate': False,
        },
    },
}
