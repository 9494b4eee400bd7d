"""
Django settings for the Partner CRM lead service.

Uses PostgreSQL as the database and django-rest-framework for the API layer.
"""
import os
from decimal import Decimal
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'dev-secret-key-change-in-production')

DEBUG = os.environ.get('DEBUG', 'True').lower() in ('true', '1', 'yes')

ALLOWED_HOSTS = os.environ.get('ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',')

# Application definition
INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'rest_framework',
    'corsheaders',
    'django_q',
    'crm',
]

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.common.CommonMiddleware',
    'crm.middleware.RequestLogMiddleware',
]

# Don't redirect to add trailing slashes — API clients send exact URLs
APPEND_SLASH = False

ROOT_URLCONF = 'partner_crm.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
    },
]

WSGI_APPLICATION = 'partner_crm.wsgi.application'

# Database — PostgreSQL in production, SQLite for local dev
DB_ENGINE = os.environ.get('DB_ENGINE', 'django.db.backends.sqlite3')

if DB_ENGINE == 'django.db.backends.sqlite3':
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'db.sqlite3',
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': DB_ENGINE,
            'NAME': os.environ.get('DB_NAME', 'partner_crm'),
            'USER': os.environ.get('DB_USER', 'postgres'),
            'PASSWORD': os.environ.get('DB_PASSWORD', 'postgres'),
            'HOST': os.environ.get('DB_HOST', 'localhost'),
            'PORT': os.environ.get('DB_PORT', '5432'),
        }
    }

# CORS
CORS_ALLOW_ALL_ORIGINS = DEBUG
CORS_ALLOWED_ORIGINS = [
    'http://localhost:5173',
    'http://localhost:3000',
    'http://127.0.0.1:5173',
]

# DRF
REST_FRAMEWORK = {
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'DEFAULT_PARSER_CLASSES': [
        'rest_framework.parsers.JSONParser',
    ],
    'DEFAULT_PAGINATION_CLASS': None,
    'UNAUTHENTICATED_USER': None,
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'crm.authentication.InternalTokenAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'crm.authentication.IsInternalUser',
    ],
    'EXCEPTION_HANDLER': 'crm.api.exception_handler.crm_exception_handler',
    'COERCE_DECIMAL_TO_STRING': False,
}

# CRM configuration
# Database alias every CRM service is bound to (the injected store handle)
CRM_DATABASE_ALIAS = os.environ.get('CRM_DATABASE_ALIAS', 'default')

# "inline" writes audit entries in-request; "queue" hands them to django-q
AUDIT_DELIVERY = os.environ.get('AUDIT_DELIVERY', 'inline')

COMMISSION_RATE = Decimal(os.environ.get('COMMISSION_RATE', '0.05'))

LEADS_DEFAULT_PAGE_SIZE = int(os.environ.get('LEADS_DEFAULT_PAGE_SIZE', '20'))
LEADS_MAX_PAGE_SIZE = int(os.environ.get('LEADS_MAX_PAGE_SIZE', '100'))

# Terminal dashboard (manage.py watch_dashboard)
DASHBOARD_API_URL = os.environ.get('DASHBOARD_API_URL', 'http://localhost:8000/api')
DASHBOARD_API_TOKEN = os.environ.get('DASHBOARD_API_TOKEN', '')
DASHBOARD_POLL_SECONDS = int(os.environ.get('DASHBOARD_POLL_SECONDS', '30'))

# django-q2 — lightweight task queue using the ORM broker (no Redis needed)
Q_CLUSTER = {
    'name': 'partner-crm',
    'workers': 2,
    'timeout': 60,
    'retry': 120,
    'orm': 'default',
    'bulk': 10,
    'catch_up': True,
}

# All datetimes are timezone-aware UTC
USE_TZ = True
TIME_ZONE = 'UTC'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
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
        'level': os.environ.get('LOG_LEVEL', 'INFO'),
    },
}
