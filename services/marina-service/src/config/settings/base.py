"""Base settings for Marina Service."""
import os
import sys
from datetime import timedelta
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(BASE_DIR.parent.parent.parent))

SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key')
DEBUG = os.environ.get('DEBUG', 'True').lower() == 'true'
ALLOWED_HOSTS = os.environ.get('ALLOWED_HOSTS', '*').split(',')

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'corsheaders',
    'django_filters',
    'apps.core',
    'apps.api',
]

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    'shared.common.middleware.RequestIDMiddleware',
    'shared.common.middleware.LoggingMiddleware',
]

ROOT_URLCONF = 'config.urls'
TEMPLATES = [{'BACKEND': 'django.template.backends.django.DjangoTemplates', 'DIRS': [], 'APP_DIRS': True, 'OPTIONS': {'context_processors': ['django.template.context_processors.debug', 'django.template.context_processors.request', 'django.contrib.auth.context_processors.auth', 'django.contrib.messages.context_processors.messages']}}]
WSGI_APPLICATION = 'config.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': os.environ.get('DB_NAME', 'marina_service_db'),
        'USER': os.environ.get('DB_USER', 'marina_service_user'),
        'PASSWORD': os.environ.get('DB_PASSWORD', 'marina_service_password'),
        'HOST': os.environ.get('DB_HOST', 'pgbouncer'),
        'PORT': os.environ.get('DB_PORT', '6432'),
    }
}

AUTH_PASSWORD_VALIDATORS = [{'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'}]
LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True
STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': ['shared.common.authentication.JWTAuthentication'],
    'DEFAULT_PERMISSION_CLASSES': ['rest_framework.permissions.IsAuthenticated'],
    'DEFAULT_PAGINATION_CLASS': 'apps.api.views.pagination.StandardResultsSetPagination',
    'PAGE_SIZE': 20,
    'DEFAULT_FILTER_BACKENDS': ['django_filters.rest_framework.DjangoFilterBackend', 'rest_framework.filters.SearchFilter', 'rest_framework.filters.OrderingFilter'],
    'EXCEPTION_HANDLER': 'shared.common.exceptions.custom_exception_handler',
}

CORS_ALLOW_ALL_ORIGINS = DEBUG
REDIS_URL = os.environ.get('REDIS_URL', 'redis://redis:6379/4')
CACHES = {'default': {'BACKEND': 'django_redis.cache.RedisCache', 'LOCATION': REDIS_URL}}

# JWT verification; tokens are issued by the user service
JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY', SECRET_KEY)
JWT_SETTINGS = {
    'ALGORITHM': os.environ.get('JWT_ALGORITHM', 'HS256'),
    'SIGNING_KEY': JWT_SECRET_KEY,
    'VERIFYING_KEY': os.environ.get('JWT_VERIFYING_KEY', JWT_SECRET_KEY),
    'ISSUER': os.environ.get('JWT_ISSUER', 'marina-user-service'),
    'ACCESS_TOKEN_LIFETIME': timedelta(minutes=int(os.environ.get('JWT_ACCESS_TOKEN_MINUTES', '60'))),
}

# Events: 'log' or 'redis' (pub/sub on MARINA_EVENT_CHANNEL)
EVENT_PUBLISHING_ENABLED = os.environ.get('EVENT_PUBLISHING_ENABLED', 'True').lower() == 'true'
EVENT_BACKEND = os.environ.get('EVENT_BACKEND', 'redis')
MARINA_EVENT_CHANNEL = os.environ.get('MARINA_EVENT_CHANNEL', 'marina.events')

# Ledger policy
MARINA_DEFAULT_CURRENCY = os.environ.get('MARINA_DEFAULT_CURRENCY', 'RUB')
MARINA_PENALTY_DAILY_RATE = os.environ.get('MARINA_PENALTY_DAILY_RATE', '0.005')
MARINA_DEPOSIT_REQUIRED_FOR_CONFIRMATION = os.environ.get('MARINA_DEPOSIT_REQUIRED_FOR_CONFIRMATION', 'True').lower() == 'true'
MARINA_MONTHLY_PAYMENT_LEAD_DAYS = int(os.environ.get('MARINA_MONTHLY_PAYMENT_LEAD_DAYS', '7'))
MARINA_SEASON_PAYMENT_LEAD_DAYS = int(os.environ.get('MARINA_SEASON_PAYMENT_LEAD_DAYS', '14'))

SERVICE_NAME = 'marina-service'
SERVICE_PORT = 8020

LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'json': {
            '()': 'pythonjsonlogger.jsonlogger.JsonFormatter',
            'format': '%(asctime)s %(levelname)s %(name)s %(message)s',
        },
    },
    'handlers': {'console': {'class': 'logging.StreamHandler', 'formatter': 'json'}},
    'root': {'handlers': ['console'], 'level': LOG_LEVEL},
    'loggers': {
        'apps': {'level': LOG_LEVEL},
        'shared': {'level': LOG_LEVEL},
        'django.db.backends': {'level': 'WARNING'},
    },
}
