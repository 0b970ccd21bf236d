# services/marina-service/src/config/settings/testing.py
"""
Testing Settings

Settings for running tests.
"""

from .base import *

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    }
}

EVENT_BACKEND = 'log'

JWT_SETTINGS = {
    **JWT_SETTINGS,
    'SIGNING_KEY': 'test-jwt-secret',
    'VERIFYING_KEY': 'test-jwt-secret',
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {'null': {'class': 'logging.NullHandler'}},
    'root': {'handlers': ['null'], 'level': 'WARNING'},
}
