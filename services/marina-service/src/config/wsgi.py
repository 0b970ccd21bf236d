# services/marina-service/src/config/wsgi.py
"""
WSGI config for Marina Service
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.base')

application = get_wsgi_application()
