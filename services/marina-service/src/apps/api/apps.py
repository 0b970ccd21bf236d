# services/marina-service/src/apps/api/apps.py
"""
API App Configuration
"""

from django.apps import AppConfig


class ApiConfig(AppConfig):
    name = 'apps.api'
    label = 'marina_api'
    verbose_name = 'Marina API'
