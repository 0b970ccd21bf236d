# services/marina-service/src/config/settings/__init__.py
# Select a module with DJANGO_SETTINGS_MODULE: config.settings.base or config.settings.testing
