"""Production settings.

Sensitive values must be provided via environment variables.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

SECRET_KEY = get_env('DJANGO_SECRET_KEY', required=True)  # noqa: F405

ALLOWED_HOSTS = get_env('DJANGO_ALLOWED_HOSTS', '', required=True).split(',')  # noqa: F405

DATABASES['default']['CONN_MAX_AGE'] = int(get_env('DB_CONN_MAX_AGE', '60'))  # noqa: F405
