"""
WSGI config for the settlement service.

Fallback entry point for WSGI servers (gunicorn); the ASGI entry point in
config.asgi is primary.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
