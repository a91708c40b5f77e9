"""
Celery configuration for the settlement service.

Celery delivers settlement side effects (booking status sync, payment
notifications) outside the request that produced them. Redis is the
default broker and result backend; tasks are auto-discovered from
installed apps.

Usage:
    from settlements.tasks import sync_booking_status

    sync_booking_status.delay(booking_id, "confirmed")

Worker:
    celery -A config worker -l info
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()
