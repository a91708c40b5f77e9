"""
Settlements app configuration.

This app provides the booking settlement core:
- Pricing table and commission classification
- Settlement breakdown calculation
- Transaction ledger (django-fsm state machine)
- Payment gateway callback reconciliation
"""

from django.apps import AppConfig


class SettlementsConfig(AppConfig):
    """Configuration for the settlements application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "settlements"
    verbose_name = "Settlements"
