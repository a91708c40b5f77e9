"""
Default collaborator adapters and settings-driven loading.

BookingStatusSync and NotificationDispatcher default to Celery-backed
adapters that enqueue their task once the surrounding database
transaction commits. There is no default TalentSnapshotProvider: the
talent-profile subsystem must configure one.

Settings:
    SETTLEMENT_TALENT_SNAPSHOT_PROVIDER: dotted path, required for settle
    SETTLEMENT_BOOKING_STATUS_SYNC: dotted path (default: CeleryBookingStatusSync)
    SETTLEMENT_NOTIFICATION_DISPATCHER: dotted path (default: CeleryNotificationDispatcher)

Usage:
    from settlements.collaborators import get_notification_dispatcher

    notifier = get_notification_dispatcher()
    notifier.dispatch(customer_id, "payment_confirmed", {...})
"""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import transaction
from django.utils.module_loading import import_string

if TYPE_CHECKING:
    from typing import Any

    from settlements.protocols import (
        BookingStatusSync,
        NotificationDispatcher,
        TalentSnapshotProvider,
    )


DEFAULT_BOOKING_STATUS_SYNC = "settlements.collaborators.CeleryBookingStatusSync"
DEFAULT_NOTIFICATION_DISPATCHER = "settlements.collaborators.CeleryNotificationDispatcher"


class CeleryBookingStatusSync:
    """BookingStatusSync that enqueues sync_booking_status after commit."""

    def sync(self, booking_id: str, new_status: str) -> None:
        from settlements.tasks import sync_booking_status

        transaction.on_commit(partial(sync_booking_status.delay, booking_id, new_status))


class CeleryNotificationDispatcher:
    """NotificationDispatcher that enqueues dispatch_notification after commit."""

    def dispatch(self, party_id: str, template_kind: str, payload: dict[str, Any]) -> None:
        from settlements.tasks import dispatch_notification

        transaction.on_commit(
            partial(dispatch_notification.delay, party_id, template_kind, payload)
        )


def _load(setting_name: str, default: str | None):
    path = getattr(settings, setting_name, None) or default
    if not path:
        raise ImproperlyConfigured(f"{setting_name} is not configured")
    try:
        factory = import_string(path)
    except ImportError as e:
        raise ImproperlyConfigured(f"{setting_name}: cannot import '{path}': {e}") from e
    return factory()


def get_talent_snapshot_provider() -> TalentSnapshotProvider:
    """
    Instantiate the configured talent snapshot provider.

    Raises:
        ImproperlyConfigured: If SETTLEMENT_TALENT_SNAPSHOT_PROVIDER is unset
            or cannot be imported
    """
    return _load("SETTLEMENT_TALENT_SNAPSHOT_PROVIDER", None)


def get_booking_status_sync() -> BookingStatusSync:
    """Instantiate the configured booking status sync."""
    return _load("SETTLEMENT_BOOKING_STATUS_SYNC", DEFAULT_BOOKING_STATUS_SYNC)


def get_notification_dispatcher() -> NotificationDispatcher:
    """Instantiate the configured notification dispatcher."""
    return _load("SETTLEMENT_NOTIFICATION_DISPATCHER", DEFAULT_NOTIFICATION_DISPATCHER)
