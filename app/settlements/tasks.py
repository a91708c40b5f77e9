"""
Celery tasks for settlement side effects.

Side effects of a settled payment (booking confirmation, payment
notifications) are delivered asynchronously so they never hold the
ledger's row lock or fail a gateway callback. Each task hands off to the
matching Django signal; receivers that raise cause a retry with backoff.

Usage:
    from settlements.tasks import sync_booking_status

    sync_booking_status.delay("bk_123", "confirmed")
"""

from __future__ import annotations

import logging

from celery import shared_task

from settlements.signals import send_booking_status_changed, send_notification_requested

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

MAX_SIDE_EFFECT_RETRIES = 5


# =============================================================================
# Side Effect Tasks
# =============================================================================


@shared_task(
    bind=True,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_backoff_max=300,
    retry_kwargs={"max_retries": MAX_SIDE_EFFECT_RETRIES},
    acks_late=True,
)
def sync_booking_status(self, booking_id: str, new_status: str) -> dict:
    """
    Push a booking status change to the booking subsystem.

    Args:
        booking_id: Booking to update
        new_status: BookingStatus value

    Returns:
        Dict with the number of receivers notified
    """
    logger.info(
        "Syncing booking status",
        extra={"booking_id": booking_id, "new_status": new_status},
    )
    receivers = send_booking_status_changed(booking_id, new_status)
    return {"booking_id": booking_id, "new_status": new_status, "receivers": receivers}


@shared_task(
    bind=True,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_backoff_max=300,
    retry_kwargs={"max_retries": MAX_SIDE_EFFECT_RETRIES},
    acks_late=True,
)
def dispatch_notification(
    self,
    party_id: str,
    template_kind: str,
    payload: dict,
) -> dict:
    """
    Hand a notification to the notification subsystem.

    Args:
        party_id: Recipient identity
        template_kind: Notification template (e.g. "payment_confirmed")
        payload: JSON-serializable template context
    """
    logger.info(
        "Dispatching notification",
        extra={"party_id": party_id, "template_kind": template_kind},
    )
    receivers = send_notification_requested(party_id, template_kind, payload)
    return {"party_id": party_id, "template_kind": template_kind, "receivers": receivers}
