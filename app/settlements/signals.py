"""
Django signals emitted by the settlements app.

The booking and notification subsystems are not part of this core. They
subscribe to these signals to receive the side effects of settled
payments. The signals are sent from Celery tasks (see settlements.tasks),
after the transaction that caused them has committed.

Signals:
    booking_status_changed: kwargs booking_id, new_status
    notification_requested: kwargs party_id, template_kind, payload

Usage:
    from django.dispatch import receiver
    from settlements.signals import booking_status_changed

    @receiver(booking_status_changed)
    def on_booking_status_changed(sender, booking_id, new_status, **kwargs):
        Booking.objects.filter(id=booking_id).update(status=new_status)
"""

from __future__ import annotations

import logging

from django.dispatch import Signal

logger = logging.getLogger(__name__)


booking_status_changed = Signal()

notification_requested = Signal()


def send_booking_status_changed(booking_id: str, new_status: str) -> int:
    """
    Send booking_status_changed to every receiver.

    Receiver errors propagate so the calling task can retry.

    Returns:
        Number of receivers that handled the signal
    """
    responses = booking_status_changed.send(
        sender="settlements",
        booking_id=booking_id,
        new_status=new_status,
    )
    if not responses:
        logger.warning(
            "No receiver for booking_status_changed",
            extra={"booking_id": booking_id, "new_status": new_status},
        )
    return len(responses)


def send_notification_requested(party_id: str, template_kind: str, payload: dict) -> int:
    """Send notification_requested to every receiver."""
    responses = notification_requested.send(
        sender="settlements",
        party_id=party_id,
        template_kind=template_kind,
        payload=payload,
    )
    if not responses:
        logger.warning(
            "No receiver for notification_requested",
            extra={"party_id": party_id, "template_kind": template_kind},
        )
    return len(responses)
