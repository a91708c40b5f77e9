"""
State and choice enums for settlement models.

This module defines the enums used by the settlement core. They are
Django TextChoices so they can back model fields and admin filters.

State Machine Overview:

Transaction States:
    pending → paid → refunded
    pending → failed

    Every other transition is illegal. ``failed`` and ``refunded`` are
    terminal; ``paid`` only moves to ``refunded``.

Reconcile Outcomes:
    applied        The callback moved the transaction to a new state
    duplicate      The transaction was already in the mapped state
    ignored        The mapped state is not reachable from the current one
    informational  The gateway status maps to no transition at all
"""

from django.db import models


class TransactionState(models.TextChoices):
    """
    States for the Transaction lifecycle.

    Terminal states: FAILED, REFUNDED

    State Flow:
        PENDING → PAID        (gateway settled the payment)
        PENDING → FAILED      (gateway denied, cancelled or expired it)
        PAID → REFUNDED       (gateway refunded a settled payment)
    """

    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    FAILED = "failed", "Failed"
    REFUNDED = "refunded", "Refunded"


class ServiceKind(models.TextChoices):
    """Bookable service kinds priced by the settlement core."""

    CHAT = "chat", "Chat"
    VOICE_CALL = "voice-call", "Voice Call"
    VIDEO_CALL = "video-call", "Video Call"
    OFFLINE_DATE = "offline-date", "Offline Date"
    PARTY_BUDDY = "party-buddy", "Party Buddy"
    RENT_A_LOVER = "rent-a-lover", "Rent a Lover"


class TalentTier(models.TextChoices):
    """
    Commission tier of the earning talent.

    Derived from a point-in-time snapshot of the talent's history and
    stored on each Transaction. Never stored on the talent itself.
    """

    FRESH = "fresh", "Fresh"
    ELITE = "elite", "Elite"
    VIP = "vip", "VIP"


class ReconcileOutcome(models.TextChoices):
    """Result classification for a reconciled gateway callback."""

    APPLIED = "applied", "Applied"
    DUPLICATE = "duplicate", "Duplicate"
    IGNORED = "ignored", "Ignored"
    INFORMATIONAL = "informational", "Informational"


class BookingStatus(models.TextChoices):
    """Booking statuses this core asks the booking subsystem to apply."""

    CONFIRMED = "confirmed", "Confirmed"


__all__ = [
    "TransactionState",
    "ServiceKind",
    "TalentTier",
    "ReconcileOutcome",
    "BookingStatus",
]
