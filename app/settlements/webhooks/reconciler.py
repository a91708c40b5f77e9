"""
Callback reconciler for payment gateway notifications.

Gateway callbacks arrive at least once and in any order. The reconciler
maps the gateway's status vocabulary to a target TransactionState and
asks the ledger to apply it. The ledger validates against the state it
reads under the row lock, so replays and stale events never regress a
transaction:

    paid, then a late "pending"   -> informational, stays paid
    paid, then "settlement" again -> duplicate, stays paid
    paid, then "expire"           -> ignored (illegal), stays paid

Side effects (booking confirmation, payment notifications) fire only
when this call performed the transition into PAID. They are best-effort:
a failing collaborator is logged and never undoes the payment.

Usage:
    from settlements.webhooks import CallbackReconciler

    result = CallbackReconciler().reconcile(event)
    result.outcome  # "applied", "duplicate", "ignored" or "informational"
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from settlements.collaborators import get_booking_status_sync, get_notification_dispatcher
from settlements.exceptions import UnknownTransactionError
from settlements.services import TransactionLedger
from settlements.state_machines import BookingStatus, ReconcileOutcome, TransactionState
from settlements.types import ReconcileResult

if TYPE_CHECKING:
    from settlements.models import Transaction
    from settlements.protocols import BookingStatusSync, NotificationDispatcher
    from settlements.types import CallbackEvent

logger = logging.getLogger(__name__)


# =============================================================================
# Gateway Status Vocabulary
# =============================================================================

# External status -> internal target state. Statuses not listed here
# (pending, authorize, anything unknown) are informational.
STATUS_TRANSITIONS: dict[str, str] = {
    "settlement": TransactionState.PAID,
    "deny": TransactionState.FAILED,
    "cancel": TransactionState.FAILED,
    "expire": TransactionState.FAILED,
    "failure": TransactionState.FAILED,
    "refund": TransactionState.REFUNDED,
}

# "capture" only counts as paid when the gateway accepted the fraud risk
CAPTURE_STATUS = "capture"
FRAUD_ACCEPT = "accept"

PAYMENT_CONFIRMED_TEMPLATE = "payment_confirmed"


def map_status(status: str, fraud_status: str | None = None) -> str | None:
    """
    Map a gateway status to the TransactionState it implies.

    Args:
        status: Gateway transaction status
        fraud_status: Gateway fraud flag, only consulted for "capture"

    Returns:
        Target TransactionState, or None when the status is informational
    """
    status = (status or "").strip().lower()
    if status == CAPTURE_STATUS:
        if (fraud_status or "").strip().lower() == FRAUD_ACCEPT:
            return TransactionState.PAID
        return None
    return STATUS_TRANSITIONS.get(status)


class CallbackReconciler:
    """
    Applies gateway callbacks to the transaction ledger.

    Collaborators default to the ones configured in settings and can be
    injected for tests.
    """

    def __init__(
        self,
        booking_sync: BookingStatusSync | None = None,
        notifier: NotificationDispatcher | None = None,
    ):
        self._booking_sync = booking_sync
        self._notifier = notifier

    @property
    def booking_sync(self) -> BookingStatusSync:
        if self._booking_sync is None:
            self._booking_sync = get_booking_status_sync()
        return self._booking_sync

    @property
    def notifier(self) -> NotificationDispatcher:
        if self._notifier is None:
            self._notifier = get_notification_dispatcher()
        return self._notifier

    def reconcile(self, event: CallbackEvent) -> ReconcileResult:
        """
        Apply one gateway callback.

        Args:
            event: The inbound callback

        Returns:
            ReconcileResult describing what happened

        Raises:
            UnknownTransactionError: If no transaction has the event's
                gateway reference
        """
        transaction = TransactionLedger.get_by_gateway_reference(event.gateway_reference)
        if transaction is None:
            logger.error(
                "Callback for unknown transaction",
                extra={
                    "gateway_reference": event.gateway_reference,
                    "external_status": event.status,
                },
            )
            raise UnknownTransactionError(
                f"No transaction with gateway reference '{event.gateway_reference}'",
                details={"gateway_reference": event.gateway_reference},
            )

        target_state = map_status(event.status, event.fraud_status)
        previous_state = transaction.state

        result = ReconcileResult(
            transaction_id=transaction.id,
            gateway_reference=event.gateway_reference,
            external_status=event.status,
            target_state=target_state,
            previous_state=previous_state,
            current_state=previous_state,
            outcome=ReconcileOutcome.INFORMATIONAL,
        )

        if target_state is None:
            logger.info(
                f"Informational callback: {event.status}",
                extra={
                    "transaction_id": str(transaction.id),
                    "fraud_status": event.fraud_status,
                },
            )
            return result

        if previous_state == target_state:
            result.outcome = ReconcileOutcome.DUPLICATE
            logger.info(
                f"Duplicate callback: already {target_state}",
                extra={"transaction_id": str(transaction.id)},
            )
            return result

        transition = TransactionLedger.transition(
            transaction.id,
            target_state,
            gateway_reference=event.gateway_reference,
            settled_at=event.settlement_time if target_state == TransactionState.PAID else None,
        )

        if not transition:
            # Lost a race or out of order; the ledger reports the state it saw
            current_state = (transition.details or {}).get("current_state", previous_state)
            result.current_state = current_state
            result.outcome = (
                ReconcileOutcome.DUPLICATE
                if current_state == target_state
                else ReconcileOutcome.IGNORED
            )
            logger.info(
                f"Callback not applied: {event.status} ({result.outcome})",
                extra={
                    "transaction_id": str(transaction.id),
                    "current_state": current_state,
                    "target_state": target_state,
                },
            )
            return result

        transaction = transition.data
        result.current_state = transaction.state
        result.outcome = ReconcileOutcome.APPLIED

        if transaction.state == TransactionState.PAID:
            result.side_effects_dispatched = self._dispatch_payment_confirmed(transaction)

        return result

    def _dispatch_payment_confirmed(self, transaction: Transaction) -> bool:
        """
        Confirm the booking and notify both parties.

        Each side effect is attempted independently. Returns True when
        every one was handed off without error.
        """
        dispatched = True

        try:
            self.booking_sync.sync(transaction.booking_id, BookingStatus.CONFIRMED)
        except Exception:
            dispatched = False
            logger.exception(
                "Booking status sync failed",
                extra={
                    "transaction_id": str(transaction.id),
                    "booking_id": transaction.booking_id,
                },
            )

        payload = {
            "transaction_id": str(transaction.id),
            "booking_id": transaction.booking_id,
            "service_kind": transaction.service_kind,
            "total_charged": transaction.total_charged,
            "talent_earnings": transaction.talent_earnings,
            "paid_at": transaction.paid_at.isoformat() if transaction.paid_at else None,
        }
        for party_id in (transaction.customer_id, transaction.talent_id):
            try:
                self.notifier.dispatch(party_id, PAYMENT_CONFIRMED_TEMPLATE, payload)
            except Exception:
                dispatched = False
                logger.exception(
                    "Payment notification failed",
                    extra={
                        "transaction_id": str(transaction.id),
                        "party_id": party_id,
                    },
                )

        return dispatched
