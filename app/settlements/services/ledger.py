"""
Transaction ledger: the only writer of Transaction records.

All creation and state changes of Transactions go through this service.
State changes run inside a database transaction with the row locked
(SELECT ... FOR UPDATE), so two concurrent transitions of the same
transaction serialize and the second sees the first's committed state.

Usage:
    from settlements.services import TransactionLedger

    transaction = TransactionLedger.create(order, breakdown)

    result = TransactionLedger.transition(
        transaction.id,
        TransactionState.PAID,
        gateway_reference="ref-123",
    )
    if not result:
        # ILLEGAL_TRANSITION - nothing changed
        ...
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from core.exceptions import ConflictError
from core.services import BaseService, ServiceResult

from settlements.exceptions import IllegalTransitionError, TransactionNotFoundError
from settlements.models import Transaction

if TYPE_CHECKING:
    from settlements.types import ServiceOrder, SettlementBreakdown


class TransactionLedger(BaseService):
    """
    Service owning Transaction records and their lifecycle.

    Methods:
        create: Persist a new PENDING transaction from a breakdown
        transition: Move a transaction to a new state under a row lock
        attach_gateway_reference: Record the payment gateway reference
        get: Fetch by id (raises TransactionNotFoundError)
        get_by_gateway_reference: Fetch by gateway reference (or None)
    """

    @classmethod
    def create(
        cls,
        order: ServiceOrder,
        breakdown: SettlementBreakdown,
        gateway_reference: str | None = None,
    ) -> Transaction:
        """
        Create a PENDING transaction storing the breakdown verbatim.

        A new id is allocated for every call; the ledger does not
        deduplicate by booking.

        Args:
            order: The priced order (references only)
            breakdown: Output of the settlement calculator
            gateway_reference: Optional reference, if already known

        Returns:
            The created Transaction
        """
        transaction = Transaction.objects.create(
            booking_id=order.booking_id,
            customer_id=order.customer_id,
            talent_id=order.talent_id,
            service_kind=order.kind,
            duration=order.duration,
            duration_unit=order.duration_unit or breakdown.billing_unit,
            billable_units=breakdown.billable_units,
            base_amount=breakdown.base_amount,
            surcharge_amount=breakdown.surcharge_amount,
            platform_fee=breakdown.platform_fee,
            commission_rate=breakdown.commission_rate,
            commission_amount=breakdown.commission_amount,
            talent_earnings=breakdown.talent_earnings,
            total_charged=breakdown.total_charged,
            talent_tier=breakdown.talent_tier,
            gateway_reference=gateway_reference or None,
        )

        cls.get_logger().info(
            "Transaction created",
            extra={
                "transaction_id": str(transaction.id),
                "booking_id": transaction.booking_id,
                "total_charged": transaction.total_charged,
            },
        )
        return transaction

    @classmethod
    def transition(
        cls,
        transaction_id: uuid.UUID | str,
        target_state: str,
        gateway_reference: str | None = None,
        settled_at: datetime | None = None,
    ) -> ServiceResult[Transaction]:
        """
        Move a transaction to target_state.

        Validates against the current state read under the row lock. An
        illegal move is a no-op reported as a failed result with error
        code ILLEGAL_TRANSITION; it is not raised.

        Args:
            transaction_id: Transaction to move
            target_state: Desired TransactionState
            gateway_reference: Recorded if the transaction has none yet
            settled_at: paid_at for PENDING -> PAID (default: now)

        Returns:
            ServiceResult with the updated Transaction on success

        Raises:
            TransactionNotFoundError: If no transaction has this id
        """
        logger = cls.get_logger()

        with cls.atomic():
            transaction = (
                Transaction.objects.select_for_update()
                .filter(id=transaction_id)
                .first()
            )
            if transaction is None:
                raise TransactionNotFoundError(
                    f"Transaction {transaction_id} not found",
                    details={"transaction_id": str(transaction_id)},
                )

            previous_state = transaction.state
            try:
                transaction.move_to(target_state, settled_at=settled_at)
            except IllegalTransitionError as e:
                logger.info(
                    f"Illegal transition ignored: {previous_state} -> {target_state}",
                    extra={
                        "transaction_id": str(transaction.id),
                        "current_state": previous_state,
                        "target_state": target_state,
                    },
                )
                return ServiceResult.from_error(e)

            if gateway_reference and not transaction.gateway_reference:
                transaction.gateway_reference = gateway_reference
            transaction.save()

        logger.info(
            f"Transaction {previous_state} -> {transaction.state}",
            extra={
                "transaction_id": str(transaction.id),
                "previous_state": previous_state,
                "state": transaction.state,
                "version": transaction.version,
            },
        )
        return ServiceResult.success(transaction)

    @classmethod
    def attach_gateway_reference(
        cls,
        transaction_id: uuid.UUID | str,
        gateway_reference: str,
    ) -> Transaction:
        """
        Record the payment gateway reference for a transaction.

        Attaching the same reference again is a no-op.

        Raises:
            TransactionNotFoundError: If no transaction has this id
            ConflictError: If a different reference is already attached
        """
        with cls.atomic():
            transaction = (
                Transaction.objects.select_for_update()
                .filter(id=transaction_id)
                .first()
            )
            if transaction is None:
                raise TransactionNotFoundError(
                    f"Transaction {transaction_id} not found",
                    details={"transaction_id": str(transaction_id)},
                )

            if transaction.gateway_reference == gateway_reference:
                return transaction

            if transaction.gateway_reference:
                raise ConflictError(
                    "Transaction already has a different gateway reference",
                    error_code="GATEWAY_REFERENCE_CONFLICT",
                    details={
                        "transaction_id": str(transaction.id),
                        "gateway_reference": transaction.gateway_reference,
                    },
                )

            transaction.gateway_reference = gateway_reference
            transaction.save(update_fields=["gateway_reference", "updated_at"])

        cls.get_logger().info(
            "Gateway reference attached",
            extra={
                "transaction_id": str(transaction.id),
                "gateway_reference": gateway_reference,
            },
        )
        return transaction

    @staticmethod
    def get(transaction_id: uuid.UUID | str) -> Transaction:
        """
        Get a transaction by id.

        Raises:
            TransactionNotFoundError: If it doesn't exist
        """
        try:
            return Transaction.objects.get(id=transaction_id)
        except Transaction.DoesNotExist:
            raise TransactionNotFoundError(
                f"Transaction {transaction_id} not found",
                details={"transaction_id": str(transaction_id)},
            )

    @staticmethod
    def get_by_gateway_reference(gateway_reference: str) -> Transaction | None:
        """Get a transaction by gateway reference, or None."""
        if not gateway_reference:
            return None
        return Transaction.objects.filter(gateway_reference=gateway_reference).first()
