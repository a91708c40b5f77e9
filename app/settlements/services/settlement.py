"""
Settlement service: turns an order into a priced, persisted transaction.

Flow:
    1. Fetch the talent snapshot from the configured provider
    2. Compute the breakdown (pricing table + commission classifier)
    3. Create the PENDING transaction in the ledger

Usage:
    from settlements.services import SettlementService

    result = SettlementService.settle(order)
    if result:
        receipt = result.data
        receipt.transaction_id, receipt.breakdown.total_charged
    else:
        result.error_code  # "INVALID_ORDER"
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.services import BaseService, ServiceResult

from settlements.calculator import compute
from settlements.collaborators import get_talent_snapshot_provider
from settlements.exceptions import InvalidOrderError
from settlements.services.ledger import TransactionLedger
from settlements.types import SettlementReceipt

if TYPE_CHECKING:
    from settlements.protocols import TalentSnapshotProvider
    from settlements.types import ServiceOrder


class SettlementService(BaseService):
    """Entry point for settling a service order."""

    @classmethod
    def settle(
        cls,
        order: ServiceOrder,
        snapshot_provider: TalentSnapshotProvider | None = None,
    ) -> ServiceResult[SettlementReceipt]:
        """
        Price an order and record it as a PENDING transaction.

        Args:
            order: The order to settle
            snapshot_provider: Talent history source (default: from settings)

        Returns:
            ServiceResult with a SettlementReceipt, or a failure with
            error code INVALID_ORDER when the order cannot be priced.

        Raises:
            ImproperlyConfigured: If no snapshot provider is configured
        """
        logger = cls.get_logger()
        provider = snapshot_provider or get_talent_snapshot_provider()

        try:
            snapshot = provider.get_snapshot(order.talent_id)
            breakdown = compute(order, snapshot)
        except InvalidOrderError as e:
            logger.info(
                f"Order rejected: {e.message}",
                extra={
                    "booking_id": order.booking_id,
                    "kind": order.kind,
                    "error_code": e.error_code,
                },
            )
            return ServiceResult.from_error(e)

        with cls.atomic():
            transaction = TransactionLedger.create(order, breakdown)

        logger.info(
            "Order settled",
            extra={
                "booking_id": order.booking_id,
                "transaction_id": str(transaction.id),
                "talent_tier": breakdown.talent_tier,
                "total_charged": breakdown.total_charged,
            },
        )
        return ServiceResult.success(
            SettlementReceipt(transaction_id=transaction.id, breakdown=breakdown)
        )
