"""
Settlement calculator.

Combines the pricing table and the commission classifier into the
three-way financial split of an order.

Calculation:
    service_amount  = base + surcharge
    commission      = round(service_amount * commission_rate)
    talent_earnings = service_amount - commission
    platform_fee    = round(service_amount * platform_fee_rate)
    total_charged   = service_amount + platform_fee

Both the platform fee and the commission are taken from the service
amount, never from the customer total, so neither compounds on the
other. Each rounded field is rounded half up on its own; the remaining
fields are derived by subtraction/addition so the breakdown always
reconciles exactly.

Usage:
    from settlements.calculator import compute

    breakdown = compute(order, snapshot)
    breakdown.total_charged
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from django.conf import settings

from settlements.commission import classify_snapshot, commission_rate_for
from settlements.pricing import quote_order, round_half_up
from settlements.types import SettlementBreakdown

if TYPE_CHECKING:
    from settlements.types import ServiceOrder, TalentSnapshot

logger = logging.getLogger(__name__)


DEFAULT_PLATFORM_FEE_PERCENT = 10


def platform_fee_rate() -> Decimal:
    """Platform fee rate from SETTLEMENT_PLATFORM_FEE_PERCENT (default 10%)."""
    percent = getattr(
        settings, "SETTLEMENT_PLATFORM_FEE_PERCENT", DEFAULT_PLATFORM_FEE_PERCENT
    )
    return Decimal(percent) / Decimal(100)


def compute(
    order: ServiceOrder,
    talent_snapshot: TalentSnapshot,
    fee_rate: Decimal | None = None,
) -> SettlementBreakdown:
    """
    Compute the financial breakdown for an order.

    Args:
        order: The service order to settle
        talent_snapshot: Point-in-time history of the earning talent
        fee_rate: Platform fee rate override (defaults to settings)

    Returns:
        SettlementBreakdown with every field populated

    Raises:
        InvalidOrderError: Propagated unchanged from the pricing table
    """
    price = quote_order(order)
    service_amount = price.service_amount

    tier = classify_snapshot(talent_snapshot)
    commission_rate = commission_rate_for(tier)
    commission = round_half_up(Decimal(service_amount) * commission_rate)

    rate = platform_fee_rate() if fee_rate is None else fee_rate
    platform_fee = round_half_up(Decimal(service_amount) * rate)

    breakdown = SettlementBreakdown(
        base_amount=price.base,
        surcharge_amount=price.surcharge,
        platform_fee=platform_fee,
        commission_rate=commission_rate,
        commission_amount=commission,
        talent_earnings=service_amount - commission,
        total_charged=service_amount + platform_fee,
        talent_tier=str(tier),
        billable_units=price.units,
        billing_unit=price.unit,
    )

    logger.debug(
        "Computed settlement breakdown",
        extra={
            "booking_id": order.booking_id,
            "kind": order.kind,
            "talent_tier": breakdown.talent_tier,
            "total_charged": breakdown.total_charged,
        },
    )

    return breakdown
