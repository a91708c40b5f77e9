"""
Data types for settlement operations.

This module defines the dataclasses passed between the pricing table,
commission classifier, settlement calculator, ledger and reconciler.
All monetary amounts are whole currency units (IDR has no minor unit
in practice), stored as ints.

Types:
    ServiceOrder: The order being priced (immutable)
    TalentSnapshot: Point-in-time talent history used for classification
    PriceQuote: Pricing table output
    SettlementBreakdown: Full three-way financial split
    SettlementReceipt: Result of settling an order
    CallbackEvent: Inbound gateway notification (untrusted)
    ReconcileResult: Outcome of applying a callback

Usage:
    from settlements.types import ServiceOrder, TalentSnapshot

    order = ServiceOrder(
        booking_id="bk_123",
        kind="offline-date",
        duration=4,
        customer_id="cus_1",
        talent_id="tal_1",
    )
    snapshot = TalentSnapshot(
        completed_orders=42, average_rating=4.7, account_age_months=3
    )
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from django.utils import timezone

# Months are counted in whole 30-day periods
DAYS_PER_MONTH = 30


@dataclass(frozen=True)
class ServiceOrder:
    """
    A service order to be priced.

    Attributes:
        booking_id: Booking this order belongs to (booking-status sync target)
        kind: Service kind value (see ServiceKind)
        duration: Requested duration in the kind's unit
        customer_id: Paying customer identity
        talent_id: Earning talent identity
        custom_rate: Talent-supplied unit price (rent-a-lover only)
        duration_unit: Optional unit override (e.g. "weeks" for rent-a-lover)
    """

    booking_id: str
    kind: str
    duration: Decimal | int
    customer_id: str
    talent_id: str
    custom_rate: int | None = None
    duration_unit: str | None = None


@dataclass(frozen=True)
class TalentSnapshot:
    """
    Read-only snapshot of the talent history relevant to commission.

    Attributes:
        completed_orders: Cumulative completed-order count
        average_rating: Average rating, 0 to 5
        account_age_months: Whole months since the account was created
    """

    completed_orders: int
    average_rating: float
    account_age_months: int

    @classmethod
    def from_account(
        cls,
        completed_orders: int,
        average_rating: float,
        account_created_at: datetime,
        now: datetime | None = None,
    ) -> TalentSnapshot:
        """
        Build a snapshot from raw account data.

        Account age is the number of whole 30-day periods between
        ``account_created_at`` and ``now``.
        """
        now = now or timezone.now()
        # A creation time in the future counts as a brand-new account
        elapsed_days = max(0.0, (now - account_created_at).total_seconds()) / 86400
        return cls(
            completed_orders=completed_orders,
            average_rating=average_rating,
            account_age_months=int(elapsed_days // DAYS_PER_MONTH),
        )


@dataclass(frozen=True)
class PriceQuote:
    """
    Pricing table output for one order.

    Attributes:
        base: Base service amount (block + extra units, or unit price x units)
        surcharge: Transport surcharge (in-person services only)
        units: Whole billable units after rounding up
        unit: Canonical unit the billable units are counted in
    """

    base: int
    surcharge: int
    units: int
    unit: str

    @property
    def service_amount(self) -> int:
        """Base plus surcharge, before platform fee."""
        return self.base + self.surcharge


@dataclass(frozen=True)
class SettlementBreakdown:
    """
    Three-way financial split of a priced order.

    Invariants:
        total_charged == base_amount + surcharge_amount + platform_fee
        talent_earnings == base_amount + surcharge_amount - commission_amount

    billable_units and billing_unit record what was billed, so the base
    amount can be traced back to the order.
    """

    base_amount: int
    surcharge_amount: int
    platform_fee: int
    commission_rate: Decimal
    commission_amount: int
    talent_earnings: int
    total_charged: int
    talent_tier: str
    billable_units: int
    billing_unit: str

    @property
    def service_amount(self) -> int:
        """Base plus surcharge, the basis for both fee and commission."""
        return self.base_amount + self.surcharge_amount

    @property
    def platform_revenue(self) -> int:
        """Platform fee plus commission, everything the platform keeps."""
        return self.platform_fee + self.commission_amount

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses and notification payloads."""
        return {
            "base_amount": self.base_amount,
            "surcharge_amount": self.surcharge_amount,
            "service_amount": self.service_amount,
            "platform_fee": self.platform_fee,
            "commission_rate": str(self.commission_rate),
            "commission_amount": self.commission_amount,
            "talent_earnings": self.talent_earnings,
            "total_charged": self.total_charged,
            "talent_tier": self.talent_tier,
            "billable_units": self.billable_units,
            "billing_unit": self.billing_unit,
        }


@dataclass(frozen=True)
class SettlementReceipt:
    """Result of settling an order: the new transaction id and its breakdown."""

    transaction_id: uuid.UUID
    breakdown: SettlementBreakdown


@dataclass(frozen=True)
class CallbackEvent:
    """
    Inbound, untrusted notification from the payment gateway.

    Attributes:
        gateway_reference: External transaction reference
        status: External status code (gateway vocabulary)
        fraud_status: External fraud/risk flag, if any
        payload: Raw payload as received
        received_at: When the notification arrived
        settlement_time: Settlement time reported by the gateway, if any
    """

    gateway_reference: str
    status: str
    fraud_status: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)
    received_at: datetime = field(default_factory=timezone.now)
    settlement_time: datetime | None = None


@dataclass
class ReconcileResult:
    """
    Outcome of reconciling one callback against the ledger.

    Attributes:
        transaction_id: The matched transaction
        gateway_reference: Reference carried by the event
        external_status: Status as reported by the gateway
        target_state: Internal state the status maps to (None if informational)
        previous_state: Transaction state before reconciliation
        current_state: Transaction state after reconciliation
        outcome: ReconcileOutcome value
        side_effects_dispatched: Whether booking sync/notifications were sent
    """

    transaction_id: uuid.UUID
    gateway_reference: str
    external_status: str
    target_state: str | None
    previous_state: str
    current_state: str
    outcome: str
    side_effects_dispatched: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the webhook acknowledgment body."""
        return {
            "transaction_id": str(self.transaction_id),
            "gateway_reference": self.gateway_reference,
            "external_status": self.external_status,
            "target_state": self.target_state,
            "previous_state": self.previous_state,
            "current_state": self.current_state,
            "outcome": self.outcome,
            "side_effects_dispatched": self.side_effects_dispatched,
        }
