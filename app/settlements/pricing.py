"""
Pricing table for bookable services.

Maps each service kind to its canonical unit price and surcharge rules,
and turns a (kind, duration) pair into a base amount plus surcharge.

Pricing Rules:
    - Every kind has a unit price and a canonical unit (day, hour, event).
    - Partial units are billed as whole units (durations round up).
      Durations carry at most two decimal places.
    - Block-based kinds (offline-date) bill a fixed price for the first
      block and a per-unit rate for every unit past the block boundary.
      A duration below the block floor is billed as one full block.
    - In-person kinds (offline-date, party-buddy) add a transport
      surcharge of 20% of base + extra, rounded half up.
    - Only rent-a-lover accepts a talent-supplied custom unit price.

Prices (IDR):
    chat            25,000 / day
    voice-call      40,000 / hour
    video-call      65,000 / hour
    offline-date   285,000 / 3-hour block, +90,000 / extra hour
    party-buddy  1,000,000 / event
    rent-a-lover    85,000 / day (or the talent's custom rate)

Usage:
    from settlements.pricing import quote

    price = quote("offline-date", 4)
    price.base       # 375000
    price.surcharge  # 75000
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import TYPE_CHECKING

from settlements.exceptions import InvalidOrderError
from settlements.state_machines import ServiceKind
from settlements.types import PriceQuote

if TYPE_CHECKING:
    from settlements.types import ServiceOrder


TRANSPORT_SURCHARGE_RATE = Decimal("0.20")

# Durations are stored with two decimal places
DURATION_QUANTUM = Decimal("0.01")


def round_half_up(value: Decimal) -> int:
    """Round to the nearest whole currency unit, halves away from zero."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class ServicePrice:
    """
    Pricing rule for one service kind.

    Attributes:
        unit_price: Price of one canonical unit, or of the first block
        unit: Canonical unit name ("days", "hours", "events")
        block_units: Canonical units covered by unit_price (1 = no block)
        extra_unit_price: Price of each unit past the block boundary
        in_person: Whether the transport surcharge applies
        accepts_custom_rate: Whether the talent may override unit_price
        unit_multipliers: Accepted duration units -> canonical units
    """

    unit_price: int
    unit: str
    block_units: int = 1
    extra_unit_price: int | None = None
    in_person: bool = False
    accepts_custom_rate: bool = False
    unit_multipliers: dict[str, int] = field(default_factory=dict)

    @property
    def is_block_priced(self) -> bool:
        return self.block_units > 1


PRICING_TABLE: dict[str, ServicePrice] = {
    ServiceKind.CHAT: ServicePrice(
        unit_price=25_000,
        unit="days",
        unit_multipliers={"days": 1},
    ),
    ServiceKind.VOICE_CALL: ServicePrice(
        unit_price=40_000,
        unit="hours",
        unit_multipliers={"hours": 1},
    ),
    ServiceKind.VIDEO_CALL: ServicePrice(
        unit_price=65_000,
        unit="hours",
        unit_multipliers={"hours": 1},
    ),
    ServiceKind.OFFLINE_DATE: ServicePrice(
        unit_price=285_000,
        unit="hours",
        block_units=3,
        extra_unit_price=90_000,
        in_person=True,
        unit_multipliers={"hours": 1},
    ),
    ServiceKind.PARTY_BUDDY: ServicePrice(
        unit_price=1_000_000,
        unit="events",
        in_person=True,
        unit_multipliers={"events": 1},
    ),
    ServiceKind.RENT_A_LOVER: ServicePrice(
        unit_price=85_000,
        unit="days",
        accepts_custom_rate=True,
        unit_multipliers={"days": 1, "weeks": 7, "months": 30},
    ),
}


def get_service_price(kind: str) -> ServicePrice:
    """
    Look up the pricing rule for a service kind.

    Raises:
        InvalidOrderError: If the kind is not in the pricing table
    """
    price = PRICING_TABLE.get(kind)
    if price is None:
        raise InvalidOrderError(
            f"Unrecognized service kind: {kind!r}",
            details={"kind": kind, "supported": sorted(PRICING_TABLE)},
        )
    return price


def _to_decimal(value, field_name: str) -> Decimal:
    if isinstance(value, bool):
        raise InvalidOrderError(
            f"{field_name} must be numeric", details={field_name: value}
        )
    try:
        number = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidOrderError(
            f"{field_name} must be numeric", details={field_name: str(value)}
        )
    if not number.is_finite():
        raise InvalidOrderError(
            f"{field_name} must be finite", details={field_name: str(value)}
        )
    return number


def _billable_units(
    kind: str, price: ServicePrice, duration, duration_unit: str | None
) -> int:
    amount = _to_decimal(duration, "duration")
    if amount <= 0:
        raise InvalidOrderError(
            "Duration must be positive",
            details={"kind": kind, "duration": str(duration)},
        )
    try:
        fits_quantum = amount == amount.quantize(DURATION_QUANTUM)
    except InvalidOperation:
        fits_quantum = False
    if not fits_quantum:
        raise InvalidOrderError(
            "Duration allows at most two decimal places",
            details={"kind": kind, "duration": str(duration)},
        )

    unit = duration_unit or price.unit
    multiplier = price.unit_multipliers.get(unit)
    if multiplier is None:
        raise InvalidOrderError(
            f"Unsupported duration unit {unit!r} for {kind}",
            details={"kind": kind, "unit": unit, "supported": list(price.unit_multipliers)},
        )

    return math.ceil(amount * multiplier)


def _unit_price(kind: str, price: ServicePrice, custom_rate) -> int:
    if custom_rate is None:
        return price.unit_price

    if not price.accepts_custom_rate:
        raise InvalidOrderError(
            f"Custom rates are not supported for {kind}",
            details={"kind": kind, "custom_rate": str(custom_rate)},
        )

    rate = _to_decimal(custom_rate, "custom_rate")
    if rate <= 0 or rate != rate.to_integral_value():
        raise InvalidOrderError(
            "Custom rate must be a positive whole amount",
            details={"kind": kind, "custom_rate": str(custom_rate)},
        )
    return int(rate)


def quote(
    kind: str,
    duration,
    custom_rate=None,
    duration_unit: str | None = None,
) -> PriceQuote:
    """
    Price a service kind for a duration.

    Args:
        kind: Service kind value (see ServiceKind)
        duration: Requested duration, in duration_unit or the kind's unit
        custom_rate: Talent-supplied unit price (rent-a-lover only)
        duration_unit: Optional unit override

    Returns:
        PriceQuote with base, surcharge and billable units

    Raises:
        InvalidOrderError: On an unknown kind, a non-positive duration, a
            duration with more than two decimal places, an unsupported
            unit, or a custom rate the kind does not accept
    """
    price = get_service_price(kind)
    unit_price = _unit_price(kind, price, custom_rate)
    units = _billable_units(kind, price, duration, duration_unit)

    if price.is_block_priced:
        extra_units = max(0, units - price.block_units)
        base = unit_price + extra_units * price.extra_unit_price
    else:
        base = unit_price * units

    surcharge = 0
    if price.in_person:
        surcharge = round_half_up(Decimal(base) * TRANSPORT_SURCHARGE_RATE)

    return PriceQuote(base=base, surcharge=surcharge, units=units, unit=price.unit)


def quote_order(order: ServiceOrder) -> PriceQuote:
    """Price a ServiceOrder. See quote() for rules and errors."""
    return quote(
        order.kind,
        order.duration,
        custom_rate=order.custom_rate,
        duration_unit=order.duration_unit,
    )
