"""
Commission classifier for earning talents.

Classifies a talent into a commission tier from a point-in-time snapshot
of their history. The tier is never stored on the talent; it is derived
at settlement time and denormalized onto the Transaction, so later
profile edits never change a past transaction's commission.

Tier Requirements (inclusive):
    VIP:   >= 100 completed orders, rating >= 4.5, account >= 6 months
    ELITE: >= 30 completed orders, rating >= 4.5
    FRESH: everyone else

Commission Rates:
    FRESH 20%, ELITE 18%, VIP 15%

Usage:
    from settlements.commission import classify, commission_rate_for

    tier = classify(completed_orders=120, average_rating=4.8, account_age_months=7)
    commission_rate_for(tier)  # Decimal("0.15")
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from settlements.state_machines import TalentTier
from settlements.types import TalentSnapshot


@dataclass(frozen=True)
class TierRequirement:
    """Minimum history for a tier, and the commission rate it earns."""

    min_orders: int
    min_rating: float
    min_account_age_months: int
    commission_rate: Decimal


TIER_REQUIREMENTS: dict[str, TierRequirement] = {
    TalentTier.FRESH: TierRequirement(0, 0.0, 0, Decimal("0.20")),
    TalentTier.ELITE: TierRequirement(30, 4.5, 0, Decimal("0.18")),
    TalentTier.VIP: TierRequirement(100, 4.5, 6, Decimal("0.15")),
}

# Highest tier first; classification takes the first tier whose
# requirements are met.
TIER_PRECEDENCE = (TalentTier.VIP, TalentTier.ELITE, TalentTier.FRESH)

NEXT_TIER: dict[str, str | None] = {
    TalentTier.FRESH: TalentTier.ELITE,
    TalentTier.ELITE: TalentTier.VIP,
    TalentTier.VIP: None,
}


def _meets(
    requirement: TierRequirement,
    completed_orders: int,
    average_rating: float,
    account_age_months: int,
) -> bool:
    return (
        account_age_months >= requirement.min_account_age_months
        and completed_orders >= requirement.min_orders
        and average_rating >= requirement.min_rating
    )


def classify(
    completed_orders: int, average_rating: float, account_age_months: int
) -> TalentTier:
    """
    Classify a talent into a commission tier.

    Pure and deterministic. VIP is checked before ELITE so a talent who
    meets every threshold is never classified as ELITE.
    """
    for tier in TIER_PRECEDENCE:
        if _meets(
            TIER_REQUIREMENTS[tier],
            completed_orders,
            average_rating,
            account_age_months,
        ):
            return tier
    return TalentTier.FRESH


def classify_snapshot(snapshot: TalentSnapshot) -> TalentTier:
    """Classify from a TalentSnapshot."""
    return classify(
        snapshot.completed_orders,
        snapshot.average_rating,
        snapshot.account_age_months,
    )


def commission_rate_for(tier: str) -> Decimal:
    """Commission rate for a tier, as a fraction of the service amount."""
    return TIER_REQUIREMENTS[tier].commission_rate


@dataclass(frozen=True)
class LevelProgress:
    """
    How far a talent is from the next tier.

    The *_to_next fields are None at the top tier and never negative.
    """

    current_tier: str
    next_tier: str | None
    commission_rate: Decimal
    orders_to_next: int | None
    rating_to_next: float | None
    months_to_next: int | None
    can_upgrade: bool


def level_progress(
    snapshot: TalentSnapshot, recorded_tier: str | None = None
) -> LevelProgress:
    """
    Report a talent's tier and the gap to the next one.

    Args:
        snapshot: Current talent history
        recorded_tier: Tier last shown to the talent, if the caller keeps
            one for display. Defaults to the tier classified from snapshot.

    can_upgrade is True when every gap to the tier above recorded_tier is
    closed, i.e. the recorded tier lags behind the history.
    """
    current = recorded_tier or classify_snapshot(snapshot)
    next_tier = NEXT_TIER[current]

    if next_tier is None:
        return LevelProgress(
            current_tier=current,
            next_tier=None,
            commission_rate=commission_rate_for(current),
            orders_to_next=None,
            rating_to_next=None,
            months_to_next=None,
            can_upgrade=False,
        )

    requirement = TIER_REQUIREMENTS[next_tier]
    orders_to_next = max(0, requirement.min_orders - snapshot.completed_orders)
    rating_to_next = max(0.0, round(requirement.min_rating - snapshot.average_rating, 2))
    months_to_next = max(
        0, requirement.min_account_age_months - snapshot.account_age_months
    )

    return LevelProgress(
        current_tier=current,
        next_tier=next_tier,
        commission_rate=commission_rate_for(current),
        orders_to_next=orders_to_next,
        rating_to_next=rating_to_next,
        months_to_next=months_to_next,
        can_upgrade=orders_to_next == 0 and rating_to_next == 0 and months_to_next == 0,
    )
