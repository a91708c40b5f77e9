"""
Factory Boy factories for settlement test data.

Usage:
    from settlements.tests.factories import TransactionFactory

    # A pending transaction with a consistent breakdown
    transaction = TransactionFactory()

    # In a specific state
    transaction = TransactionFactory(state=TransactionState.PAID)

    # With a different service amount
    transaction = TransactionFactory(base_amount=285_000, surcharge_amount=57_000)
"""

from decimal import Decimal

import factory
from django.utils import timezone

from settlements.models import Transaction
from settlements.pricing import round_half_up
from settlements.state_machines import ServiceKind, TalentTier, TransactionState
from settlements.types import CallbackEvent, ServiceOrder, TalentSnapshot


class UserFactory(factory.django.DjangoModelFactory):
    """Factory for API users (django.contrib.auth)."""

    class Meta:
        model = "auth.User"
        skip_postgeneration_save = True

    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    password = factory.PostGenerationMethodCall("set_password", "testpass123")
    is_active = True


class TransactionFactory(factory.django.DjangoModelFactory):
    """
    Factory for Transaction instances.

    Breakdown fields are derived from base_amount, surcharge_amount and
    commission_rate, so the database constraints always hold.
    """

    class Meta:
        model = Transaction

    booking_id = factory.Sequence(lambda n: f"bk_{n}")
    customer_id = factory.Sequence(lambda n: f"cus_{n}")
    talent_id = factory.Sequence(lambda n: f"tal_{n}")
    service_kind = ServiceKind.VOICE_CALL
    duration = Decimal("2")
    duration_unit = "hours"
    billable_units = 2

    base_amount = 80_000
    surcharge_amount = 0
    commission_rate = Decimal("0.20")
    talent_tier = TalentTier.FRESH

    platform_fee = factory.LazyAttribute(
        lambda o: round_half_up(Decimal(o.base_amount + o.surcharge_amount) * Decimal("0.10"))
    )
    commission_amount = factory.LazyAttribute(
        lambda o: round_half_up(Decimal(o.base_amount + o.surcharge_amount) * o.commission_rate)
    )
    talent_earnings = factory.LazyAttribute(
        lambda o: o.base_amount + o.surcharge_amount - o.commission_amount
    )
    total_charged = factory.LazyAttribute(
        lambda o: o.base_amount + o.surcharge_amount + o.platform_fee
    )

    state = TransactionState.PENDING
    gateway_reference = factory.Sequence(lambda n: f"ORDER-{n}")

    class Params:
        paid = factory.Trait(
            state=TransactionState.PAID,
            paid_at=factory.LazyFunction(timezone.now),
        )


def make_order(**overrides) -> ServiceOrder:
    """Build a ServiceOrder with sensible defaults."""
    values = {
        "booking_id": "bk_1",
        "kind": ServiceKind.VOICE_CALL,
        "duration": 2,
        "customer_id": "cus_1",
        "talent_id": "tal_1",
    }
    values.update(overrides)
    return ServiceOrder(**values)


def make_event(gateway_reference: str, status: str, **overrides) -> CallbackEvent:
    """Build a CallbackEvent for a gateway reference."""
    return CallbackEvent(
        gateway_reference=gateway_reference,
        status=status,
        payload={"order_id": gateway_reference, "transaction_status": status},
        **overrides,
    )


FRESH_SNAPSHOT = TalentSnapshot(completed_orders=5, average_rating=4.9, account_age_months=1)
ELITE_SNAPSHOT = TalentSnapshot(completed_orders=30, average_rating=4.5, account_age_months=2)
VIP_SNAPSHOT = TalentSnapshot(completed_orders=100, average_rating=4.5, account_age_months=6)


class StaticSnapshotProvider:
    """TalentSnapshotProvider returning one fixed snapshot for every talent."""

    def __init__(self, snapshot: TalentSnapshot = FRESH_SNAPSHOT):
        self.snapshot = snapshot

    def get_snapshot(self, talent_id: str) -> TalentSnapshot:
        return self.snapshot
