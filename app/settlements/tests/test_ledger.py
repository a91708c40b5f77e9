"""
Tests for TransactionLedger.

Tests cover:
- Creating transactions from a breakdown
- Legal and illegal transitions (ServiceResult, not exceptions)
- Gateway reference attachment
- Read accessors
- Row locking of state changes
"""

import threading
import uuid
from datetime import timedelta
from decimal import Decimal

import pytest
from django.db import connection, connections
from django.db.models.query import QuerySet
from django.utils import timezone

from core.exceptions import ConflictError
from settlements.calculator import compute
from settlements.exceptions import TransactionNotFoundError
from settlements.models import Transaction
from settlements.services import TransactionLedger
from settlements.state_machines import ReconcileOutcome, ServiceKind, TransactionState
from settlements.tests.factories import TransactionFactory, make_event, make_order
from settlements.webhooks import CallbackReconciler


class TestCreate:
    """Tests for TransactionLedger.create()."""

    def test_stores_breakdown_verbatim(self, db, elite_snapshot):
        """Should copy every breakdown field onto the transaction."""
        order = make_order(kind=ServiceKind.OFFLINE_DATE, duration=5, booking_id="bk_9")
        breakdown = compute(order, elite_snapshot)

        transaction = TransactionLedger.create(order, breakdown)
        stored = Transaction.objects.get(pk=transaction.pk)

        assert stored.state == TransactionState.PENDING
        assert stored.paid_at is None
        assert stored.booking_id == "bk_9"
        assert stored.service_kind == ServiceKind.OFFLINE_DATE
        assert stored.duration == Decimal("5")
        assert stored.base_amount == breakdown.base_amount
        assert stored.surcharge_amount == breakdown.surcharge_amount
        assert stored.platform_fee == breakdown.platform_fee
        assert stored.commission_rate == breakdown.commission_rate
        assert stored.commission_amount == breakdown.commission_amount
        assert stored.talent_earnings == breakdown.talent_earnings
        assert stored.total_charged == breakdown.total_charged
        assert stored.talent_tier == breakdown.talent_tier

    def test_new_id_per_call(self, db, fresh_snapshot):
        """Should allocate a new transaction for every create, same order or not."""
        order = make_order()
        breakdown = compute(order, fresh_snapshot)

        first = TransactionLedger.create(order, breakdown)
        second = TransactionLedger.create(order, breakdown)

        assert first.id != second.id
        assert isinstance(first.id, uuid.UUID)

    def test_gateway_reference_optional(self, db, fresh_snapshot):
        """Should leave the gateway reference empty until attached."""
        order = make_order()

        transaction = TransactionLedger.create(order, compute(order, fresh_snapshot))

        assert transaction.gateway_reference is None

    def test_stores_duration_unit_and_billable_units(self, db, fresh_snapshot):
        """Should keep enough of the order to trace the base back to it."""
        order = make_order(kind=ServiceKind.RENT_A_LOVER, duration=2, duration_unit="weeks")

        transaction = TransactionLedger.create(order, compute(order, fresh_snapshot))
        stored = Transaction.objects.get(pk=transaction.pk)

        assert stored.duration == Decimal("2")
        assert stored.duration_unit == "weeks"
        assert stored.billable_units == 14
        assert stored.base_amount == 14 * 85_000 == 1_190_000

    def test_defaults_duration_unit_to_canonical_unit(self, db, fresh_snapshot):
        """Should record the kind's own unit when the order names none."""
        order = make_order(kind=ServiceKind.VOICE_CALL, duration=Decimal("1.5"))

        transaction = TransactionLedger.create(order, compute(order, fresh_snapshot))
        stored = Transaction.objects.get(pk=transaction.pk)

        assert stored.duration_unit == "hours"
        assert stored.billable_units == 2
        assert stored.base_amount == 2 * 40_000


class TestTransition:
    """Tests for TransactionLedger.transition()."""

    def test_pending_to_paid(self, db, pending_transaction):
        """Should mark paid and set paid_at."""
        result = TransactionLedger.transition(pending_transaction.id, TransactionState.PAID)

        assert result.success
        assert result.data.state == TransactionState.PAID
        assert result.data.paid_at is not None

    def test_paid_at_uses_settled_at(self, db, pending_transaction):
        """Should use the provided settlement time."""
        settled_at = timezone.now() - timedelta(hours=1)

        result = TransactionLedger.transition(
            pending_transaction.id, TransactionState.PAID, settled_at=settled_at
        )

        stored = Transaction.objects.get(pk=pending_transaction.pk)
        assert result.success
        assert stored.paid_at == settled_at

    def test_pending_to_failed(self, db, pending_transaction):
        """Should mark failed."""
        result = TransactionLedger.transition(pending_transaction.id, TransactionState.FAILED)

        assert result.success
        assert Transaction.objects.get(pk=pending_transaction.pk).state == TransactionState.FAILED

    def test_paid_to_refunded(self, db, paid_transaction):
        """Should mark refunded."""
        result = TransactionLedger.transition(paid_transaction.id, TransactionState.REFUNDED)

        assert result.success
        assert result.data.refunded_at is not None

    def test_increments_version_and_updated_at(self, db, pending_transaction):
        """Should bump version and updated_at on every transition."""
        before = Transaction.objects.get(pk=pending_transaction.pk)

        TransactionLedger.transition(pending_transaction.id, TransactionState.PAID)

        after = Transaction.objects.get(pk=pending_transaction.pk)
        assert after.version == before.version + 1
        assert after.updated_at >= before.updated_at

    @pytest.mark.parametrize(
        "fixture_name,target",
        [
            ("paid_transaction", TransactionState.PENDING),
            ("failed_transaction", TransactionState.PAID),
            ("refunded_transaction", TransactionState.PAID),
            ("refunded_transaction", TransactionState.FAILED),
            ("pending_transaction", TransactionState.REFUNDED),
        ],
    )
    def test_illegal_transition_is_a_failed_result(self, db, request, fixture_name, target):
        """Should report ILLEGAL_TRANSITION without raising or changing state."""
        transaction = request.getfixturevalue(fixture_name)
        before = Transaction.objects.get(pk=transaction.pk)

        result = TransactionLedger.transition(transaction.id, target)

        after = Transaction.objects.get(pk=transaction.pk)
        assert not result
        assert result.error_code == "ILLEGAL_TRANSITION"
        assert result.details["current_state"] == before.state
        assert after.state == before.state
        assert after.version == before.version

    def test_same_state_is_illegal(self, db, paid_transaction):
        """Should report a transition to the current state as illegal."""
        result = TransactionLedger.transition(paid_transaction.id, TransactionState.PAID)

        assert result.error_code == "ILLEGAL_TRANSITION"

    def test_records_missing_gateway_reference(self, db):
        """Should record the gateway reference when none is set."""
        transaction = TransactionFactory(gateway_reference=None)

        TransactionLedger.transition(transaction.id, TransactionState.PAID, "ref-late")

        assert Transaction.objects.get(pk=transaction.pk).gateway_reference == "ref-late"

    def test_keeps_existing_gateway_reference(self, db, pending_transaction):
        """Should not overwrite an existing gateway reference."""
        original = pending_transaction.gateway_reference

        TransactionLedger.transition(pending_transaction.id, TransactionState.PAID, "other")

        assert Transaction.objects.get(pk=pending_transaction.pk).gateway_reference == original

    def test_unknown_transaction_raises(self, db):
        """Should raise TransactionNotFoundError for an unknown id."""
        with pytest.raises(TransactionNotFoundError):
            TransactionLedger.transition(uuid.uuid4(), TransactionState.PAID)


class TestAttachGatewayReference:
    """Tests for TransactionLedger.attach_gateway_reference()."""

    def test_attaches_reference(self, db):
        """Should store the reference on a transaction without one."""
        transaction = TransactionFactory(gateway_reference=None)

        updated = TransactionLedger.attach_gateway_reference(transaction.id, "ORDER-X")

        assert updated.gateway_reference == "ORDER-X"
        assert TransactionLedger.get_by_gateway_reference("ORDER-X").id == transaction.id

    def test_same_reference_is_noop(self, db, pending_transaction):
        """Should accept re-attaching the same reference."""
        ref = pending_transaction.gateway_reference

        updated = TransactionLedger.attach_gateway_reference(pending_transaction.id, ref)

        assert updated.gateway_reference == ref

    def test_different_reference_conflicts(self, db, pending_transaction):
        """Should refuse to overwrite a different reference."""
        with pytest.raises(ConflictError) as exc_info:
            TransactionLedger.attach_gateway_reference(pending_transaction.id, "ORDER-NEW")

        assert exc_info.value.error_code == "GATEWAY_REFERENCE_CONFLICT"

    def test_unknown_transaction(self, db):
        """Should raise TransactionNotFoundError for an unknown id."""
        with pytest.raises(TransactionNotFoundError):
            TransactionLedger.attach_gateway_reference(uuid.uuid4(), "ORDER-X")


class TestReadAccessors:
    """Tests for get() and get_by_gateway_reference()."""

    def test_get(self, db, pending_transaction):
        """Should fetch by id."""
        assert TransactionLedger.get(pending_transaction.id).pk == pending_transaction.pk

    def test_get_missing(self, db):
        """Should raise TransactionNotFoundError with the id in details."""
        missing = uuid.uuid4()

        with pytest.raises(TransactionNotFoundError) as exc_info:
            TransactionLedger.get(missing)

        assert exc_info.value.details["transaction_id"] == str(missing)
        assert exc_info.value.error_code == "TRANSACTION_NOT_FOUND"

    def test_get_by_gateway_reference_missing(self, db):
        """Should return None for an unknown reference."""
        assert TransactionLedger.get_by_gateway_reference("nope") is None
        assert TransactionLedger.get_by_gateway_reference("") is None


@pytest.fixture
def locked_querysets():
    """Record every select_for_update() call and whether it ran in a transaction."""
    calls = []
    original = QuerySet.select_for_update

    def select_for_update(self, *args, **kwargs):
        calls.append((self.model, connection.in_atomic_block))
        return original(self, *args, **kwargs)

    with pytest.MonkeyPatch.context() as mp:
        mp.setattr(QuerySet, "select_for_update", select_for_update)
        yield calls


class TestRowLocking:
    """State changes lock the transaction row inside a database transaction."""

    def test_transition_uses_select_for_update(self, transactional_db, locked_querysets):
        """Should lock the row inside an atomic block before moving it."""
        transaction = TransactionFactory()

        result = TransactionLedger.transition(transaction.id, TransactionState.PAID)

        assert result.success
        assert locked_querysets == [(Transaction, True)]

    def test_illegal_transition_still_locks(self, transactional_db, locked_querysets):
        """Should validate against the state read under the lock."""
        transaction = TransactionFactory(state=TransactionState.FAILED)

        result = TransactionLedger.transition(transaction.id, TransactionState.PAID)

        assert not result
        assert locked_querysets == [(Transaction, True)]

    def test_attach_gateway_reference_uses_select_for_update(
        self, transactional_db, locked_querysets
    ):
        """Should lock the row inside an atomic block before attaching."""
        transaction = TransactionFactory(gateway_reference=None)

        TransactionLedger.attach_gateway_reference(transaction.id, "ORDER-LOCK")

        assert locked_querysets == [(Transaction, True)]
        assert Transaction.objects.get(pk=transaction.pk).gateway_reference == "ORDER-LOCK"

    def test_reads_do_not_lock(self, transactional_db, locked_querysets):
        """Should read without locking."""
        transaction = TransactionFactory()

        TransactionLedger.get(transaction.id)
        TransactionLedger.get_by_gateway_reference(transaction.gateway_reference)

        assert locked_querysets == []


@pytest.mark.skipif(
    connection.vendor != "postgresql",
    reason="Row locks need PostgreSQL (set DATABASE_URL)",
)
class TestConcurrentTransitions:
    """Concurrent callbacks for one transaction serialize on the row lock."""

    def run_concurrently(self, target, count=2):
        barrier = threading.Barrier(count)
        results = []

        def worker():
            try:
                barrier.wait()
                results.append(target())
            finally:
                connections.close_all()

        threads = [threading.Thread(target=worker) for _ in range(count)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        return results

    def test_one_transition_wins(self, transactional_db):
        """Should apply PENDING -> PAID once; the other caller sees PAID."""
        transaction = TransactionFactory()

        results = self.run_concurrently(
            lambda: TransactionLedger.transition(transaction.id, TransactionState.PAID)
        )

        assert sorted(r.success for r in results) == [False, True]
        loser = next(r for r in results if not r.success)
        assert loser.details["current_state"] == TransactionState.PAID
        assert Transaction.objects.get(pk=transaction.pk).version == 2

    def test_side_effects_fire_once(self, transactional_db, booking_sync, notifier):
        """Should confirm the booking once when the same callback races itself."""
        transaction = TransactionFactory()
        event = make_event(transaction.gateway_reference, "settlement")

        outcomes = self.run_concurrently(
            lambda: CallbackReconciler(booking_sync=booking_sync, notifier=notifier)
            .reconcile(event)
            .outcome
        )

        assert sorted(outcomes) == [ReconcileOutcome.APPLIED, ReconcileOutcome.DUPLICATE]
        booking_sync.sync.assert_called_once()
        assert notifier.dispatch.call_count == 2
