"""
Pytest fixtures for settlement tests.

Fixtures provide transactions in every lifecycle state, talent snapshots
for each tier, and mock collaborators for the reconciler.

Usage:
    def test_refund(paid_transaction):
        result = TransactionLedger.transition(paid_transaction.id, "refunded")
        assert result.success
"""

from unittest.mock import MagicMock

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from settlements.protocols import BookingStatusSync, NotificationDispatcher
from settlements.state_machines import TransactionState
from settlements.tests.factories import (
    ELITE_SNAPSHOT,
    FRESH_SNAPSHOT,
    VIP_SNAPSHOT,
    StaticSnapshotProvider,
    TransactionFactory,
    UserFactory,
)
from settlements.webhooks import CallbackReconciler


# =============================================================================
# Transaction State Fixtures
# =============================================================================


@pytest.fixture
def pending_transaction(db):
    """Create a transaction awaiting payment."""
    return TransactionFactory()


@pytest.fixture
def paid_transaction(db):
    """Create a paid transaction."""
    return TransactionFactory(paid=True)


@pytest.fixture
def failed_transaction(db):
    """Create a failed transaction."""
    return TransactionFactory(state=TransactionState.FAILED, failed_at=timezone.now())


@pytest.fixture
def refunded_transaction(db):
    """Create a refunded transaction."""
    return TransactionFactory(
        state=TransactionState.REFUNDED,
        paid_at=timezone.now(),
        refunded_at=timezone.now(),
    )


# =============================================================================
# Talent Snapshot Fixtures
# =============================================================================


@pytest.fixture
def fresh_snapshot():
    return FRESH_SNAPSHOT


@pytest.fixture
def elite_snapshot():
    return ELITE_SNAPSHOT


@pytest.fixture
def vip_snapshot():
    return VIP_SNAPSHOT


@pytest.fixture
def snapshot_provider():
    """Provider returning a Fresh snapshot for every talent."""
    return StaticSnapshotProvider()


@pytest.fixture
def configured_snapshot_provider(settings):
    """Point SETTLEMENT_TALENT_SNAPSHOT_PROVIDER at the static test provider."""
    settings.SETTLEMENT_TALENT_SNAPSHOT_PROVIDER = (
        "settlements.tests.factories.StaticSnapshotProvider"
    )


# =============================================================================
# Collaborator Fixtures
# =============================================================================


@pytest.fixture
def booking_sync():
    """Mock BookingStatusSync."""
    return MagicMock(spec=BookingStatusSync)


@pytest.fixture
def notifier():
    """Mock NotificationDispatcher."""
    return MagicMock(spec=NotificationDispatcher)


@pytest.fixture
def reconciler(booking_sync, notifier):
    """CallbackReconciler wired to mock collaborators."""
    return CallbackReconciler(booking_sync=booking_sync, notifier=notifier)


# =============================================================================
# API Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def user(db):
    """Create a test user."""
    return UserFactory()


@pytest.fixture
def authenticated_client(api_client, user):
    """API client authenticated as user."""
    api_client.force_authenticate(user=user)
    return api_client
