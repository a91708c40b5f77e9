"""
Tests for the settlements API views.

This module tests:
- POST /api/v1/settlements/ settles an order
- GET /api/v1/settlements/transactions/{id}/ returns the stored breakdown
- Authentication is required on both
- GET /health/ reports database connectivity
"""

import uuid
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from rest_framework import status

from settlements.models import Transaction

SETTLE_URL = "/api/v1/settlements/"


def detail_url(transaction_id):
    return f"/api/v1/settlements/transactions/{transaction_id}/"


def settle_body(**overrides):
    body = {
        "booking_id": "bk_100",
        "kind": "rent-a-lover",
        "duration": "2",
        "customer_id": "cus_100",
        "talent_id": "tal_100",
        "custom_rate": 50_000,
    }
    body.update(overrides)
    return body


# =============================================================================
# POST /api/v1/settlements/
# =============================================================================


@pytest.mark.django_db
class TestSettleEndpoint:
    """Tests for POST /api/v1/settlements/."""

    def test_requires_authentication(self, api_client):
        """Unauthenticated requests should be refused."""
        response = api_client.post(SETTLE_URL, settle_body(), format="json")

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert Transaction.objects.count() == 0

    def test_creates_transaction(self, authenticated_client, configured_snapshot_provider):
        """Should return 201 with the transaction id and breakdown."""
        response = authenticated_client.post(SETTLE_URL, settle_body(), format="json")

        body = response.json()
        assert response.status_code == status.HTTP_201_CREATED
        assert body["breakdown"]["total_charged"] == 110_000
        assert body["breakdown"]["talent_earnings"] == 80_000
        assert body["breakdown"]["platform_fee"] == 10_000
        assert body["breakdown"]["talent_tier"] == "fresh"
        assert body["breakdown"]["billable_units"] == 2
        assert body["breakdown"]["billing_unit"] == "days"
        transaction = Transaction.objects.get(pk=body["transaction_id"])
        assert transaction.booking_id == "bk_100"
        assert transaction.duration_unit == "days"
        assert transaction.state == "pending"

    def test_zero_duration_is_invalid_order(
        self, authenticated_client, configured_snapshot_provider
    ):
        """Should return 400 INVALID_ORDER for a non-positive duration."""
        response = authenticated_client.post(
            SETTLE_URL, settle_body(kind="chat", duration="0", custom_rate=None), format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "INVALID_ORDER"
        assert Transaction.objects.count() == 0

    def test_unknown_kind_rejected(self, authenticated_client, configured_snapshot_provider):
        """Should reject a kind outside the catalog."""
        response = authenticated_client.post(
            SETTLE_URL, settle_body(kind="karaoke"), format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "kind" in response.json()

    def test_missing_fields_rejected(self, authenticated_client, configured_snapshot_provider):
        """Should list the missing fields."""
        response = authenticated_client.post(SETTLE_URL, {"kind": "chat"}, format="json")

        body = response.json()
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert {"booking_id", "duration", "customer_id", "talent_id"} <= set(body)


# =============================================================================
# GET /api/v1/settlements/transactions/{id}/
# =============================================================================


@pytest.mark.django_db
class TestTransactionDetailEndpoint:
    """Tests for GET /api/v1/settlements/transactions/{id}/."""

    def test_requires_authentication(self, api_client, pending_transaction):
        """Unauthenticated requests should be refused."""
        response = api_client.get(detail_url(pending_transaction.id))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_returns_transaction(self, authenticated_client, paid_transaction):
        """Should return the stored breakdown and state."""
        response = authenticated_client.get(detail_url(paid_transaction.id))

        body = response.json()
        assert response.status_code == status.HTTP_200_OK
        assert body["id"] == str(paid_transaction.id)
        assert body["state"] == "paid"
        assert body["total_charged"] == paid_transaction.total_charged
        assert body["service_amount"] == paid_transaction.service_amount
        assert body["duration_unit"] == paid_transaction.duration_unit
        assert body["billable_units"] == paid_transaction.billable_units
        assert body["paid_at"] is not None

    def test_unknown_id(self, authenticated_client):
        """Should return 404 TRANSACTION_NOT_FOUND."""
        response = authenticated_client.get(detail_url(uuid.uuid4()))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error_code"] == "TRANSACTION_NOT_FOUND"


# =============================================================================
# GET /health/
# =============================================================================


@pytest.mark.django_db
class TestHealthCheck:
    """Tests for the health check endpoint."""

    def test_healthy(self, client):
        """Should report healthy when the database answers."""
        response = client.get("/health/")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "healthy"

    def test_database_down(self, client):
        """Should return 503 when the database is unreachable."""
        with patch("core.views.connection") as mock_connection:
            mock_connection.cursor.side_effect = DatabaseError("down")
            response = client.get("/health/")

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["status"] == "unhealthy"
