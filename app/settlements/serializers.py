"""
DRF serializers for the settlements app.

This module provides serializers for:
- Settle requests (ServiceOrder input)
- Settlement breakdown / receipt output
- Transaction detail output
- Gateway callback payloads

Usage:
    serializer = SettleRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    order = serializer.to_order()
"""

from __future__ import annotations

from rest_framework import serializers

from settlements.models import Transaction
from settlements.state_machines import ServiceKind
from settlements.types import CallbackEvent, ServiceOrder


class SettleRequestSerializer(serializers.Serializer):
    """
    Input for settling an order.

    Pricing rules (positive duration, custom rate only for rent-a-lover,
    supported duration units) are enforced by the pricing table, not here,
    so every caller gets the same INVALID_ORDER error.
    """

    booking_id = serializers.CharField(max_length=64)
    kind = serializers.ChoiceField(choices=ServiceKind.choices)
    duration = serializers.DecimalField(max_digits=10, decimal_places=2)
    customer_id = serializers.CharField(max_length=64)
    talent_id = serializers.CharField(max_length=64)
    custom_rate = serializers.IntegerField(required=False, allow_null=True)
    duration_unit = serializers.CharField(
        max_length=10,
        required=False,
        allow_null=True,
        help_text="days, weeks or months (rent-a-lover only)",
    )

    def to_order(self) -> ServiceOrder:
        """Build the immutable ServiceOrder from validated data."""
        data = self.validated_data
        return ServiceOrder(
            booking_id=data["booking_id"],
            kind=data["kind"],
            duration=data["duration"],
            customer_id=data["customer_id"],
            talent_id=data["talent_id"],
            custom_rate=data.get("custom_rate"),
            duration_unit=data.get("duration_unit"),
        )


class SettlementBreakdownSerializer(serializers.Serializer):
    """Read-only view of a SettlementBreakdown."""

    base_amount = serializers.IntegerField(read_only=True)
    surcharge_amount = serializers.IntegerField(read_only=True)
    service_amount = serializers.IntegerField(read_only=True)
    platform_fee = serializers.IntegerField(read_only=True)
    commission_rate = serializers.DecimalField(
        max_digits=5, decimal_places=4, read_only=True
    )
    commission_amount = serializers.IntegerField(read_only=True)
    talent_earnings = serializers.IntegerField(read_only=True)
    total_charged = serializers.IntegerField(read_only=True)
    talent_tier = serializers.CharField(read_only=True)
    billable_units = serializers.IntegerField(read_only=True)
    billing_unit = serializers.CharField(read_only=True)


class SettlementReceiptSerializer(serializers.Serializer):
    """Response body of a successful settle request."""

    transaction_id = serializers.UUIDField(read_only=True)
    breakdown = SettlementBreakdownSerializer(read_only=True)


class TransactionSerializer(serializers.ModelSerializer):
    """
    Transaction detail for API responses.

    Read-only: transactions only change through the ledger.
    """

    service_amount = serializers.IntegerField(read_only=True)

    class Meta:
        model = Transaction
        fields = [
            "id",
            "booking_id",
            "customer_id",
            "talent_id",
            "service_kind",
            "duration",
            "duration_unit",
            "billable_units",
            "base_amount",
            "surcharge_amount",
            "service_amount",
            "platform_fee",
            "commission_rate",
            "commission_amount",
            "talent_earnings",
            "total_charged",
            "talent_tier",
            "state",
            "gateway_reference",
            "paid_at",
            "failed_at",
            "refunded_at",
            "version",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class GatewayCallbackSerializer(serializers.Serializer):
    """
    Gateway HTTP notification payload.

    Field names follow the gateway's notification body. order_id is the
    reference this system attached to the transaction.
    Naive settlement times are read in the project TIME_ZONE.
    """

    order_id = serializers.CharField(max_length=255)
    transaction_status = serializers.CharField(max_length=50)
    fraud_status = serializers.CharField(
        max_length=50, required=False, allow_null=True, allow_blank=True
    )
    status_code = serializers.CharField(max_length=10, required=False, allow_blank=True)
    gross_amount = serializers.CharField(max_length=50, required=False, allow_blank=True)
    signature_key = serializers.CharField(required=False, allow_blank=True)
    settlement_time = serializers.DateTimeField(required=False, allow_null=True)

    def to_event(self) -> CallbackEvent:
        """Build the CallbackEvent handed to the reconciler."""
        data = self.validated_data
        return CallbackEvent(
            gateway_reference=data["order_id"],
            status=data["transaction_status"],
            fraud_status=data.get("fraud_status") or None,
            payload=dict(self.initial_data),
            settlement_time=data.get("settlement_time"),
        )
