"""
API views for the settlements app.

URL Structure:
    /api/v1/settlements/                          POST  settle an order
    /api/v1/settlements/transactions/{id}/        GET   transaction detail
    /api/v1/settlements/webhooks/gateway/         POST  gateway callback
                                                        (settlements.webhooks.views)

Views are thin: validation in serializers, logic in services.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from settlements.exceptions import TransactionNotFoundError
from settlements.serializers import (
    SettlementReceiptSerializer,
    SettleRequestSerializer,
    TransactionSerializer,
)
from settlements.services import SettlementService, TransactionLedger


class SettleView(APIView):
    """Price an order and create its PENDING transaction."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=SettleRequestSerializer,
        responses={
            201: SettlementReceiptSerializer,
            400: OpenApiResponse(description="Invalid order"),
        },
        tags=["Settlements"],
    )
    def post(self, request):
        serializer = SettleRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = SettlementService.settle(serializer.to_order())

        if not result.success:
            return Response(result.to_response(), status=status.HTTP_400_BAD_REQUEST)

        receipt = result.data
        output = SettlementReceiptSerializer(
            {"transaction_id": receipt.transaction_id, "breakdown": receipt.breakdown}
        )
        return Response(output.data, status=status.HTTP_201_CREATED)


class TransactionDetailView(APIView):
    """Read a single transaction."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        responses={
            200: TransactionSerializer,
            404: OpenApiResponse(description="Transaction not found"),
        },
        tags=["Settlements"],
    )
    def get(self, request, transaction_id):
        try:
            transaction = TransactionLedger.get(transaction_id)
        except TransactionNotFoundError as e:
            return Response(e.to_dict(), status=status.HTTP_404_NOT_FOUND)

        return Response(TransactionSerializer(transaction).data)
