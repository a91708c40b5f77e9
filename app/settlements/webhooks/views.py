"""
Webhook endpoint for payment gateway notifications.

The view:
1. Parses and validates the notification body
2. Verifies the signature (when a server key is configured)
3. Reconciles the event against the ledger synchronously
4. Acknowledges with the ReconcileResult

Reconciliation is quick (one locked row) and idempotent, so it runs
in the request. The gateway retries anything that is not a 2xx.

Usage:
    # In urls.py
    from settlements.webhooks.views import gateway_webhook

    urlpatterns = [
        path("webhooks/gateway/", gateway_webhook, name="gateway_webhook"),
    ]
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging

from django.conf import settings
from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from settlements.exceptions import UnknownTransactionError
from settlements.serializers import GatewayCallbackSerializer
from settlements.webhooks.reconciler import CallbackReconciler

logger = logging.getLogger(__name__)


def compute_signature(order_id: str, status_code: str, gross_amount: str, server_key: str) -> str:
    """sha512 hex digest of order_id + status_code + gross_amount + server_key."""
    raw = f"{order_id}{status_code}{gross_amount}{server_key}"
    return hashlib.sha512(raw.encode("utf-8")).hexdigest()


def verify_signature(data: dict, server_key: str) -> bool:
    """Constant-time check of the notification's signature_key."""
    expected = compute_signature(
        data.get("order_id", ""),
        data.get("status_code", ""),
        data.get("gross_amount", ""),
        server_key,
    )
    return hmac.compare_digest(expected, data.get("signature_key") or "")


@csrf_exempt
@require_POST
def gateway_webhook(request: HttpRequest) -> JsonResponse:
    """
    Receive and reconcile a payment gateway notification.

    Security:
    - Signature verification when SETTLEMENT_GATEWAY_SERVER_KEY is set
    - CSRF exemption required for external webhooks
    - Only POST requests accepted

    Returns:
        JsonResponse with status:
        - 200: Event acknowledged (applied, duplicate, ignored, informational)
        - 400: Malformed payload or invalid signature
        - 404: No transaction carries the event's reference
    """
    try:
        body = json.loads(request.body or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("Gateway webhook with unparseable body")
        return JsonResponse({"error": "Invalid JSON", "error_code": "INVALID_PAYLOAD"}, status=400)

    if not isinstance(body, dict):
        return JsonResponse({"error": "Invalid payload", "error_code": "INVALID_PAYLOAD"}, status=400)

    serializer = GatewayCallbackSerializer(data=body)
    if not serializer.is_valid():
        logger.warning(
            "Gateway webhook missing required fields",
            extra={"errors": serializer.errors},
        )
        return JsonResponse(
            {
                "error": "Invalid payload",
                "error_code": "INVALID_PAYLOAD",
                "details": serializer.errors,
            },
            status=400,
        )

    server_key = getattr(settings, "SETTLEMENT_GATEWAY_SERVER_KEY", "")
    if server_key and not verify_signature(serializer.validated_data, server_key):
        logger.warning(
            "Gateway webhook signature verification failed",
            extra={"gateway_reference": serializer.validated_data["order_id"]},
        )
        return JsonResponse(
            {"error": "Invalid signature", "error_code": "INVALID_SIGNATURE"},
            status=400,
        )

    event = serializer.to_event()
    logger.info(
        f"Received gateway webhook: {event.status}",
        extra={
            "gateway_reference": event.gateway_reference,
            "fraud_status": event.fraud_status,
        },
    )

    try:
        result = CallbackReconciler().reconcile(event)
    except UnknownTransactionError as e:
        return JsonResponse(e.to_dict(), status=404)

    return JsonResponse(result.to_dict(), status=200)
