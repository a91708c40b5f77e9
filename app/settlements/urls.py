"""
URL configuration for the settlements app.

Routes:
    - POST /                          - Settle an order
    - GET  /transactions/{id}/        - Transaction detail
    - POST /webhooks/gateway/         - Payment gateway webhook endpoint

All routes are prefixed with /api/v1/settlements/ when included in the main URLconf.
"""

from django.urls import path

from settlements.views import SettleView, TransactionDetailView
from settlements.webhooks.views import gateway_webhook

app_name = "settlements"

urlpatterns = [
    path("", SettleView.as_view(), name="settle"),
    path(
        "transactions/<uuid:transaction_id>/",
        TransactionDetailView.as_view(),
        name="transaction_detail",
    ),
    # Webhook endpoints
    path("webhooks/gateway/", gateway_webhook, name="gateway_webhook"),
]
