"""
Settlement admin configuration.

Transactions are read-only here: state changes go through the
TransactionLedger, never through the admin.
"""

from django.contrib import admin

from settlements.models import Transaction


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    """Read-only visibility into settled transactions."""

    list_display = [
        "id",
        "booking_id",
        "service_kind",
        "talent_tier",
        "total_charged",
        "state",
        "created_at",
    ]
    list_filter = ["state", "service_kind", "talent_tier", "created_at"]
    search_fields = ["id", "booking_id", "customer_id", "talent_id", "gateway_reference"]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]

    fieldsets = (
        (
            None,
            {
                "fields": ("id", "state", "gateway_reference", "version"),
            },
        ),
        (
            "Order",
            {
                "fields": (
                    "booking_id",
                    "customer_id",
                    "talent_id",
                    "service_kind",
                    "duration",
                    "duration_unit",
                    "billable_units",
                ),
            },
        ),
        (
            "Breakdown",
            {
                "fields": (
                    "base_amount",
                    "surcharge_amount",
                    "platform_fee",
                    "talent_tier",
                    "commission_rate",
                    "commission_amount",
                    "talent_earnings",
                    "total_charged",
                ),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("paid_at", "failed_at", "refunded_at", "created_at", "updated_at"),
            },
        ),
    )

    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
