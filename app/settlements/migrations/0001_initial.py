import uuid

import django_fsm
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Transaction",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "version",
                    models.PositiveIntegerField(
                        default=1, help_text="Incremented on each save"
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "booking_id",
                    models.CharField(
                        db_index=True,
                        help_text="Booking this transaction settles",
                        max_length=64,
                    ),
                ),
                (
                    "customer_id",
                    models.CharField(
                        db_index=True,
                        help_text="Paying customer identity",
                        max_length=64,
                    ),
                ),
                (
                    "talent_id",
                    models.CharField(
                        db_index=True,
                        help_text="Earning talent identity",
                        max_length=64,
                    ),
                ),
                (
                    "service_kind",
                    models.CharField(
                        choices=[
                            ("chat", "Chat"),
                            ("voice-call", "Voice Call"),
                            ("video-call", "Video Call"),
                            ("offline-date", "Offline Date"),
                            ("party-buddy", "Party Buddy"),
                            ("rent-a-lover", "Rent a Lover"),
                        ],
                        help_text="Kind of service that was priced",
                        max_length=20,
                    ),
                ),
                (
                    "duration",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Requested duration in the service kind's unit",
                        max_digits=10,
                    ),
                ),
                ("base_amount", models.PositiveBigIntegerField()),
                ("surcharge_amount", models.PositiveBigIntegerField(default=0)),
                ("platform_fee", models.PositiveBigIntegerField()),
                ("commission_rate", models.DecimalField(decimal_places=4, max_digits=5)),
                ("commission_amount", models.PositiveBigIntegerField()),
                ("talent_earnings", models.PositiveBigIntegerField()),
                ("total_charged", models.PositiveBigIntegerField()),
                (
                    "talent_tier",
                    models.CharField(
                        choices=[("fresh", "Fresh"), ("elite", "Elite"), ("vip", "VIP")],
                        help_text="Commission tier the talent held at settlement time",
                        max_length=10,
                    ),
                ),
                (
                    "state",
                    django_fsm.FSMField(
                        choices=[
                            ("pending", "Pending"),
                            ("paid", "Paid"),
                            ("failed", "Failed"),
                            ("refunded", "Refunded"),
                        ],
                        db_index=True,
                        default="pending",
                        help_text="Current state (managed by the ledger)",
                        max_length=50,
                        protected=True,
                    ),
                ),
                (
                    "gateway_reference",
                    models.CharField(
                        blank=True,
                        help_text="Payment gateway reference used to match callbacks",
                        max_length=255,
                        null=True,
                        unique=True,
                    ),
                ),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("failed_at", models.DateTimeField(blank=True, null=True)),
                ("refunded_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "verbose_name": "Transaction",
                "verbose_name_plural": "Transactions",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["talent_id", "state"],
                        name="transaction_talent_state_idx",
                    ),
                    models.Index(
                        fields=["state", "created_at"],
                        name="transaction_state_created_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            (
                                "total_charged",
                                models.F("base_amount")
                                + models.F("surcharge_amount")
                                + models.F("platform_fee"),
                            )
                        ),
                        name="transaction_total_reconciles",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            (
                                "talent_earnings",
                                models.F("base_amount")
                                + models.F("surcharge_amount")
                                - models.F("commission_amount"),
                            )
                        ),
                        name="transaction_earnings_reconcile",
                    ),
                ],
            },
        ),
    ]
