"""
Transaction model: the persisted financial record of a settled order.

A Transaction is created once per order by the TransactionLedger, in
state PENDING, with the full settlement breakdown denormalized onto it.
Its state only changes through the django-fsm transitions below, and
only the ledger calls them.

Usage:
    from settlements.services import TransactionLedger

    transaction = TransactionLedger.create(order, breakdown)
    TransactionLedger.transition(transaction.id, TransactionState.PAID, "ref-1")
"""

from __future__ import annotations

from datetime import datetime

from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from django_fsm import FSMField, can_proceed, transition

from core.model_mixins import UUIDPrimaryKeyMixin, VersionedMixin
from core.models import BaseModel

from settlements.exceptions import IllegalTransitionError
from settlements.state_machines import ServiceKind, TalentTier, TransactionState


class Transaction(UUIDPrimaryKeyMixin, VersionedMixin, BaseModel):
    """
    Financial record for one settled service order.

    State Flow:
        PENDING -> PAID -> REFUNDED
        PENDING -> FAILED

    Breakdown fields are copied verbatim from the SettlementBreakdown at
    creation. Later tier changes of the talent never touch them.

    Fields:
        booking_id/customer_id/talent_id: External identities
        service_kind/duration: What was priced
        base_amount..total_charged: Denormalized breakdown
        talent_tier/commission_rate: Classification at settlement time
        state: FSM state (protected, ledger-only)
        gateway_reference: External payment reference (unique)
        paid_at/failed_at/refunded_at: Transition timestamps
        version: Incremented on every update
    """

    # ==========================================================================
    # Order References
    # ==========================================================================

    booking_id = models.CharField(
        max_length=64,
        db_index=True,
        help_text="Booking this transaction settles",
    )

    customer_id = models.CharField(
        max_length=64,
        db_index=True,
        help_text="Paying customer identity",
    )

    talent_id = models.CharField(
        max_length=64,
        db_index=True,
        help_text="Earning talent identity",
    )

    service_kind = models.CharField(
        max_length=20,
        choices=ServiceKind.choices,
        help_text="Kind of service that was priced",
    )

    duration = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Requested duration, in duration_unit",
    )

    duration_unit = models.CharField(
        max_length=10,
        help_text="Unit of duration (days, weeks, hours, ...)",
    )

    billable_units = models.PositiveIntegerField(
        help_text="Whole units billed, in the service kind's canonical unit",
    )

    # ==========================================================================
    # Settlement Breakdown (whole currency units)
    # ==========================================================================

    base_amount = models.PositiveBigIntegerField()
    surcharge_amount = models.PositiveBigIntegerField(default=0)
    platform_fee = models.PositiveBigIntegerField()
    commission_rate = models.DecimalField(max_digits=5, decimal_places=4)
    commission_amount = models.PositiveBigIntegerField()
    talent_earnings = models.PositiveBigIntegerField()
    total_charged = models.PositiveBigIntegerField()

    talent_tier = models.CharField(
        max_length=10,
        choices=TalentTier.choices,
        help_text="Commission tier the talent held at settlement time",
    )

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    state = FSMField(
        default=TransactionState.PENDING,
        choices=TransactionState.choices,
        db_index=True,
        protected=True,
        help_text="Current state (managed by the ledger)",
    )

    gateway_reference = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        unique=True,
        help_text="Payment gateway reference used to match callbacks",
    )

    paid_at = models.DateTimeField(null=True, blank=True)
    failed_at = models.DateTimeField(null=True, blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Transaction"
        verbose_name_plural = "Transactions"
        indexes = [
            models.Index(
                fields=["talent_id", "state"], name="transaction_talent_state_idx"
            ),
            models.Index(
                fields=["state", "created_at"], name="transaction_state_created_idx"
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(
                    total_charged=F("base_amount")
                    + F("surcharge_amount")
                    + F("platform_fee")
                ),
                name="transaction_total_reconciles",
            ),
            models.CheckConstraint(
                condition=Q(
                    talent_earnings=F("base_amount")
                    + F("surcharge_amount")
                    - F("commission_amount")
                ),
                name="transaction_earnings_reconcile",
            ),
        ]

    def __str__(self) -> str:
        """Return string representation with ID, state, and total."""
        return f"Transaction({self.id}, {self.state}, {self.total_charged})"

    @property
    def service_amount(self) -> int:
        return self.base_amount + self.surcharge_amount

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=state,
        source=TransactionState.PENDING,
        target=TransactionState.PAID,
    )
    def mark_paid(self, settled_at: datetime | None = None):
        """
        Transition: PENDING -> PAID

        Args:
            settled_at: Settlement time reported by the gateway (default: now)
        """
        self.paid_at = settled_at or timezone.now()

    @transition(
        field=state,
        source=TransactionState.PENDING,
        target=TransactionState.FAILED,
    )
    def mark_failed(self):
        """Transition: PENDING -> FAILED"""
        self.failed_at = timezone.now()

    @transition(
        field=state,
        source=TransactionState.PAID,
        target=TransactionState.REFUNDED,
    )
    def mark_refunded(self):
        """Transition: PAID -> REFUNDED"""
        self.refunded_at = timezone.now()

    def _transition_for(self, target_state: str):
        return {
            TransactionState.PAID: self.mark_paid,
            TransactionState.FAILED: self.mark_failed,
            TransactionState.REFUNDED: self.mark_refunded,
        }.get(target_state)

    def can_move_to(self, target_state: str) -> bool:
        """Whether target_state is reachable from the current state."""
        method = self._transition_for(target_state)
        return method is not None and can_proceed(method)

    def move_to(self, target_state: str, settled_at: datetime | None = None) -> None:
        """
        Apply the transition leading to target_state.

        Does not save - the ledger saves under its row lock.

        Raises:
            IllegalTransitionError: If target_state is not reachable
        """
        if not self.can_move_to(target_state):
            raise IllegalTransitionError(
                f"Cannot move transaction from '{self.state}' to '{target_state}'",
                details={
                    "transaction_id": str(self.id),
                    "current_state": self.state,
                    "target_state": target_state,
                },
            )
        if target_state == TransactionState.PAID:
            self.mark_paid(settled_at=settled_at)
        else:
            self._transition_for(target_state)()
