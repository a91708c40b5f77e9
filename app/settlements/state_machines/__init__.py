"""
State machine enums for settlement models.

This module re-exports the enums used by the Transaction model with
django-fsm and by the callback reconciler.
"""

from settlements.state_machines.states import (
    BookingStatus,
    ReconcileOutcome,
    ServiceKind,
    TalentTier,
    TransactionState,
)

__all__ = [
    "BookingStatus",
    "ReconcileOutcome",
    "ServiceKind",
    "TalentTier",
    "TransactionState",
]
