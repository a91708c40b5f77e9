"""
Settlement-specific exceptions.

Exception Hierarchy:
    SettlementError (base for the settlement domain)
    ├── InvalidOrderError - Order cannot be priced (bad kind, duration, rate)
    └── UnknownTransactionError - Callback references no known transaction

    TransactionNotFoundError - Read accessor miss (inherits NotFoundError)
    IllegalTransitionError - FSM transition not allowed (inherits ConflictError)

Handling rules:
    - InvalidOrderError is reported synchronously to the caller and never
      retried.
    - IllegalTransitionError is raised by the model guard and converted by
      the ledger into a failed ServiceResult. It is logged at INFO and the
      gateway still gets an acknowledgment.
    - UnknownTransactionError signals a consistency gap between the gateway
      and this system. It is logged at ERROR and surfaced to the caller.

Usage:
    from settlements.exceptions import InvalidOrderError

    if duration <= 0:
        raise InvalidOrderError(
            "Duration must be positive",
            details={"duration": str(duration)},
        )
"""

from __future__ import annotations

from core.exceptions import BaseApplicationError, ConflictError, NotFoundError


class SettlementError(BaseApplicationError):
    """Base exception for all settlement operations."""

    default_error_code: str = "SETTLEMENT_ERROR"


class InvalidOrderError(SettlementError):
    """
    Raised when a service order cannot be priced.

    Use for:
    - Unrecognized service kind
    - Duration of zero or less
    - Unsupported duration unit for the service kind
    - A custom rate on a kind that does not accept one
    - A non-positive custom rate
    """

    default_error_code: str = "INVALID_ORDER"


class UnknownTransactionError(SettlementError):
    """
    Raised when a gateway callback references no known transaction.

    Never silently dropped: it means the gateway holds a payment this
    system has no record of.
    """

    default_error_code: str = "UNKNOWN_TRANSACTION"


class TransactionNotFoundError(NotFoundError):
    """Raised when a transaction lookup by id finds nothing."""

    default_error_code: str = "TRANSACTION_NOT_FOUND"


class IllegalTransitionError(ConflictError):
    """
    Raised when a Transaction state transition is not allowed.

    Wraps django-fsm's TransitionNotAllowed with our standard error format.

    Attributes:
        details: Contains transaction_id, current_state and target_state
    """

    default_error_code: str = "ILLEGAL_TRANSITION"


__all__ = [
    "SettlementError",
    "InvalidOrderError",
    "UnknownTransactionError",
    "TransactionNotFoundError",
    "IllegalTransitionError",
]
