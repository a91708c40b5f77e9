"""
Service layer primitives.

- ServiceResult: Result wrapper for expected success/failure outcomes
- BaseService: Base class with logging and transaction helpers

Expected failures (a rejected order, an illegal state transition) come
back as a failed ServiceResult. Unexpected failures (database errors,
bugs) propagate as exceptions.

Usage:
    from core.services import BaseService, ServiceResult

    class SettlementService(BaseService):
        @classmethod
        def settle(cls, order) -> ServiceResult[SettlementReceipt]:
            try:
                breakdown = compute(order, snapshot)
            except InvalidOrderError as e:
                return ServiceResult.failure(e.message, e.error_code)

            with cls.atomic():
                transaction = TransactionLedger.create(order, breakdown)

            return ServiceResult.success(SettlementReceipt(transaction.id, breakdown))

    # In a view
    result = SettlementService.settle(order)
    if result:
        return Response(..., status=201)
    return Response(result.to_response(), status=400)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

if TYPE_CHECKING:
    from collections.abc import Callable, Generator
    from typing import Any

    from core.exceptions import BaseApplicationError

T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Result of a service operation.

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code for client handling
        details: Structured context for the failure

    Usage:
        return ServiceResult.success(transaction)
        return ServiceResult.failure("Duration must be positive", "INVALID_ORDER")

        result = TransactionLedger.transition(transaction_id, "paid")
        if not result:
            logger.info(result.error_code)
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    details: dict[str, Any] | None = field(default=None)

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        """Create a successful result carrying data."""
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for client handling
            details: Structured failure context
        """
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            details=details,
        )

    @classmethod
    def from_error(cls, exc: BaseApplicationError) -> ServiceResult[T]:
        """
        Create a failed result from an application error.

        Keeps the error's message, code and details.

        Example:
            try:
                transaction.move_to(target_state)
            except IllegalTransitionError as e:
                return ServiceResult.from_error(e)
        """
        return cls.failure(exc.message, exc.error_code, exc.details or None)

    def to_response(self) -> dict[str, Any]:
        """
        Convert to API response format.

        Returns:
            Dict with success status and data or error details
        """
        if self.success:
            return {"success": True, "data": self.data}

        response: dict[str, Any] = {
            "success": False,
            "error": self.error,
        }
        if self.error_code:
            response["error_code"] = self.error_code
        if self.details:
            response["details"] = self.details
        return response

    def map(self, func: Callable[[T], Any]) -> ServiceResult:
        """
        Transform the data if successful, return unchanged if failed.

        Example:
            result = SettlementService.settle(order)
            payload = result.map(lambda receipt: receipt.breakdown.to_dict())
        """
        if self.success and self.data is not None:
            return ServiceResult.success(func(self.data))
        return self

    def __bool__(self) -> bool:
        """Truthy when the operation succeeded."""
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Services are stateless: use @classmethod and keep no instance state.
    Use ServiceResult for expected failures and raise for unexpected ones.
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Logger named after the service class.

        Example:
            cls.get_logger().info("Transition applied", extra={...})
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Run the block in a database transaction.

        Thin wrapper around django.db.transaction.atomic() that makes the
        transaction boundary explicit in service code. Nested use creates
        a savepoint.
        """
        with transaction.atomic():
            yield
