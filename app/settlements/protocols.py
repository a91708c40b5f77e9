"""
Protocols for the collaborators the settlement core depends on.

The booking, talent-profile and notification subsystems live outside
this core. These Protocols describe what the core needs from them, so
any object with matching methods can be injected (including mocks in
tests) without inheriting from anything.

Available Protocols:
    TalentSnapshotProvider: Point-in-time talent history for classification
    BookingStatusSync: Pushes a new status to the booking subsystem
    NotificationDispatcher: Fire-and-forget user notifications

Usage:
    from settlements.protocols import TalentSnapshotProvider

    class ProfileSnapshotProvider:
        def get_snapshot(self, talent_id: str) -> TalentSnapshot:
            profile = TalentProfile.objects.get(user_id=talent_id)
            return TalentSnapshot.from_account(
                profile.completed_orders,
                profile.average_rating,
                profile.created_at,
            )

    isinstance(ProfileSnapshotProvider(), TalentSnapshotProvider)  # True
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from typing import Any

    from settlements.types import TalentSnapshot


@runtime_checkable
class TalentSnapshotProvider(Protocol):
    """Source of talent history used by the commission classifier."""

    def get_snapshot(self, talent_id: str) -> TalentSnapshot:
        """Return the current snapshot for talent_id."""
        ...


@runtime_checkable
class BookingStatusSync(Protocol):
    """Booking subsystem hook for status changes driven by payments."""

    def sync(self, booking_id: str, new_status: str) -> None:
        """Ask the booking subsystem to move booking_id to new_status."""
        ...


@runtime_checkable
class NotificationDispatcher(Protocol):
    """
    Fire-and-forget notification sink.

    Implementations must not block on delivery. Failures are the
    dispatcher's own concern; callers treat dispatch as best-effort.
    """

    def dispatch(
        self,
        party_id: str,
        template_kind: str,
        payload: dict[str, Any],
    ) -> None:
        """Queue a notification of template_kind for party_id."""
        ...
