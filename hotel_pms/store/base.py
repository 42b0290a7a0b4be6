"""Abstract persistence collaborator for the reservation core.

The store is the only shared mutable resource. Services never keep
writable state between calls; they read and write through this interface.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Optional

from hotel_pms.models import (
    FxRate,
    Guest,
    GuestCreate,
    MonthlyStats,
    Reservation,
    ReservationCreate,
    ReservationFilters,
    Room,
    RoomStatus,
)


class ReservationStore(ABC):
    """Read/write operations the core needs from the backing store.

    Implementations must enforce two constraints authoritatively:
    confirmation numbers are unique across all reservations, and two
    room-holding reservations for the same room never overlap. Violations
    are raised as StorageConflictError; any other failure as StorageError.
    """

    @abstractmethod
    async def query_reservations(
        self,
        hotel_id: str,
        filters: Optional[ReservationFilters] = None,
    ) -> list[Reservation]:
        """Reservations of a hotel matching the filters, guest embedded."""

    @abstractmethod
    async def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        """A single reservation or None."""

    @abstractmethod
    async def confirmation_number_exists(self, confirmation_number: str) -> bool:
        """True if any reservation, in any hotel, already uses the code."""

    @abstractmethod
    async def insert_guest(self, guest: GuestCreate) -> Guest:
        """Store a new guest."""

    @abstractmethod
    async def delete_guest(self, guest_id: str) -> None:
        """Remove a guest (used to undo a failed booking)."""

    @abstractmethod
    async def insert_reservation(self, reservation: ReservationCreate) -> Reservation:
        """Store a new reservation."""

    @abstractmethod
    async def update_reservation(self, reservation_id: str, changes: dict[str, Any]) -> Reservation:
        """Apply changes to a reservation and return the stored result."""

    @abstractmethod
    async def list_rooms(self, hotel_id: str) -> list[Room]:
        """All rooms of a hotel with their room type embedded."""

    @abstractmethod
    async def get_room(self, room_id: str) -> Optional[Room]:
        """A single room with its room type, or None."""

    @abstractmethod
    async def update_room_status(self, room_id: str, status: RoomStatus) -> Room:
        """Set the stored housekeeping status of a room."""

    @abstractmethod
    async def query_fx_rate(self, rate_date: date) -> Optional[FxRate]:
        """FX record dated exactly `rate_date`, or None."""

    @abstractmethod
    async def query_monthly_stats(self, hotel_id: str, month_start: date) -> Optional[MonthlyStats]:
        """Monthly aggregate for the month starting at `month_start`, or None."""

    @abstractmethod
    async def list_monthly_stats(self, hotel_id: str) -> list[MonthlyStats]:
        """All monthly aggregates of a hotel, oldest first."""

    async def close(self) -> None:
        """Release connections held by the store."""
        return None
