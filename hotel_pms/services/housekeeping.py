"""Stored room status, maintained by housekeeping."""

from typing import Optional

from structlog import get_logger

from hotel_pms.errors import RoomNotFound
from hotel_pms.models import Room, RoomStatus
from hotel_pms.store.base import ReservationStore

logger = get_logger(__name__)

ATTENTION_STATUSES = frozenset({RoomStatus.DIRTY, RoomStatus.MAINTENANCE, RoomStatus.OUT_OF_ORDER})


class HousekeepingService:
    """Maintains the stored status of rooms.

    This is the only writer of a room's stored status; the reservation
    flow never changes it.
    """

    def __init__(self, store: ReservationStore):
        self.store = store

    async def update_room_status(
        self, room_id: str, status: RoomStatus, hotel_id: Optional[str] = None
    ) -> Room:
        """Set the stored status of a room.

        Args:
            room_id: Room to update
            status: New stored status
            hotel_id: When given, the room must belong to this hotel

        Returns:
            Updated room

        Raises:
            RoomNotFound: If the room does not exist (or not in hotel_id)
        """
        status = RoomStatus(status)
        room = await self.store.get_room(room_id)
        if room is None or (hotel_id is not None and room.hotel_id != hotel_id):
            raise RoomNotFound(details={"room_id": room_id})

        updated = await self.store.update_room_status(room_id, status)
        logger.info(
            "Room status updated",
            hotel_id=room.hotel_id,
            room_id=room_id,
            room_number=room.room_number,
            from_status=room.status.value,
            to_status=status.value,
        )
        return updated

    async def rooms_needing_attention(self, hotel_id: str) -> list[Room]:
        """Rooms whose stored status is dirty, maintenance or out of order."""
        rooms = await self.store.list_rooms(hotel_id)
        return [room for room in rooms if room.status in ATTENTION_STATUSES]
