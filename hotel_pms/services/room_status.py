"""Derived room display status (the room board)."""

import re
from collections.abc import Iterable
from datetime import date
from typing import Optional

from structlog import get_logger

from hotel_pms.models import (
    FloorGroup,
    Reservation,
    ReservationStatus,
    Room,
    RoomProjection,
    RoomStatus,
)
from hotel_pms.store.base import ReservationStore

logger = get_logger(__name__)


def _natural_key(room_number: str) -> list:
    """Sort key that orders "2" before "10" and "101A" after "101"."""
    return [
        (0, int(part), "") if part.isdigit() else (1, 0, part.lower())
        for part in re.findall(r"\d+|\D+", room_number)
    ]


class RoomStatusProjector:
    """Computes a room's display status from its stored status and reservations.

    Rules, in priority order:
    1. A checked-in reservation covering today makes the room occupied by its guest.
    2. A confirmed reservation arriving today shows the room as available with
       the arriving guest exposed.
    3. Otherwise the room's stored status is shown unchanged.

    Projection is pure and recomputed on every read.
    """

    def __init__(self, store: Optional[ReservationStore] = None):
        self.store = store

    @staticmethod
    def project_status(room: Room, reservations: Iterable[Reservation], today: date) -> RoomProjection:
        """Project the display status of one room.

        Args:
            room: Room with its stored status
            reservations: Reservations of the hotel (other rooms are ignored)
            today: Day to project for

        Returns:
            RoomProjection for the room
        """
        own = [r for r in reservations if r.room_id == room.id]

        for reservation in own:
            if (
                reservation.status is ReservationStatus.CHECKED_IN
                and reservation.check_in_date <= today < reservation.check_out_date
            ):
                return RoomProjection(
                    room=room,
                    display_status=RoomStatus.OCCUPIED,
                    occupying_guest=reservation.guest,
                    reservation=reservation,
                )

        for reservation in own:
            if reservation.status is ReservationStatus.CONFIRMED and reservation.check_in_date == today:
                return RoomProjection(
                    room=room,
                    display_status=RoomStatus.AVAILABLE,
                    arriving_guest=reservation.guest,
                    reservation=reservation,
                )

        return RoomProjection(room=room, display_status=room.status)

    def project_rooms(
        self,
        rooms: Iterable[Room],
        reservations: Iterable[Reservation],
        today: date,
    ) -> list[RoomProjection]:
        """Project every room against the same reservation list."""
        reservations = list(reservations)
        return [self.project_status(room, reservations, today) for room in rooms]

    @staticmethod
    def group_by_floor(projections: Iterable[RoomProjection]) -> list[FloorGroup]:
        """Group projections by floor, highest floor first.

        Rooms without a floor come last. Within a floor rooms are in natural
        room-number order.
        """
        floors: dict[Optional[int], list[RoomProjection]] = {}
        for projection in projections:
            floors.setdefault(projection.room.floor, []).append(projection)

        ordered_floors = sorted(
            floors,
            key=lambda floor: (floor is None, -(floor or 0)),
        )
        return [
            FloorGroup(
                floor=floor,
                rooms=sorted(floors[floor], key=lambda p: _natural_key(p.room.room_number)),
            )
            for floor in ordered_floors
        ]

    async def room_board(self, hotel_id: str, today: Optional[date] = None) -> list[FloorGroup]:
        """Load rooms and reservations of a hotel and project the board.

        Args:
            hotel_id: Hotel to project
            today: Day to project for (defaults to today)

        Returns:
            Floor groups of projected rooms
        """
        if self.store is None:
            raise RuntimeError("RoomStatusProjector needs a store to load the room board")

        today = today or date.today()
        rooms = await self.store.list_rooms(hotel_id)
        reservations = await self.store.query_reservations(hotel_id)
        projections = self.project_rooms(rooms, reservations, today)

        logger.info(
            "Projected room board",
            hotel_id=hotel_id,
            today=today.isoformat(),
            rooms=len(projections),
            occupied=sum(1 for p in projections if p.display_status is RoomStatus.OCCUPIED),
        )
        return self.group_by_floor(projections)
