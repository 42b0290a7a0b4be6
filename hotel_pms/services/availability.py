"""Room availability checks over the reservation store."""

from datetime import date
from typing import Optional

from structlog import get_logger

from hotel_pms.models import (
    RELEASED_STATUSES,
    DateRange,
    Reservation,
    ReservationFilters,
)
from hotel_pms.store.base import ReservationStore

logger = get_logger(__name__)


def ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """Half-open overlap test for [start_a, end_a) and [start_b, end_b).

    A range ending on the day another begins does not overlap it, so a
    check-out and a check-in on the same day are compatible.
    """
    return start_a < end_b and start_b < end_a


class AvailabilityChecker:
    """Decides whether a room is free for a stay.

    The check is advisory: two concurrent bookings can both pass it before
    either is stored. The store's overlap constraint is the authoritative
    guard; this check exists to give fast feedback on the form.
    """

    def __init__(self, store: ReservationStore):
        self.store = store

    async def find_conflicts(
        self,
        hotel_id: str,
        room_id: str,
        check_in: date,
        check_out: date,
        exclude_reservation_id: Optional[str] = None,
    ) -> list[Reservation]:
        """Reservations holding the room during [check_in, check_out).

        Args:
            hotel_id: Hotel scope
            room_id: Room to check
            check_in: First night
            check_out: Departure day (exclusive); callers guarantee check_out > check_in
            exclude_reservation_id: Reservation to ignore, used when editing it

        Returns:
            Conflicting reservations, empty when the room is free
        """
        filters = ReservationFilters(
            room_id=room_id,
            exclude_statuses=sorted(RELEASED_STATUSES, key=lambda s: s.value),
            exclude_reservation_id=exclude_reservation_id,
            overlapping=DateRange(start=check_in, end=check_out),
        )
        candidates = await self.store.query_reservations(hotel_id, filters)

        # The store may only prefilter; the rules are re-applied here
        conflicts = [
            reservation
            for reservation in candidates
            if reservation.room_id == room_id
            and reservation.status not in RELEASED_STATUSES
            and reservation.id != exclude_reservation_id
            and ranges_overlap(
                check_in, check_out, reservation.check_in_date, reservation.check_out_date
            )
        ]

        if conflicts:
            logger.info(
                "Room has conflicting reservations",
                hotel_id=hotel_id,
                room_id=room_id,
                check_in=check_in.isoformat(),
                check_out=check_out.isoformat(),
                conflicts=[r.confirmation_number for r in conflicts],
            )
        return conflicts

    async def is_available(
        self,
        hotel_id: str,
        room_id: str,
        check_in: date,
        check_out: date,
        exclude_reservation_id: Optional[str] = None,
    ) -> bool:
        """True when no room-holding reservation overlaps the stay."""
        conflicts = await self.find_conflicts(
            hotel_id, room_id, check_in, check_out, exclude_reservation_id
        )
        return not conflicts
