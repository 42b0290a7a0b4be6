"""Reservation lifecycle: status transitions, date changes and front-desk counters."""

from datetime import date
from typing import Optional

from structlog import get_logger

from hotel_pms.errors import (
    InvalidDateRange,
    InvalidStatusTransition,
    ReservationNotFound,
    RoomUnavailable,
    StorageConflictError,
)
from hotel_pms.models import (
    Reservation,
    ReservationFilters,
    ReservationStatus,
    ReservationSummary,
)
from hotel_pms.services.availability import AvailabilityChecker
from hotel_pms.store.base import ReservationStore

logger = get_logger(__name__)

ALLOWED_TRANSITIONS: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    ReservationStatus.CONFIRMED: frozenset(
        {ReservationStatus.CHECKED_IN, ReservationStatus.CANCELLED, ReservationStatus.NO_SHOW}
    ),
    ReservationStatus.CHECKED_IN: frozenset({ReservationStatus.CHECKED_OUT}),
    ReservationStatus.CHECKED_OUT: frozenset(),
    ReservationStatus.CANCELLED: frozenset(),
    ReservationStatus.NO_SHOW: frozenset(),
}

# Not counted towards the outstanding balance
_VOID_STATUSES = frozenset({ReservationStatus.CANCELLED, ReservationStatus.NO_SHOW})


def can_transition(current: ReservationStatus, target: ReservationStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


class ReservationService:
    """Operations on existing reservations.

    The stored room status is never touched here; occupancy is derived by
    the room status projector.
    """

    def __init__(self, store: ReservationStore, availability_checker: Optional[AvailabilityChecker] = None):
        self.store = store
        self.availability_checker = availability_checker or AvailabilityChecker(store)

    async def get(self, reservation_id: str) -> Reservation:
        """Load a reservation.

        Raises:
            ReservationNotFound: If no reservation has this id
        """
        reservation = await self.store.get_reservation(reservation_id)
        if reservation is None:
            raise ReservationNotFound(details={"reservation_id": reservation_id})
        return reservation

    async def list_reservations(
        self, hotel_id: str, filters: Optional[ReservationFilters] = None
    ) -> list[Reservation]:
        return await self.store.query_reservations(hotel_id, filters)

    async def transition(self, reservation_id: str, target: ReservationStatus) -> Reservation:
        """Move a reservation to a new status.

        Args:
            reservation_id: Reservation to update
            target: New status

        Returns:
            Updated reservation

        Raises:
            ReservationNotFound: If no reservation has this id
            InvalidStatusTransition: If the state machine does not allow the move
        """
        target = ReservationStatus(target)
        reservation = await self.get(reservation_id)

        if not can_transition(reservation.status, target):
            raise InvalidStatusTransition(
                f"Cannot change status from {reservation.status.value} to {target.value}",
                details={"from": reservation.status.value, "to": target.value},
            )

        updated = await self.store.update_reservation(reservation_id, {"status": target})
        logger.info(
            "Reservation status changed",
            hotel_id=reservation.hotel_id,
            confirmation_number=reservation.confirmation_number,
            from_status=reservation.status.value,
            to_status=target.value,
        )
        return updated

    async def check_in(self, reservation_id: str) -> Reservation:
        return await self.transition(reservation_id, ReservationStatus.CHECKED_IN)

    async def check_out(self, reservation_id: str) -> Reservation:
        return await self.transition(reservation_id, ReservationStatus.CHECKED_OUT)

    async def cancel(self, reservation_id: str) -> Reservation:
        return await self.transition(reservation_id, ReservationStatus.CANCELLED)

    async def mark_no_show(self, reservation_id: str) -> Reservation:
        return await self.transition(reservation_id, ReservationStatus.NO_SHOW)

    async def change_dates(self, reservation_id: str, check_in: date, check_out: date) -> Reservation:
        """Move an active reservation to new dates.

        The reservation itself is excluded from the availability check so
        shortening or shifting a stay does not conflict with itself.

        Args:
            reservation_id: Reservation to update
            check_in: New check-in date
            check_out: New check-out date

        Returns:
            Updated reservation

        Raises:
            ReservationNotFound: If no reservation has this id
            InvalidDateRange: If check_out is not after check_in
            InvalidStatusTransition: If the reservation no longer holds its room
            RoomUnavailable: If the room is booked for part of the new range
        """
        if check_out <= check_in:
            raise InvalidDateRange(
                details={"check_in_date": check_in.isoformat(), "check_out_date": check_out.isoformat()}
            )

        reservation = await self.get(reservation_id)
        if not reservation.holds_room():
            raise InvalidStatusTransition(
                f"Cannot change dates of a {reservation.status.value} reservation",
                field="check_in_date",
                details={"status": reservation.status.value},
            )

        if reservation.room_id is not None:
            conflicts = await self.availability_checker.find_conflicts(
                reservation.hotel_id,
                reservation.room_id,
                check_in,
                check_out,
                exclude_reservation_id=reservation.id,
            )
            if conflicts:
                raise RoomUnavailable(details={"conflicts": [c.confirmation_number for c in conflicts]})

        try:
            updated = await self.store.update_reservation(
                reservation_id, {"check_in_date": check_in, "check_out_date": check_out}
            )
        except StorageConflictError as e:
            if e.constraint == "room_overlap":
                raise RoomUnavailable(details={"guard": "storage"}) from e
            raise

        logger.info(
            "Reservation dates changed",
            hotel_id=reservation.hotel_id,
            confirmation_number=reservation.confirmation_number,
            check_in=check_in.isoformat(),
            check_out=check_out.isoformat(),
        )
        return updated

    async def summarize(self, hotel_id: str, today: Optional[date] = None) -> ReservationSummary:
        """Front-desk counters for a hotel.

        Args:
            hotel_id: Hotel to summarize
            today: Day for arrivals and departures (defaults to today)

        Returns:
            ReservationSummary over every reservation of the hotel
        """
        today = today or date.today()
        reservations = await self.store.query_reservations(hotel_id)

        return ReservationSummary(
            total=len(reservations),
            checked_in=sum(1 for r in reservations if r.status is ReservationStatus.CHECKED_IN),
            arrivals_today=sum(
                1
                for r in reservations
                if r.status is ReservationStatus.CONFIRMED and r.check_in_date == today
            ),
            departures_today=sum(
                1
                for r in reservations
                if r.status is ReservationStatus.CHECKED_IN and r.check_out_date == today
            ),
            total_revenue=sum(r.total_amount for r in reservations),
            outstanding_balance=sum(r.balance_due for r in reservations if r.status not in _VOID_STATUSES),
        )
