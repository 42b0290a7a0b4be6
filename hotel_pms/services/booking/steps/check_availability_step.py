"""Step to verify the selected room can be booked."""

from hotel_pms.errors import RoomNotFound, RoomUnavailable
from hotel_pms.models import RoomStatus
from hotel_pms.services.availability import AvailabilityChecker
from hotel_pms.store.base import ReservationStore

from ..base_step import BookingStep
from ..context import BookingContext

# Rooms withdrawn from sale; dirty and occupied rooms stay bookable
OFF_MARKET_STATUSES = frozenset({RoomStatus.OUT_OF_ORDER, RoomStatus.MAINTENANCE})


class CheckAvailabilityStep(BookingStep):
    """Check the room belongs to the hotel and is free for the stay.

    Runs before any write so a conflict leaves nothing behind. Reservations
    without an assigned room (type-only) skip the check.
    """

    def __init__(self, store: ReservationStore, availability_checker: AvailabilityChecker):
        """Initialize the step.

        Args:
            store: Reservation store used to load the room
            availability_checker: Advisory overlap check
        """
        super().__init__("CheckAvailability")
        self.store = store
        self.availability_checker = availability_checker

    async def execute(self, context: BookingContext) -> None:
        """Load the room and look for conflicting reservations.

        Raises:
            RoomNotFound: If the room does not exist
            RoomUnavailable: If the room is booked or not sellable for this hotel
        """
        if context.room_id is None:
            self.logger.info("No room assigned, skipping availability check", hotel_id=context.hotel_id)
            return

        room = await self.store.get_room(context.room_id)
        if room is None:
            raise RoomNotFound(details={"room_id": context.room_id})
        if room.hotel_id != context.hotel_id:
            raise RoomUnavailable(
                "The selected room does not belong to this hotel",
                details={"room_id": room.id, "room_hotel_id": room.hotel_id},
            )
        if room.status in OFF_MARKET_STATUSES:
            raise RoomUnavailable(
                "The selected room is out of service",
                details={"room_id": room.id, "room_status": room.status.value},
            )
        context.room = room

        reservation = context.reservation_input
        conflicts = await self.availability_checker.find_conflicts(
            context.hotel_id,
            room.id,
            reservation.check_in_date,
            reservation.check_out_date,
        )
        if conflicts:
            raise RoomUnavailable(
                details={"conflicts": [c.confirmation_number for c in conflicts]},
            )
