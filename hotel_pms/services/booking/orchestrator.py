"""Reservation orchestrator: guest and reservation created as one unit."""

from typing import Optional

from structlog import get_logger

from hotel_pms.errors import PMSError
from hotel_pms.models import GuestInput, Reservation, ReservationInput
from hotel_pms.services.availability import AvailabilityChecker
from hotel_pms.services.confirmation import ConfirmationCodeGenerator
from hotel_pms.store.base import ReservationStore

from .context import BookingContext
from .pipeline import BookingPipeline
from .steps import (
    CheckAvailabilityStep,
    CreateGuestStep,
    GenerateConfirmationStep,
    InsertReservationStep,
    PriceStayStep,
    ValidateDatesStep,
)

logger = get_logger(__name__)


class ReservationOrchestrator:
    """Creates a guest and its reservation as a single logical unit of work.

    Steps run in this order:
    1. Validate the date range (no side effects on failure)
    2. Check the room belongs to the hotel and is free
    3. Price the stay when no total was entered
    4. Create the guest, scoped to the hotel
    5. Generate a confirmation number
    6. Insert the reservation with status confirmed

    Any failure after step 4 deletes the guest again. The raised error
    carries ``guest_id`` and ``guest_rolled_back`` in its details so the
    caller can tell whether a cleanup is still owed. Room projections are
    computed on read, and a caching store drops the hotel's cached
    listings when the reservation is inserted.
    """

    def __init__(
        self,
        store: ReservationStore,
        availability_checker: Optional[AvailabilityChecker] = None,
        code_generator: Optional[ConfirmationCodeGenerator] = None,
    ):
        """Initialize the orchestrator.

        Args:
            store: Reservation store
            availability_checker: Advisory availability check
            code_generator: Confirmation number generator
        """
        self.store = store
        self.availability_checker = availability_checker or AvailabilityChecker(store)
        self.code_generator = code_generator or ConfirmationCodeGenerator(store)
        self.pipeline = BookingPipeline(
            "create_reservation",
            [
                ValidateDatesStep(),
                CheckAvailabilityStep(store, self.availability_checker),
                PriceStayStep(),
                CreateGuestStep(store),
                GenerateConfirmationStep(self.code_generator),
                InsertReservationStep(store, self.code_generator),
            ],
        )

    async def create_reservation(
        self,
        hotel_id: str,
        guest_input: GuestInput,
        reservation_input: ReservationInput,
    ) -> Reservation:
        """Create a guest and a confirmed reservation for them.

        Args:
            hotel_id: Hotel the reservation is made for
            guest_input: Guest details
            reservation_input: Stay details

        Returns:
            Stored reservation with its guest embedded

        Raises:
            InvalidDateRange: If check-out is not after check-in
            RoomNotFound: If the selected room does not exist
            RoomUnavailable: If the room is booked or belongs to another hotel
            GuestCreationFailed: If the guest could not be stored
            ConfirmationCodeExhausted: If no unused confirmation number was found
            ReservationInsertFailed: If the reservation could not be stored
        """
        context = BookingContext(hotel_id, guest_input, reservation_input)
        logger.info(
            "Creating reservation",
            hotel_id=hotel_id,
            room_id=reservation_input.room_id,
            check_in=reservation_input.check_in_date.isoformat(),
            check_out=reservation_input.check_out_date.isoformat(),
        )

        try:
            await self.pipeline.execute(context)
        except PMSError as e:
            if context.guest is not None:
                e.details.setdefault("guest_id", context.guest.id)
                e.details["guest_rolled_back"] = context.guest_rolled_back
            logger.info(
                "Reservation not created",
                hotel_id=hotel_id,
                error_type=type(e).__name__,
                results=context.get_results(),
            )
            raise

        reservation = context.reservation
        if reservation.guest is None:
            reservation = reservation.model_copy(update={"guest": context.guest})
        return reservation
