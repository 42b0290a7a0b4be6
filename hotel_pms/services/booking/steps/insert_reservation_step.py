"""Step to insert the reservation."""

from hotel_pms.config import settings
from hotel_pms.errors import (
    ConfirmationCodeExhausted,
    ReservationInsertFailed,
    RoomUnavailable,
    StorageConflictError,
    StorageError,
)
from hotel_pms.models import ReservationCreate, ReservationStatus
from hotel_pms.services.confirmation import ConfirmationCodeGenerator
from hotel_pms.store.base import ReservationStore

from ..base_step import BookingStep
from ..context import BookingContext


class InsertReservationStep(BookingStep):
    """Insert the reservation, reacting to the store's constraints.

    The store is the authoritative guard against duplicates:
    - a duplicate confirmation number regenerates the code and retries,
      within the generator's attempt budget
    - an overlapping booking that slipped past the advisory check becomes
      RoomUnavailable
    - any other storage failure becomes ReservationInsertFailed
    """

    def __init__(
        self,
        store: ReservationStore,
        code_generator: ConfirmationCodeGenerator,
        default_currency: str | None = None,
    ):
        super().__init__("InsertReservation")
        self.store = store
        self.code_generator = code_generator
        self.default_currency = default_currency or settings.booking.default_currency

    def _build(self, context: BookingContext) -> ReservationCreate:
        form = context.reservation_input
        room_type_id = form.room_type_id or (context.room.room_type_id if context.room else None)
        return ReservationCreate(
            hotel_id=context.hotel_id,
            guest_id=context.guest.id,
            room_id=form.room_id,
            room_type_id=room_type_id,
            confirmation_number=context.confirmation_number,
            check_in_date=form.check_in_date,
            check_out_date=form.check_out_date,
            adults=form.adults,
            children=form.children,
            total_amount=context.total_amount or 0.0,
            paid_amount=form.paid_amount,
            currency=form.currency or self.default_currency,
            status=ReservationStatus.CONFIRMED,
            channel=form.channel,
            commission_rate=form.commission_rate,
            special_requests=form.special_requests,
            arrival_time=form.arrival_time,
        )

    async def execute(self, context: BookingContext) -> None:
        """Insert the reservation row.

        Raises:
            RoomUnavailable: If the store's overlap guard rejected the stay
            ConfirmationCodeExhausted: If every code collided at insert time
            ReservationInsertFailed: On any other storage failure
        """
        for attempt in range(1, self.code_generator.max_attempts + 1):
            try:
                context.reservation = await self.store.insert_reservation(self._build(context))
            except StorageConflictError as e:
                if e.constraint == "room_overlap":
                    self.logger.warning(
                        "Storage overlap guard rejected reservation",
                        hotel_id=context.hotel_id,
                        room_id=context.room_id,
                    )
                    raise RoomUnavailable(details={"guard": "storage"}) from e
                if e.constraint != "confirmation_number":
                    raise self._insert_failed(context, e) from e

                self.logger.warning(
                    "Confirmation number taken at insert, regenerating",
                    hotel_id=context.hotel_id,
                    confirmation_number=context.confirmation_number,
                    attempt=attempt,
                )
                if attempt < self.code_generator.max_attempts:
                    context.confirmation_number = await self.code_generator.generate()
                continue
            except StorageError as e:
                raise self._insert_failed(context, e) from e

            self.logger.info(
                "Reservation inserted",
                hotel_id=context.hotel_id,
                reservation_id=context.reservation.id,
                confirmation_number=context.reservation.confirmation_number,
            )
            return

        raise ConfirmationCodeExhausted(details={"attempts": self.code_generator.max_attempts})

    @staticmethod
    def _insert_failed(context: BookingContext, error: StorageError) -> ReservationInsertFailed:
        return ReservationInsertFailed(
            details={"guest_id": context.guest.id, "cause": error.message},
        )
