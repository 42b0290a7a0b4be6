"""Step to create the guest record."""

from hotel_pms.errors import GuestCreationFailed, StorageError
from hotel_pms.models import GuestCreate
from hotel_pms.store.base import ReservationStore

from ..base_step import BookingStep
from ..context import BookingContext


class CreateGuestStep(BookingStep):
    """Store the guest, scoped to the reservation's hotel.

    Compensation deletes the guest again, so a failed booking does not
    leave a guest without a reservation behind.
    """

    def __init__(self, store: ReservationStore):
        super().__init__("CreateGuest")
        self.store = store

    async def execute(self, context: BookingContext) -> None:
        guest = GuestCreate(**context.guest_input.model_dump(), hotel_id=context.hotel_id)
        try:
            context.guest = await self.store.insert_guest(guest)
        except StorageError as e:
            raise GuestCreationFailed(details={"cause": e.message}) from e

        self.logger.info("Guest created", hotel_id=context.hotel_id, guest_id=context.guest.id)

    async def compensate(self, context: BookingContext) -> None:
        if context.guest is None:
            return
        try:
            await self.store.delete_guest(context.guest.id)
        except StorageError as e:
            self.logger.error(
                "Failed to roll back guest, guest left without reservation",
                hotel_id=context.hotel_id,
                guest_id=context.guest.id,
                error=e.message,
            )
            return

        context.guest_rolled_back = True
        self.logger.warning(
            "Rolled back guest after failed booking",
            hotel_id=context.hotel_id,
            guest_id=context.guest.id,
        )
