"""Step to price the stay."""

from ..base_step import BookingStep
from ..context import BookingContext


class PriceStayStep(BookingStep):
    """Use the entered total, or price the stay from the room type's base rate."""

    def __init__(self):
        super().__init__("PriceStay")

    async def execute(self, context: BookingContext) -> None:
        reservation = context.reservation_input
        if reservation.total_amount is not None:
            context.total_amount = reservation.total_amount
            return

        nightly_rate = context.room.nightly_rate if context.room else 0.0
        context.total_amount = nightly_rate * reservation.nights

        self.logger.info(
            "Priced stay from room rate",
            hotel_id=context.hotel_id,
            room_id=context.room_id,
            nightly_rate=nightly_rate,
            nights=reservation.nights,
            total_amount=context.total_amount,
        )
