"""Step to validate the requested stay dates."""

from hotel_pms.errors import InvalidDateRange

from ..base_step import BookingStep
from ..context import BookingContext


class ValidateDatesStep(BookingStep):
    """Reject stays whose check-out is not strictly after check-in."""

    def __init__(self):
        super().__init__("ValidateDates")

    async def execute(self, context: BookingContext) -> None:
        reservation = context.reservation_input
        if reservation.check_out_date <= reservation.check_in_date:
            raise InvalidDateRange(
                details={
                    "check_in_date": reservation.check_in_date.isoformat(),
                    "check_out_date": reservation.check_out_date.isoformat(),
                }
            )
