"""Booking context for sharing data between steps."""

from datetime import datetime, timezone
from typing import Any, Optional

from hotel_pms.models import Guest, GuestInput, Reservation, ReservationInput, Room


class BookingContext:
    """Context object for passing data between booking steps.

    Created per reservation request; each step reads what earlier steps
    produced and records its own results here.
    """

    def __init__(self, hotel_id: str, guest_input: GuestInput, reservation_input: ReservationInput):
        """Initialize booking context.

        Args:
            hotel_id: Hotel the reservation is made for
            guest_input: Guest details from the booking form
            reservation_input: Reservation details from the booking form
        """
        self.hotel_id = hotel_id
        self.guest_input = guest_input
        self.reservation_input = reservation_input
        self.start_time = datetime.now(timezone.utc)

        # Resolved along the way
        self.room: Optional[Room] = None
        self.total_amount: Optional[float] = None
        self.guest: Optional[Guest] = None
        self.guest_rolled_back = False
        self.confirmation_number: Optional[str] = None
        self.reservation: Optional[Reservation] = None

        # Steps that finished, in execution order
        self.completed_steps: list[str] = []

        self.errors: list[dict[str, str]] = []
        self.success: bool = False

    @property
    def room_id(self) -> Optional[str]:
        return self.reservation_input.room_id

    def add_error(self, step_name: str, error_message: str) -> None:
        """Add an error to the context.

        Args:
            step_name: Name of the step where error occurred
            error_message: Error message
        """
        self.errors.append({
            "step": step_name,
            "message": error_message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def get_results(self) -> dict[str, Any]:
        """Get a summary of the booking attempt for logging.

        Returns:
            Dictionary describing the outcome
        """
        end_time = datetime.now(timezone.utc)
        return {
            "hotel_id": self.hotel_id,
            "success": self.success,
            "confirmation_number": self.confirmation_number,
            "guest_id": self.guest.id if self.guest else None,
            "guest_rolled_back": self.guest_rolled_back,
            "reservation_id": self.reservation.id if self.reservation else None,
            "duration_seconds": (end_time - self.start_time).total_seconds(),
            "completed_steps": self.completed_steps,
            "errors": self.errors,
        }
