"""Booking step implementations, in execution order."""

from .validate_dates_step import ValidateDatesStep
from .check_availability_step import CheckAvailabilityStep
from .price_stay_step import PriceStayStep
from .create_guest_step import CreateGuestStep
from .generate_confirmation_step import GenerateConfirmationStep
from .insert_reservation_step import InsertReservationStep

__all__ = [
    "ValidateDatesStep",
    "CheckAvailabilityStep",
    "PriceStayStep",
    "CreateGuestStep",
    "GenerateConfirmationStep",
    "InsertReservationStep",
]
