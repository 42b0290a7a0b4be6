"""Reservation creation as a compensating pipeline of steps."""

from .base_step import BookingStep
from .context import BookingContext
from .orchestrator import ReservationOrchestrator
from .pipeline import BookingPipeline

__all__ = [
    "BookingContext",
    "BookingPipeline",
    "BookingStep",
    "ReservationOrchestrator",
]
