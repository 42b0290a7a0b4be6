"""Reservation and room-state services."""

from hotel_pms.services.fx import CurrencyConverter, ExchangeRateResolver, month_end, parse_month
from hotel_pms.services.availability import AvailabilityChecker, ranges_overlap
from hotel_pms.services.confirmation import ConfirmationCodeGenerator
from hotel_pms.services.room_status import RoomStatusProjector
from hotel_pms.services.analytics import AnalyticsAggregator
from hotel_pms.services.booking import ReservationOrchestrator
from hotel_pms.services.reservation_service import ReservationService
from hotel_pms.services.housekeeping import HousekeepingService

__all__ = [
    "AnalyticsAggregator",
    "AvailabilityChecker",
    "ConfirmationCodeGenerator",
    "CurrencyConverter",
    "ExchangeRateResolver",
    "HousekeepingService",
    "ReservationOrchestrator",
    "ReservationService",
    "RoomStatusProjector",
    "month_end",
    "parse_month",
    "ranges_overlap",
]
