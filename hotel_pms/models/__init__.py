"""Domain models package."""

from hotel_pms.models.analytics import (
    DashboardKPIs,
    FutureProjection,
    FxRate,
    MonthlyStats,
    OccurredKPIs,
    TrendPoint,
)
from hotel_pms.models.enums import (
    RELEASED_STATUSES,
    BookingChannel,
    DisplayCurrency,
    GuestType,
    ReservationStatus,
    RoomStatus,
)
from hotel_pms.models.guest import Guest, GuestCreate, GuestInput
from hotel_pms.models.hotel import Hotel, Room, RoomType
from hotel_pms.models.reservation import (
    DateRange,
    Reservation,
    ReservationCreate,
    ReservationFilters,
    ReservationInput,
    ReservationSummary,
)
from hotel_pms.models.room_board import FloorGroup, RoomProjection

__all__ = [
    "BookingChannel",
    "DashboardKPIs",
    "DateRange",
    "DisplayCurrency",
    "FutureProjection",
    "FloorGroup",
    "FxRate",
    "Guest",
    "GuestCreate",
    "GuestInput",
    "GuestType",
    "Hotel",
    "MonthlyStats",
    "OccurredKPIs",
    "RELEASED_STATUSES",
    "Reservation",
    "ReservationCreate",
    "ReservationFilters",
    "ReservationInput",
    "ReservationStatus",
    "ReservationSummary",
    "Room",
    "RoomProjection",
    "RoomStatus",
    "RoomType",
    "TrendPoint",
]
