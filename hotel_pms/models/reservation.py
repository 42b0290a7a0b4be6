"""Pydantic models for reservations and reservation queries."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from hotel_pms.models.base import StoredRow
from hotel_pms.models.enums import BookingChannel, ReservationStatus
from hotel_pms.models.guest import Guest


class ReservationInput(BaseModel):
    """Reservation details as entered on the booking form.

    The date order is deliberately not validated here: the orchestrator
    rejects it with InvalidDateRange so the error is tied to the field.
    When `total_amount` is omitted the stay is priced from the room type.
    """

    room_id: Optional[str] = None
    room_type_id: Optional[str] = None
    check_in_date: date
    check_out_date: date
    adults: int = Field(default=1, ge=1)
    children: int = Field(default=0, ge=0)
    total_amount: Optional[float] = Field(default=None, ge=0)
    paid_amount: float = Field(default=0.0, ge=0)
    currency: Optional[str] = None
    channel: BookingChannel = BookingChannel.DIRECT
    commission_rate: float = Field(default=0.0, ge=0, le=100)
    special_requests: Optional[str] = None
    arrival_time: Optional[str] = None

    model_config = ConfigDict(extra="forbid")

    @property
    def nights(self) -> int:
        return (self.check_out_date - self.check_in_date).days


class ReservationCreate(BaseModel):
    """Reservation row to insert."""

    hotel_id: str
    guest_id: str
    room_id: Optional[str] = None
    room_type_id: Optional[str] = None
    confirmation_number: str
    check_in_date: date
    check_out_date: date
    adults: int = Field(default=1, ge=1)
    children: int = Field(default=0, ge=0)
    total_amount: float = Field(default=0.0, ge=0)
    paid_amount: float = Field(default=0.0, ge=0)
    currency: str = "EUR"
    status: ReservationStatus = ReservationStatus.CONFIRMED
    channel: BookingChannel = BookingChannel.DIRECT
    commission_rate: float = Field(default=0.0, ge=0, le=100)
    special_requests: Optional[str] = None
    arrival_time: Optional[str] = None


class Reservation(StoredRow, ReservationCreate):
    """Stored reservation, optionally with its guest embedded."""

    id: str
    guest_id: Optional[str] = None
    guest: Optional[Guest] = None

    model_config = ConfigDict(extra="ignore")

    @property
    def balance_due(self) -> float:
        return max(self.total_amount - self.paid_amount, 0.0)

    def holds_room(self) -> bool:
        """True while the reservation still blocks its room."""
        return self.status in (ReservationStatus.CONFIRMED, ReservationStatus.CHECKED_IN)


class DateRange(BaseModel):
    """Half-open stay range [start, end)."""

    start: date
    end: date


class ReservationFilters(BaseModel):
    """Filters understood by ReservationStore.query_reservations."""

    room_id: Optional[str] = None
    statuses: Optional[list[ReservationStatus]] = None
    exclude_statuses: Optional[list[ReservationStatus]] = None
    exclude_reservation_id: Optional[str] = None
    check_in_date: Optional[date] = None
    overlapping: Optional[DateRange] = None

    def cache_safe(self) -> bool:
        """True when the filter is a plain hotel-wide listing."""
        return self == ReservationFilters()


class ReservationSummary(BaseModel):
    """Front-desk counters for a hotel on a given day."""

    total: int = 0
    checked_in: int = 0
    arrivals_today: int = 0
    departures_today: int = 0
    total_revenue: float = 0.0
    outstanding_balance: float = 0.0
