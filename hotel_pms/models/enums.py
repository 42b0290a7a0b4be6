"""Closed status and category enums mirroring the backend's Postgres enums."""

from enum import Enum


class RoomStatus(str, Enum):
    """Stored operational/housekeeping status of a room."""

    AVAILABLE = "available"
    OCCUPIED = "occupied"
    OUT_OF_ORDER = "out_of_order"
    MAINTENANCE = "maintenance"
    DIRTY = "dirty"
    CLEAN = "clean"


class ReservationStatus(str, Enum):
    """Reservation lifecycle status.

    - confirmed -> checked_in | cancelled | no_show
    - checked_in -> checked_out
    """

    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


# Statuses that no longer hold the room
RELEASED_STATUSES = frozenset(
    {ReservationStatus.CANCELLED, ReservationStatus.NO_SHOW, ReservationStatus.CHECKED_OUT}
)


class BookingChannel(str, Enum):
    """Sales channel a reservation came through."""

    DIRECT = "direct"
    BOOKING_COM = "booking_com"
    EXPEDIA = "expedia"
    AIRBNB = "airbnb"
    WALK_IN = "walk_in"
    PHONE = "phone"


class GuestType(str, Enum):
    INDIVIDUAL = "individual"
    GROUP = "group"
    CORPORATE = "corporate"


class DisplayCurrency(str, Enum):
    """Currencies the dashboard can display aggregates in (EUR is canonical)."""

    EUR = "eur"
    USD = "usd"
    TRY = "try"
