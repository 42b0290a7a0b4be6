"""Pydantic models for the derived room board."""

from typing import Optional

from pydantic import BaseModel, Field

from hotel_pms.models.enums import RoomStatus
from hotel_pms.models.guest import Guest
from hotel_pms.models.hotel import Room
from hotel_pms.models.reservation import Reservation


class RoomProjection(BaseModel):
    """Display status of a room for one day. Derived on read, never stored."""

    room: Room
    display_status: RoomStatus
    occupying_guest: Optional[Guest] = None
    arriving_guest: Optional[Guest] = None
    reservation: Optional[Reservation] = Field(
        default=None,
        description="Reservation that determined the display status, if any",
    )


class FloorGroup(BaseModel):
    floor: Optional[int] = None
    rooms: list[RoomProjection] = Field(default_factory=list)
