"""Pydantic models for hotels, room types and rooms."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from hotel_pms.models.base import StoredRow
from hotel_pms.models.enums import RoomStatus


class Hotel(BaseModel):
    """Hotel record; root scope of every other entity."""

    id: str
    name: str
    city: Optional[str] = None
    brand_color: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class RoomType(StoredRow):
    """Room category with its nightly base rate."""

    id: str
    name: str
    description: Optional[str] = None
    base_rate: float = Field(default=0.0, ge=0)
    max_occupancy: int = Field(default=2, ge=1)
    amenities: list[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")


class Room(StoredRow):
    """Physical room.

    `status` is the stored housekeeping/operational state; occupancy is
    derived from reservations by the room status projector.
    """

    id: str
    hotel_id: str
    room_number: str
    room_type_id: Optional[str] = None
    floor: Optional[int] = None
    status: RoomStatus = RoomStatus.AVAILABLE
    notes: Optional[str] = None
    room_type: Optional[RoomType] = None

    model_config = ConfigDict(extra="ignore")

    @property
    def nightly_rate(self) -> float:
        """Base rate inherited from the room type, 0 when untyped."""
        return self.room_type.base_rate if self.room_type else 0.0
