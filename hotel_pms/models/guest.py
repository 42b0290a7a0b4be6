"""Pydantic models for guests."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from hotel_pms.models.base import StoredRow
from hotel_pms.models.enums import GuestType


class GuestInput(BaseModel):
    """Guest details as entered on the booking form."""

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    id_number: Optional[str] = None
    nationality: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    guest_type: GuestType = GuestType.INDIVIDUAL
    vip: bool = False
    notes: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class GuestCreate(GuestInput):
    """Guest row to insert, scoped to a hotel."""

    hotel_id: str


class Guest(StoredRow, GuestCreate):
    """Stored guest."""

    id: str

    model_config = ConfigDict(extra="ignore")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
