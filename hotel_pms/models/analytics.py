"""Pydantic models for monthly statistics, exchange rates and dashboard KPIs."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from hotel_pms.models.base import StoredRow
from hotel_pms.models.enums import DisplayCurrency


class FxRate(BaseModel):
    """EUR-based exchange rates recorded for one calendar day."""

    rate_date: date
    eur_to_usd: float = Field(gt=0)
    eur_to_try: float = Field(gt=0)

    model_config = ConfigDict(extra="ignore")


class MonthlyStats(StoredRow):
    """Precomputed per-hotel monthly aggregate, stored in EUR."""

    id: Optional[str] = None
    hotel_id: Optional[str] = None
    month_start: date
    total_bookings: int = 0
    total_revenue_eur: float = 0.0
    adr_eur: float = 0.0
    strongest_channel: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class OccurredKPIs(BaseModel):
    """KPIs for stays that already happened, in the display currency."""

    hotel_id: str
    month_start: date
    currency: DisplayCurrency
    total_bookings: int
    total_revenue: float
    adr: float
    strongest_channel: str = "N/A"
    fx_rate_date: Optional[date] = None
    converted: bool = Field(
        default=False,
        description="False when amounts were passed through unconverted",
    )


class FutureProjection(BaseModel):
    """Placeholder forward-looking KPIs.

    Computed as a fixed uplift over the month's actuals; this is not a
    forecast and is always flagged as an estimate.
    """

    future_bookings: int
    future_revenue: float
    future_adr: float
    booking_window_days: int
    is_estimate: bool = True


class TrendPoint(BaseModel):
    """One month of a dashboard chart series."""

    month_start: date
    value: float


class DashboardKPIs(BaseModel):
    occurred: OccurredKPIs
    future: FutureProjection
