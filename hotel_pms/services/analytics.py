"""Dashboard KPIs and chart series from precomputed monthly statistics."""

import math
from typing import Callable, Optional

from structlog import get_logger

from hotel_pms.config import settings
from hotel_pms.config.settings import AnalyticsSettings
from hotel_pms.models import (
    DashboardKPIs,
    DisplayCurrency,
    FutureProjection,
    MonthlyStats,
    OccurredKPIs,
    TrendPoint,
)
from hotel_pms.services.fx import CurrencyConverter, ExchangeRateResolver, MonthLike, parse_month
from hotel_pms.store.base import ReservationStore

logger = get_logger(__name__)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class AnalyticsAggregator:
    """Rolls monthly statistics up into display-currency KPIs.

    Stats are stored in EUR; every amount is converted at read time with
    the month-end rate of the month it belongs to. A missing rate passes
    amounts through unconverted and marks the KPIs as not converted.
    """

    def __init__(
        self,
        store: ReservationStore,
        resolver: Optional[ExchangeRateResolver] = None,
        converter: Optional[CurrencyConverter] = None,
        config: Optional[AnalyticsSettings] = None,
    ):
        self.store = store
        self.resolver = resolver or ExchangeRateResolver(store)
        self.converter = converter or CurrencyConverter()
        self.config = config or settings.analytics

    async def occurred_kpis(
        self,
        hotel_id: str,
        month: MonthLike,
        currency: DisplayCurrency = DisplayCurrency.EUR,
    ) -> OccurredKPIs:
        """KPIs for one month of a hotel in the requested currency.

        Args:
            hotel_id: Hotel to report on
            month: Month identifier
            currency: Display currency

        Returns:
            OccurredKPIs, zeroed when no statistics exist for the month
        """
        currency = DisplayCurrency(currency)
        month_start = parse_month(month)
        stats = await self.store.query_monthly_stats(hotel_id, month_start)
        fx_rate = await self.resolver.resolve(month_start)

        if stats is None:
            logger.info("No monthly stats recorded", hotel_id=hotel_id, month=month_start.isoformat())
            stats = MonthlyStats(hotel_id=hotel_id, month_start=month_start)

        return OccurredKPIs(
            hotel_id=hotel_id,
            month_start=month_start,
            currency=currency,
            total_bookings=stats.total_bookings,
            total_revenue=self.converter.convert(stats.total_revenue_eur, currency, fx_rate),
            adr=self.converter.convert(stats.adr_eur, currency, fx_rate),
            strongest_channel=stats.strongest_channel or "N/A",
            fx_rate_date=fx_rate.rate_date if fx_rate else None,
            converted=self.converter.is_converted(currency, fx_rate),
        )

    def future_projection(self, occurred: OccurredKPIs) -> FutureProjection:
        """Placeholder "future sales" figures.

        A fixed uplift over the month's actuals, not a forecast; the result
        is always flagged as an estimate.
        """
        return FutureProjection(
            future_bookings=_round_half_up(occurred.total_bookings * self.config.future_bookings_uplift),
            future_revenue=_round_half_up(occurred.total_revenue * self.config.future_revenue_uplift),
            future_adr=_round_half_up(occurred.adr * self.config.future_adr_uplift),
            booking_window_days=self.config.booking_window_days,
            is_estimate=True,
        )

    async def dashboard_kpis(
        self,
        hotel_id: str,
        month: MonthLike,
        currency: DisplayCurrency = DisplayCurrency.EUR,
    ) -> DashboardKPIs:
        occurred = await self.occurred_kpis(hotel_id, month, currency)
        return DashboardKPIs(occurred=occurred, future=self.future_projection(occurred))

    async def _trend(
        self,
        hotel_id: str,
        currency: DisplayCurrency,
        value: Callable[[MonthlyStats, float], float],
    ) -> list[TrendPoint]:
        """Chart series over every recorded month, oldest first.

        Args:
            hotel_id: Hotel to report on
            currency: Display currency
            value: Extracts the point value from a month's stats and multiplier

        Returns:
            One TrendPoint per month with statistics
        """
        currency = DisplayCurrency(currency)
        months = sorted(await self.store.list_monthly_stats(hotel_id), key=lambda s: s.month_start)

        points = []
        for stats in months:
            multiplier = 1.0
            if currency is not DisplayCurrency.EUR:
                fx_rate = await self.resolver.resolve(stats.month_start)
                multiplier = self.converter.effective_multiplier(currency, fx_rate)
            points.append(TrendPoint(month_start=stats.month_start, value=value(stats, multiplier)))
        return points

    async def revenue_trend(
        self, hotel_id: str, currency: DisplayCurrency = DisplayCurrency.EUR
    ) -> list[TrendPoint]:
        return await self._trend(hotel_id, currency, lambda s, m: s.total_revenue_eur * m)

    async def adr_trend(
        self, hotel_id: str, currency: DisplayCurrency = DisplayCurrency.EUR
    ) -> list[TrendPoint]:
        return await self._trend(hotel_id, currency, lambda s, m: s.adr_eur * m)

    async def bookings_trend(self, hotel_id: str) -> list[TrendPoint]:
        """Monthly booking counts; counts need no conversion."""
        return await self._trend(hotel_id, DisplayCurrency.EUR, lambda s, m: float(s.total_bookings))
