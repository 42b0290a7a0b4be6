"""Exchange-rate lookup and EUR conversion for dashboard aggregates."""

import calendar
from datetime import date
from typing import Optional, Union

from structlog import get_logger

from hotel_pms.errors import FxRateUnavailable
from hotel_pms.models import DisplayCurrency, FxRate
from hotel_pms.store.base import ReservationStore

logger = get_logger(__name__)

MonthLike = Union[str, date]


def parse_month(month: MonthLike) -> date:
    """Normalize a month identifier to the first day of that month.

    Args:
        month: "YYYY-MM", "YYYY-MM-DD" or a date anywhere in the month

    Returns:
        Date of the first day of the month

    Raises:
        ValueError: If the string is not a valid year-month
    """
    if isinstance(month, date):
        return month.replace(day=1)
    parts = month.strip().split("-")
    if len(parts) < 2:
        raise ValueError(f"Invalid month identifier: {month!r} (expected YYYY-MM)")
    return date(int(parts[0]), int(parts[1]), 1)


def month_end(month: MonthLike) -> date:
    """Last calendar day of the month."""
    first = parse_month(month)
    return first.replace(day=calendar.monthrange(first.year, first.month)[1])


class ExchangeRateResolver:
    """Resolves the FX record representing a month.

    The month-end rate represents the whole month. Lookup is exact: when
    no record is dated on the last day of the month there is no rate, and
    nearby dates are never used.
    """

    def __init__(self, store: ReservationStore):
        self.store = store

    async def resolve(self, month: MonthLike) -> Optional[FxRate]:
        """Get the FX record for a month, or None when none was recorded.

        Args:
            month: Month identifier

        Returns:
            FxRate dated on the month's last day, or None
        """
        rate_date = month_end(month)
        fx_rate = await self.store.query_fx_rate(rate_date)
        if fx_rate is None:
            logger.info("No FX rate recorded for month end", rate_date=rate_date.isoformat())
        return fx_rate


class CurrencyConverter:
    """Converts EUR-denominated amounts into a display currency."""

    @staticmethod
    def multiplier(currency: DisplayCurrency, fx_rate: Optional[FxRate]) -> float:
        """EUR multiplier for the target currency.

        Raises:
            FxRateUnavailable: If a non-EUR currency is requested without a rate
        """
        currency = DisplayCurrency(currency)
        if currency is DisplayCurrency.EUR:
            return 1.0
        if fx_rate is None:
            raise FxRateUnavailable(details={"currency": currency.value})
        if currency is DisplayCurrency.USD:
            return fx_rate.eur_to_usd
        return fx_rate.eur_to_try

    def effective_multiplier(self, currency: DisplayCurrency, fx_rate: Optional[FxRate]) -> float:
        """Multiplier with the pass-through policy applied (1.0 when no rate)."""
        try:
            return self.multiplier(currency, fx_rate)
        except FxRateUnavailable:
            logger.warning(
                "FX rate unavailable, showing amounts unconverted",
                currency=DisplayCurrency(currency).value,
            )
            return 1.0

    def convert(
        self,
        amount_eur: float,
        currency: DisplayCurrency,
        fx_rate: Optional[FxRate],
    ) -> float:
        """Convert an EUR amount; unrounded, rounding belongs to display."""
        return amount_eur * self.effective_multiplier(currency, fx_rate)

    @staticmethod
    def is_converted(currency: DisplayCurrency, fx_rate: Optional[FxRate]) -> bool:
        """False when a non-EUR currency falls back to pass-through."""
        return DisplayCurrency(currency) is DisplayCurrency.EUR or fx_rate is not None
