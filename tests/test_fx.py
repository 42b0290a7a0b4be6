"""Tests for month-end rate lookup and currency conversion."""

from datetime import date

import pytest

from hotel_pms.errors import FxRateUnavailable
from hotel_pms.models import DisplayCurrency, FxRate
from hotel_pms.services.fx import CurrencyConverter, ExchangeRateResolver, month_end, parse_month


class TestMonthHelpers:
    """Tests for month parsing and month-end computation."""

    @pytest.mark.parametrize(
        "month, expected",
        [
            ("2024-01", date(2024, 1, 31)),
            ("2024-02", date(2024, 2, 29)),
            ("2023-02", date(2023, 2, 28)),
            ("2024-04", date(2024, 4, 30)),
            ("2024-12-15", date(2024, 12, 31)),
            (date(2024, 6, 10), date(2024, 6, 30)),
        ],
    )
    def test_month_end(self, month, expected):
        assert month_end(month) == expected

    def test_parse_month_returns_first_day(self):
        assert parse_month("2024-03") == date(2024, 3, 1)
        assert parse_month(date(2024, 3, 17)) == date(2024, 3, 1)

    def test_parse_month_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_month("March")


class TestExchangeRateResolver:
    """Tests for ExchangeRateResolver."""

    @pytest.mark.asyncio
    async def test_resolves_month_end_record(self, store, fx_january):
        store.fx_rates[fx_january.rate_date] = fx_january

        assert await ExchangeRateResolver(store).resolve("2024-01") == fx_january

    @pytest.mark.asyncio
    async def test_no_fallback_to_nearby_dates(self, store):
        """A rate recorded the day before month end is not used."""
        store.fx_rates[date(2024, 1, 30)] = FxRate(
            rate_date=date(2024, 1, 30), eur_to_usd=1.1, eur_to_try=34.0
        )

        assert await ExchangeRateResolver(store).resolve("2024-01") is None


class TestCurrencyConverter:
    """Tests for CurrencyConverter."""

    @pytest.mark.parametrize("amount", [0.0, 1.0, 99.99, 12345.678, -5.0])
    def test_eur_is_identity(self, amount, fx_january):
        converter = CurrencyConverter()

        assert converter.convert(amount, DisplayCurrency.EUR, fx_january) == amount
        assert converter.convert(amount, DisplayCurrency.EUR, None) == amount

    def test_converts_with_record_fields(self, fx_january):
        converter = CurrencyConverter()

        assert converter.convert(100.0, DisplayCurrency.USD, fx_january) == pytest.approx(108.0)
        assert converter.convert(100.0, DisplayCurrency.TRY, fx_january) == pytest.approx(3300.0)

    def test_accepts_plain_currency_codes(self, fx_january):
        assert CurrencyConverter().convert(10.0, "usd", fx_january) == pytest.approx(10.8)

    def test_missing_rate_passes_through(self):
        converter = CurrencyConverter()

        assert converter.convert(250.5, DisplayCurrency.USD, None) == 250.5
        assert converter.convert(250.5, DisplayCurrency.TRY, None) == 250.5
        assert converter.is_converted(DisplayCurrency.USD, None) is False

    def test_multiplier_signals_missing_rate(self):
        with pytest.raises(FxRateUnavailable):
            CurrencyConverter.multiplier(DisplayCurrency.USD, None)

    def test_result_is_not_rounded(self):
        fx_rate = FxRate(rate_date=date(2024, 1, 31), eur_to_usd=1.0837, eur_to_try=33.0)

        assert CurrencyConverter().convert(3.0, DisplayCurrency.USD, fx_rate) == pytest.approx(3.2511)
