"""Tests for dashboard KPIs and trend series."""

from datetime import date

import pytest

from fakes import HOTEL_ID
from hotel_pms.config.settings import AnalyticsSettings
from hotel_pms.models import DisplayCurrency, FxRate, MonthlyStats, OccurredKPIs
from hotel_pms.services.analytics import AnalyticsAggregator


@pytest.fixture
def aggregator(store):
    return AnalyticsAggregator(store, config=AnalyticsSettings())


class TestOccurredKPIs:
    """Tests for AnalyticsAggregator.occurred_kpis."""

    @pytest.mark.asyncio
    async def test_converts_with_month_end_rate(self, store, aggregator, january_stats, fx_january):
        store.monthly_stats.append(january_stats)
        store.fx_rates[fx_january.rate_date] = fx_january

        kpis = await aggregator.occurred_kpis(HOTEL_ID, "2024-01", DisplayCurrency.USD)

        assert kpis.total_bookings == 40
        assert kpis.total_revenue == pytest.approx(12960.0)
        assert kpis.adr == pytest.approx(162.0)
        assert kpis.strongest_channel == "booking_com"
        assert kpis.fx_rate_date == date(2024, 1, 31)
        assert kpis.converted is True

    @pytest.mark.asyncio
    async def test_missing_rate_passes_usd_through(self, store, aggregator, january_stats):
        store.monthly_stats.append(january_stats)

        kpis = await aggregator.occurred_kpis(HOTEL_ID, "2024-01", DisplayCurrency.USD)

        assert kpis.total_revenue == january_stats.total_revenue_eur
        assert kpis.adr == january_stats.adr_eur
        assert kpis.converted is False
        assert kpis.fx_rate_date is None

    @pytest.mark.asyncio
    async def test_eur_needs_no_rate(self, store, aggregator, january_stats):
        store.monthly_stats.append(january_stats)

        kpis = await aggregator.occurred_kpis(HOTEL_ID, "2024-01", DisplayCurrency.EUR)

        assert kpis.total_revenue == 12000.0
        assert kpis.converted is True

    @pytest.mark.asyncio
    async def test_month_without_stats_is_zeroed(self, aggregator):
        kpis = await aggregator.occurred_kpis(HOTEL_ID, "2024-05", DisplayCurrency.TRY)

        assert kpis.total_bookings == 0
        assert kpis.total_revenue == 0.0
        assert kpis.strongest_channel == "N/A"


class TestFutureProjection:
    """Tests for the placeholder future figures."""

    def test_fixed_uplift_rounded_half_up(self, aggregator):
        occurred = OccurredKPIs(
            hotel_id=HOTEL_ID,
            month_start=date(2024, 1, 1),
            currency=DisplayCurrency.EUR,
            total_bookings=30,
            total_revenue=1000.0,
            adr=150.0,
        )

        future = aggregator.future_projection(occurred)

        assert future.future_bookings == 35  # 34.5 rounds up
        assert future.future_revenue == 1080
        assert future.future_adr == 158  # 157.5 rounds up
        assert future.booking_window_days == 45
        assert future.is_estimate is True

    @pytest.mark.asyncio
    async def test_dashboard_kpis_bundles_both(self, store, aggregator, january_stats):
        store.monthly_stats.append(january_stats)

        dashboard = await aggregator.dashboard_kpis(HOTEL_ID, "2024-01")

        assert dashboard.occurred.total_bookings == 40
        assert dashboard.future.future_bookings == 46
        assert dashboard.future.is_estimate is True


class TestTrends:
    """Tests for monthly chart series."""

    @pytest.fixture
    def two_months(self, store, january_stats, fx_january):
        store.monthly_stats.append(
            MonthlyStats(
                hotel_id=HOTEL_ID,
                month_start=date(2024, 2, 1),
                total_bookings=30,
                total_revenue_eur=9000.0,
                adr_eur=140.0,
            )
        )
        store.monthly_stats.append(january_stats)
        store.fx_rates[fx_january.rate_date] = fx_january
        store.fx_rates[date(2024, 2, 29)] = FxRate(
            rate_date=date(2024, 2, 29), eur_to_usd=1.10, eur_to_try=34.0
        )

    @pytest.mark.asyncio
    async def test_revenue_trend_uses_each_months_rate(self, aggregator, two_months):
        points = await aggregator.revenue_trend(HOTEL_ID, DisplayCurrency.USD)

        assert [p.month_start for p in points] == [date(2024, 1, 1), date(2024, 2, 1)]
        assert points[0].value == pytest.approx(12960.0)
        assert points[1].value == pytest.approx(9900.0)

    @pytest.mark.asyncio
    async def test_adr_trend_in_eur(self, aggregator, two_months):
        points = await aggregator.adr_trend(HOTEL_ID)

        assert [p.value for p in points] == [150.0, 140.0]

    @pytest.mark.asyncio
    async def test_bookings_trend_is_not_converted(self, store, aggregator, two_months):
        points = await aggregator.bookings_trend(HOTEL_ID)

        assert [p.value for p in points] == [40.0, 30.0]
        assert store.calls_to("query_fx_rate") == 0

    @pytest.mark.asyncio
    async def test_trend_without_stats_is_empty(self, aggregator):
        assert await aggregator.revenue_trend("hotel-none", DisplayCurrency.USD) == []
