"""Tests for real-time data fusion."""

import pytest

from propcast.engine.fusion import economic_impact, fuse, price_growth_trend, safety_score
from propcast.models.market import CrimeSnapshot


class TestPriceTrend:
    def test_too_few_prices(self):
        assert price_growth_trend([300_000, 290_000]) is None

    def test_newest_three_vs_oldest_three(self):
        prices = [330_000, 330_000, 330_000, 300_000, 300_000, 300_000]
        assert price_growth_trend(prices) == pytest.approx(10.0)

    def test_falling_market(self):
        assert price_growth_trend([270_000, 270_000, 270_000, 300_000, 300_000, 300_000]) == pytest.approx(-10.0)


class TestFuse:
    def test_nothing_available(self):
        metrics = fuse(None, [], None)
        assert metrics.average_price is None
        assert metrics.price_growth is None
        assert metrics.property_types is None
        assert metrics.economic_impact is None
        assert metrics.crime_impact is None

    def test_sales_only(self, sales_factory):
        sales = sales_factory([400_000, 300_000])
        metrics = fuse(None, sales, None)
        assert metrics.average_price == 350_000
        assert metrics.price_growth is None  # fewer than three sales
        assert metrics.property_types == {"F": 2}

    def test_average_price_rounded(self, sales_factory):
        metrics = fuse(None, sales_factory([100_000, 100_001]), None)
        assert isinstance(metrics.average_price, int)

    def test_economic_impact(self, live_economic):
        impact = economic_impact(live_economic)
        assert impact.interest_rate_effect == pytest.approx(0.5)
        assert impact.inflation_effect == 0.5
        assert impact.unemployment_effect == 0.3

    def test_crime_impact(self):
        metrics = fuse(None, None, CrimeSnapshot(total_crimes=20, crime_rate=240.0))
        assert metrics.crime_impact.crime_rate == 240.0
        assert metrics.crime_impact.safety_score == pytest.approx(5.2)


class TestSafetyScore:
    def test_floor_of_one(self):
        assert safety_score(5000) == 1.0

    def test_zero_crime_is_ten(self):
        assert safety_score(0) == 10.0
