"""Shared fixtures.

Canonical inputs: SW1A 1AA (London Southwest, £750K base, 3.7% growth)
with zero local jitter and no real-time data forecasts 4.2% in year one.
"""

from datetime import date, datetime, timezone

import pytest

from propcast.engine.areas import AreaTable, load_area_table
from propcast.engine.fusion import fuse
from propcast.engine.predictor import PredictionEngine
from propcast.models.market import (
    CrimeSnapshot,
    DataQuality,
    EconomicSnapshot,
    EnhancedPropertyData,
    PropertyType,
    SaleRecord,
    SourceStatus,
)


class ZeroJitter:
    """Stands in for random.Random: always returns the midpoint."""

    def uniform(self, a: float, b: float) -> float:
        return (a + b) / 2


@pytest.fixture
def area_table() -> AreaTable:
    return load_area_table()


@pytest.fixture
def engine(area_table) -> PredictionEngine:
    return PredictionEngine(area_table, rng=ZeroJitter(), today=lambda: date(2025, 6, 1))


@pytest.fixture
def live_economic() -> EconomicSnapshot:
    return EconomicSnapshot(
        base_rate=5.0,
        inflation=3.0,
        unemployment_rate=4.0,
        gdp_growth=0.5,
        data_sources={
            "bank_rate": SourceStatus.LIVE,
            "inflation": SourceStatus.LIVE,
            "unemployment": SourceStatus.LIVE,
            "gdp_growth": SourceStatus.LIVE,
        },
        last_updated=datetime(2025, 6, 1, tzinfo=timezone.utc),
    )


def make_sales(prices: list[int], postcode: str = "SW1A 1AA", property_type: str = "F") -> list[SaleRecord]:
    """Sales ordered newest first, one month apart."""
    return [
        SaleRecord(
            price=price,
            date=date(2025, 12 - i, 1),
            property_type=PropertyType.from_code(property_type),
            tenure="L",
            address=f"{i + 1} Example Street",
            postcode=postcode,
        )
        for i, price in enumerate(prices)
    ]


@pytest.fixture
def full_data(live_economic) -> EnhancedPropertyData:
    """Every source live: 6 sales, live economy, live crime."""
    sales = make_sales([820_000, 800_000, 790_000, 760_000, 750_000, 740_000])
    crime = CrimeSnapshot(total_crimes=10, crime_rate=120.0, categories={"burglary": 10})
    return EnhancedPropertyData(
        postcode="SW1A 1AA",
        economic=live_economic,
        recent_sales=sales,
        crime=crime,
        metrics=fuse(live_economic, sales, crime),
        data_quality=DataQuality(
            economic=dict(live_economic.data_sources),
            recent_sales=SourceStatus.LIVE,
            crime=SourceStatus.LIVE,
        ),
    )


@pytest.fixture
def sales_factory():
    return make_sales
