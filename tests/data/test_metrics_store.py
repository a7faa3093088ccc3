"""Tests for the persisted metrics store helpers."""

from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from propcast.data.metrics_store import MetricsStore, baseline_metrics, metrics_to_dict, nearby_to_dict
from propcast.models.db import InvestmentMetricsRecord, PropertyAreaRecord


def test_metrics_to_dict_converts_decimals():
    record = InvestmentMetricsRecord(
        postcode="M1 1AE",
        avg_price=Decimal("285000.00"),
        price_growth_12m=Decimal("5.20"),
        rental_yield=Decimal("5.80"),
        school_rating="Good",
        new_developments=3,
        data_confidence=Decimal("0.90"),
        last_updated=datetime(2025, 1, 1, 6, 0),
    )
    result = metrics_to_dict(record)
    assert result["avg_price"] == 285000.0
    assert result["rental_yield"] == 5.8
    assert result["investment_score"] is None
    assert result["new_developments"] == 3
    assert result["last_updated"] == "2025-01-01T06:00:00"


def test_baseline_for_known_area(area_table):
    metrics = baseline_metrics("sw1a 1aa", area_table.profile_for("SW1A 1AA"))
    assert metrics["postcode"] == "SW1A 1AA"
    assert metrics["avg_price"] == 750000.0
    assert metrics["region"] == "London Southwest"
    assert metrics["data_confidence"] == 0.7


def test_baseline_for_unknown_area(area_table):
    metrics = baseline_metrics("ZZ9 9ZZ", area_table.profile_for("ZZ9 9ZZ"))
    assert metrics["region"] == "UK Average"
    assert metrics["data_confidence"] == 0.5


async def test_stamp_refresh_commits():
    session = AsyncMock()
    session.execute.return_value = MagicMock(rowcount=12)

    assert await MetricsStore(session).stamp_refresh() == 12
    session.commit.assert_awaited_once()


async def test_missing_metrics_row():
    session = AsyncMock()
    result = MagicMock()
    result.scalar_one_or_none.return_value = None
    session.execute.return_value = result

    assert await MetricsStore(session).get_investment_metrics("M1 1AE") is None


def _area(postcode, lat, lng):
    return (
        InvestmentMetricsRecord(postcode=postcode, avg_price=Decimal("250000.00")),
        PropertyAreaRecord(postcode=postcode, district=None, latitude=lat, longitude=lng),
    )


async def test_nearby_filters_by_distance_and_sorts():
    session = AsyncMock()
    result = MagicMock()
    # bounding-box candidates: ~3.3km, ~0.2km, and a box corner ~6.6km away
    result.all.return_value = [
        _area("M14 5AA", 53.4500, -2.2426),
        _area("M1 1AE", 53.4794, -2.2453),
        _area("M8 0AA", 53.5250, -2.1750),
    ]
    session.execute.return_value = result

    nearby = await MetricsStore(session).get_nearby(53.4808, -2.2426, 5.0)

    assert [record.postcode for record, _, _ in nearby] == ["M1 1AE", "M14 5AA"]
    assert nearby[0][2] < 0.5
    assert nearby[1][2] == pytest.approx(3.43, abs=0.1)


def test_nearby_to_dict_rounds_distance():
    record, area = _area("M1 1AE", 53.4794, -2.2453)
    result = nearby_to_dict(record, area, 0.23456)
    assert result["distance_km"] == 0.23
    assert result["latitude"] == 53.4794
    assert result["avg_price"] == 250000.0
