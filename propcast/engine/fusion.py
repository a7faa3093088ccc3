"""Derive market metrics from whichever real-time sources succeeded.

Never fails: a missing input leaves its derived field as None, and the
prediction engine then uses the area baseline for that factor.
"""

from collections import Counter

from propcast.models.market import (
    CrimeImpact,
    CrimeSnapshot,
    EconomicImpact,
    EconomicSnapshot,
    EnhancedMetrics,
    SaleRecord,
)

TREND_WINDOW = 3


def _mean(values: list[int]) -> float:
    return sum(values) / len(values)


def price_growth_trend(prices: list[int]) -> float | None:
    """Percent change from the oldest three to the newest three prices.

    `prices` must be ordered newest first. Works on the capped sales window,
    not the full transaction history.
    """
    if len(prices) < TREND_WINDOW:
        return None
    new_avg = _mean(prices[:TREND_WINDOW])
    old_avg = _mean(prices[-TREND_WINDOW:])
    return (new_avg - old_avg) / old_avg * 100


def economic_impact(economic: EconomicSnapshot) -> EconomicImpact:
    return EconomicImpact(
        interest_rate_effect=(6 - economic.base_rate) * 0.5,
        inflation_effect=0.5 if economic.inflation <= 3 else -0.5,
        unemployment_effect=0.3 if economic.unemployment_rate <= 5 else -0.3,
    )


def safety_score(crime_rate: float) -> float:
    """1-10, higher is safer."""
    return max(1.0, 10 - crime_rate / 50)


def fuse(
    economic: EconomicSnapshot | None,
    sales: list[SaleRecord] | None,
    crime: CrimeSnapshot | None,
) -> EnhancedMetrics:
    average_price = None
    price_growth = None
    property_types = None

    if sales:
        prices = [s.price for s in sales if s.price > 0]
        if prices:
            average_price = round(_mean(prices))
            price_growth = price_growth_trend(prices)
        property_types = dict(Counter(s.property_type.value for s in sales))

    return EnhancedMetrics(
        average_price=average_price,
        price_growth=price_growth,
        property_types=property_types,
        economic_impact=economic_impact(economic) if economic is not None else None,
        crime_impact=(
            CrimeImpact(crime_rate=crime.crime_rate, safety_score=safety_score(crime.crime_rate))
            if crime is not None else None
        ),
    )
