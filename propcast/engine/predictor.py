"""Five-year price, yield, risk and recommendation engine.

Pure computation over (postcode, EnhancedPropertyData). Every real-data factor
is optional; when one is missing the engine falls back to the area baseline
for that factor, so any combination of inputs yields a full forecast.

Annual growth for forecast year n:
  (base growth + economic adj + market adj + local adj) x 0.94^(n-1)
"""

import logging
import random
import statistics
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Protocol

from propcast.engine.areas import (
    LONDON,
    NORTHERN_POWERHOUSE,
    SCOTTISH_CITIES,
    WELSH_CITIES,
    AreaTable,
    load_area_table,
)
from propcast.models.area import AreaProfile
from propcast.models.market import EnhancedPropertyData
from propcast.models.prediction import (
    AreaInfo,
    PredictionReport,
    Recommendation,
    RecommendationLabel,
    YearPrediction,
)

logger = logging.getLogger(__name__)

FORECAST_YEARS = 5

GROWTH_DECAY = 0.94  # whole-forecast damping per year
TREND_DECAY = 0.9  # observed sales trend fades toward baseline
ECONOMIC_DECAY = 0.85  # macro effects fade faster

LOCAL_JITTER = 0.15

MIN_CURRENT_YIELD = 2.0
MIN_PREDICTED_YIELD = 1.5

CONFIDENCE_MIN = 0.5
CONFIDENCE_MAX = 0.95

REGIONAL_BONUS = (
    (LONDON, 0.5),  # supply constraint premium
    (NORTHERN_POWERHOUSE, 0.4),
    (SCOTTISH_CITIES, 0.2),
    (WELSH_CITIES, 0.3),
)

# Narrower groupings named in recommendation reasoning
NORTHERN_POWERHOUSE_CORE = frozenset({"M", "L", "LS", "S"})
SCOTTISH_MAJOR_CITIES = frozenset({"G", "EH"})
WELSH_CAPITAL_REGION = frozenset({"CF", "SA"})


class JitterSource(Protocol):
    def uniform(self, a: float, b: float) -> float:
        ...


def round_half_up(value: float, places: int = 0) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def recommendation_label(score: float) -> RecommendationLabel:
    """Map a 0-10ish score onto a non-overlapping label ladder."""
    if score >= 7.5:
        return RecommendationLabel.STRONG_BUY
    if score >= 6:
        return RecommendationLabel.BUY
    if score <= 2:
        return RecommendationLabel.STRONG_SELL
    if score <= 3:
        return RecommendationLabel.SELL
    return RecommendationLabel.HOLD


class PredictionEngine:
    def __init__(
        self,
        area_table: AreaTable | None = None,
        rng: JitterSource | None = None,
        today: Callable[[], date] = date.today,
    ):
        self.areas = area_table or load_area_table()
        self.rng = rng or random.Random()
        self.today = today

    # ── Data quality ─────────────────────────────────────────────

    def data_quality_score(self, data: EnhancedPropertyData) -> float:
        score = 0.7
        if data.economic is not None:
            score += 0.05 * data.economic.live_count
        if data.sale_count > 0:
            score += min(data.sale_count / 10, 0.15)
        if data.has_live_crime:
            score += 0.05
        return max(0.0, min(score, 1.0))

    def area_info(self, postcode: str, data: EnhancedPropertyData) -> AreaInfo:
        profile = self.areas.profile_for(postcode)
        return AreaInfo(
            area_code=profile.area_code,
            region=profile.region,
            coverage=profile.coverage,
            data_quality=round_half_up(self.data_quality_score(data), 2),
        )

    # ── Growth components ────────────────────────────────────────

    def _base_growth(self, profile: AreaProfile, data: EnhancedPropertyData, year: int) -> float:
        trend = data.metrics.price_growth
        if trend is not None:
            return trend * TREND_DECAY ** (year - 1)
        return profile.growth_rate

    def _economic_adjustment(self, data: EnhancedPropertyData, year: int) -> float:
        econ = data.economic
        if econ is None:
            return 0.0
        rate_impact = (6 - econ.base_rate) * 0.4
        inflation_impact = (econ.inflation - 2.5) * 0.25
        gdp_impact = econ.gdp_growth * 0.6
        unemployment_impact = (5 - econ.unemployment_rate) * 0.2
        decay = ECONOMIC_DECAY ** (year - 1)
        return (rate_impact - inflation_impact + gdp_impact + unemployment_impact) * decay

    def _market_adjustment(self, data: EnhancedPropertyData) -> float:
        crime_adjustment = 0.0
        if data.has_live_crime:
            impact = data.metrics.crime_impact
            safety = impact.safety_score if impact is not None else 5.0
            crime_adjustment = (safety - 5) * 0.2

        activity_adjustment = min(data.sale_count / 10, 0.5)
        return crime_adjustment + activity_adjustment

    @staticmethod
    def _property_mix_adjustment(property_types: dict[str, int] | None) -> float:
        if not property_types:
            return 0.0
        adjustment = 0.0
        houses = sum(property_types.get(code, 0) for code in ("D", "S", "T"))
        if property_types.get("F", 0) > houses:
            adjustment -= 0.3
        if property_types.get("D", 0) > 0:
            adjustment += 0.2
        return adjustment

    @staticmethod
    def _regional_adjustment(area_code: str) -> float:
        return sum(bonus for codes, bonus in REGIONAL_BONUS if area_code in codes)

    def _local_adjustment(self, profile: AreaProfile, data: EnhancedPropertyData) -> float:
        jitter = self.rng.uniform(-LOCAL_JITTER, LOCAL_JITTER)
        return (
            self._property_mix_adjustment(data.metrics.property_types)
            + self._regional_adjustment(profile.area_code)
            + jitter
        )

    # ── Yield & confidence ───────────────────────────────────────

    @staticmethod
    def _current_yield(profile: AreaProfile, base_price: float) -> float:
        if base_price > 500_000:
            price_adjustment = -1.5
        elif base_price < 200_000:
            price_adjustment = 1.5
        else:
            price_adjustment = 0.0
        return max(profile.yield_percent + price_adjustment, MIN_CURRENT_YIELD)

    @staticmethod
    def _yield_change(total_growth: float, data: EnhancedPropertyData, year: int) -> float:
        base_change = -total_growth * 0.1
        rent_growth = total_growth * 0.3
        rate_impact = (data.economic.base_rate - 4) * 0.1 if data.economic is not None else 0.0
        return (base_change + rent_growth + rate_impact) / year

    def _confidence(self, profile: AreaProfile, data: EnhancedPropertyData, year: int) -> float:
        confidence = 0.9 - year * 0.05
        confidence *= self.data_quality_score(data)
        confidence *= 0.75 if profile.is_default else 0.95
        if data.sale_count >= 5:
            confidence += 0.05
        if data.economic is not None and data.economic.is_live("bank_rate"):
            confidence += 0.03
        return max(CONFIDENCE_MIN, min(confidence, CONFIDENCE_MAX))

    # ── Public API ───────────────────────────────────────────────

    def generate_predictions(self, postcode: str, data: EnhancedPropertyData) -> list[YearPrediction]:
        profile = self.areas.profile_for(postcode)
        base_price = data.metrics.average_price or profile.base_price
        current_yield = self._current_yield(profile, base_price)
        data_quality = round_half_up(self.data_quality_score(data), 2)
        start_year = self.today().year

        logger.info(
            "Area %s (%s), base price £%s, coverage %s",
            profile.area_code, profile.region, f"{base_price:,}", profile.coverage,
        )

        predictions = []
        price = float(base_price)
        for year in range(1, FORECAST_YEARS + 1):
            total_growth = (
                self._base_growth(profile, data, year)
                + self._economic_adjustment(data, year)
                + self._market_adjustment(data)
                + self._local_adjustment(profile, data)
            ) * GROWTH_DECAY ** (year - 1)

            price *= 1 + total_growth / 100
            predicted_yield = max(
                current_yield + self._yield_change(total_growth, data, year),
                MIN_PREDICTED_YIELD,
            )

            predictions.append(YearPrediction(
                year=start_year + year,
                predicted_price=int(round_half_up(price)),
                price_change_percent=round_half_up(total_growth, 2),
                predicted_yield=round_half_up(predicted_yield, 2),
                confidence=round_half_up(self._confidence(profile, data, year), 2),
                data_quality=data_quality,
                area_coverage=profile.coverage,
            ))

        return predictions

    def calculate_risk(
        self, predictions: list[YearPrediction], postcode: str, data: EnhancedPropertyData
    ) -> int:
        """Risk score 1-10 (higher = riskier)."""
        profile = self.areas.profile_for(postcode)
        changes = [p.price_change_percent for p in predictions]
        avg_growth = statistics.fmean(changes)

        risk = 5.0
        risk += (profile.risk_factor - 1) * 3

        if avg_growth > 6:
            risk += 1.5
        if avg_growth < 1:
            risk += 2

        risk += statistics.pstdev(changes) * 0.5

        econ = data.economic
        if econ is not None:
            if econ.base_rate > 6:
                risk += 1
            if econ.inflation > 5:
                risk += 0.5
            if econ.unemployment_rate > 6:
                risk += 0.5

        if data.crime is not None and data.crime.crime_rate > 500:
            risk += 1

        risk += (1 - self.data_quality_score(data)) * 2

        if profile.is_default:
            risk += 0.5

        return int(min(max(round_half_up(risk), 1), 10))

    def generate_recommendation(
        self,
        predictions: list[YearPrediction],
        risk_score: int,
        postcode: str,
        data: EnhancedPropertyData,
    ) -> Recommendation:
        profile = self.areas.profile_for(postcode)
        avg_growth = statistics.fmean(p.price_change_percent for p in predictions)
        avg_yield = statistics.fmean(p.predicted_yield for p in predictions)

        score = 5.0
        reasoning: list[str] = []

        if avg_growth > 5:
            score += 2
            reasoning.append("Strong growth potential identified")
        elif avg_growth > 3:
            score += 1
            reasoning.append("Moderate growth expected")
        elif avg_growth < 1:
            score -= 2
            reasoning.append("Limited growth potential")

        if avg_yield > 6:
            score += 2
            reasoning.append("Excellent rental yield opportunity")
        elif avg_yield > 4.5:
            score += 1
            reasoning.append("Good rental yield potential")
        elif avg_yield < 3:
            score -= 1
            reasoning.append("Lower rental yield expected")

        if risk_score < 4:
            score += 1
            reasoning.append("Low risk investment")
        elif risk_score > 7:
            score -= 2
            reasoning.append("Higher risk investment")
        else:
            reasoning.append("Moderate risk level")

        econ = data.economic
        if econ is not None:
            if econ.base_rate < 4:
                score += 0.5
                reasoning.append("Favorable interest rate environment")
            elif econ.base_rate > 6:
                score -= 0.5
                reasoning.append("High interest rate headwind")

            if econ.inflation < 3:
                reasoning.append("Stable inflation environment")
            elif econ.inflation > 5:
                score -= 0.5
                reasoning.append("High inflation concern")

        code = profile.area_code
        if code in LONDON:
            reasoning.append("London market premium")
        if code in NORTHERN_POWERHOUSE_CORE:
            reasoning.append("Northern powerhouse growth area")
        if code in SCOTTISH_MAJOR_CITIES:
            reasoning.append("Major Scottish city market")
        if code in WELSH_CAPITAL_REGION:
            reasoning.append("Welsh capital region")

        if data.sale_count > 10:
            score += 0.3
            reasoning.append("Active local market with real sales data")
        elif data.sale_count < 3:
            score -= 0.2
            reasoning.append("Limited recent market activity")

        if data.has_live_crime:
            impact = data.metrics.crime_impact
            safety = impact.safety_score if impact is not None else 5.0
            if safety > 7:
                reasoning.append("Low crime area advantage")
            elif safety < 3:
                score -= 0.5
                reasoning.append("Higher crime area concern")

        data_quality = self.data_quality_score(data)
        if data_quality > 0.8:
            reasoning.append("Based on comprehensive real-time analysis")
        elif profile.is_default:
            reasoning.append("Estimate based on UK averages")
        else:
            reasoning.append("Based on detailed area analysis")

        if econ is not None:
            economic_context = f"Base rate: {econ.base_rate}%, Inflation: {econ.inflation}%"
        else:
            economic_context = "Economic data unavailable"

        return Recommendation(
            label=recommendation_label(score),
            score=round_half_up(score, 1),
            reasoning=reasoning,
            confidence=int(round_half_up((10 - risk_score) * 8 + data_quality * 20)),
            data_quality=int(round_half_up(data_quality * 100)),
            area_specific=profile.region,
            area_coverage=profile.coverage,
            economic_context=economic_context,
        )

    def predict(
        self,
        postcode: str,
        data: EnhancedPropertyData,
        data_source: str = "real_time",
        error: str | None = None,
    ) -> PredictionReport:
        """Run the full pipeline for one postcode."""
        predictions = self.generate_predictions(postcode, data)
        risk_score = self.calculate_risk(predictions, postcode, data)
        recommendation = self.generate_recommendation(predictions, risk_score, postcode, data)
        return PredictionReport(
            postcode=postcode.strip().upper(),
            predictions=predictions,
            risk_score=risk_score,
            recommendation=recommendation,
            area_info=self.area_info(postcode, data),
            data=data,
            data_source=data_source,
            error=error,
        )
