"""Forecast output types."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from propcast.models.market import EnhancedPropertyData


@dataclass(frozen=True)
class YearPrediction:
    year: int
    predicted_price: int
    price_change_percent: float
    predicted_yield: float
    confidence: float  # 0-1
    data_quality: float  # 0-1
    area_coverage: str  # "detailed" | "estimated"


class RecommendationLabel(Enum):
    STRONG_SELL = "STRONG_SELL"
    SELL = "SELL"
    HOLD = "HOLD"
    BUY = "BUY"
    STRONG_BUY = "STRONG_BUY"


@dataclass(frozen=True)
class Recommendation:
    label: RecommendationLabel
    score: float
    reasoning: list[str]
    confidence: int  # percent
    data_quality: int  # percent
    area_specific: str = ""
    area_coverage: str = "detailed"
    economic_context: str = ""


@dataclass(frozen=True)
class AreaInfo:
    area_code: str
    region: str
    coverage: str
    data_quality: float


@dataclass(frozen=True)
class PredictionReport:
    postcode: str
    predictions: list[YearPrediction]
    risk_score: int
    recommendation: Recommendation
    area_info: AreaInfo
    data: EnhancedPropertyData
    data_source: str = "real_time"  # "real_time" | "fallback"
    error: str | None = None
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
