"""Pydantic schemas for API responses. JSON keys are camelCase."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---- Prediction ----

class YearPredictionResponse(ApiModel):
    year: int
    predicted_price: int
    price_change_percent: float
    predicted_yield: float
    confidence: float
    data_quality: float
    area_coverage: str


class RecommendationResponse(ApiModel):
    label: str
    score: float
    reasoning: list[str]
    confidence: int
    data_quality: int
    area_specific: str
    area_coverage: str
    economic_context: str


class AreaInfoResponse(ApiModel):
    area_code: str
    region: str
    coverage: str
    data_quality: float


# ---- Real-time data ----

class EconomicResponse(ApiModel):
    base_rate: float
    inflation: float
    unemployment_rate: float
    gdp_growth: float
    data_sources: dict[str, str]
    last_updated: datetime


class SaleResponse(ApiModel):
    price: int
    date: date
    property_type: str
    tenure: str
    address: str
    postcode: str
    new_build: bool


class CrimeResponse(ApiModel):
    total_crimes: int
    crime_rate: float
    categories: dict[str, int]
    source: str


class EconomicImpactResponse(ApiModel):
    interest_rate_effect: float
    inflation_effect: float
    unemployment_effect: float


class CrimeImpactResponse(ApiModel):
    crime_rate: float
    safety_score: float


class EnhancedMetricsResponse(ApiModel):
    average_price: int | None = None
    price_growth: float | None = None
    property_types: dict[str, int] | None = None
    economic_impact: EconomicImpactResponse | None = None
    crime_impact: CrimeImpactResponse | None = None


class RealTimeDataResponse(ApiModel):
    economic: EconomicResponse | None = None
    recent_sales: list[SaleResponse] = []
    crime_data: CrimeResponse | None = None
    enhanced_metrics: EnhancedMetricsResponse


class DataQualityResponse(ApiModel):
    economic: dict[str, str]
    recent_sales: str
    crime: str


class PredictionResponse(ApiModel):
    success: bool = True
    postcode: str
    predictions: list[YearPredictionResponse]
    risk_score: int
    recommendation: RecommendationResponse
    area_info: AreaInfoResponse
    real_time_data: RealTimeDataResponse
    data_quality: DataQualityResponse
    data_source: str
    error: str | None = None
    generated_at: datetime


class ErrorResponse(ApiModel):
    success: bool = False
    error: str
    postcode: str | None = None


# ---- Property data / refresh ----

class PropertyDataResponse(ApiModel):
    success: bool = True
    postcode: str
    metrics: dict
    recent_sales: list[dict] = []
    crime_data: list[dict] = []
    transport_data: list[dict] = []
    source: str  # "database" | "generated"
    last_updated: datetime


class NearbyAreasResponse(ApiModel):
    success: bool = True
    latitude: float
    longitude: float
    radius_km: float
    areas: list[dict]
    count: int
    source: str  # "database" | "generated"
    last_updated: datetime


class RefreshResponse(ApiModel):
    success: bool = True
    message: str
    economic_sources: dict[str, str]
    metrics_rows_updated: int | None = None
    timestamp: datetime
