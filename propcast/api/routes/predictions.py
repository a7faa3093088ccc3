"""Prediction routes, the primary API entry point."""

from fastapi import APIRouter, Depends, Query

from propcast.api.deps import get_engine, get_provider
from propcast.api.schemas import (
    AreaInfoResponse,
    CrimeImpactResponse,
    CrimeResponse,
    DataQualityResponse,
    EconomicImpactResponse,
    EconomicResponse,
    EnhancedMetricsResponse,
    ErrorResponse,
    PredictionResponse,
    RealTimeDataResponse,
    RecommendationResponse,
    SaleResponse,
    YearPredictionResponse,
)
from propcast.data.provider import RealTimeDataProvider
from propcast.engine.forecast import forecast_postcode
from propcast.engine.predictor import PredictionEngine
from propcast.models.market import EconomicSnapshot
from propcast.models.prediction import PredictionReport

router = APIRouter(prefix="/api/v1", tags=["predictions"])

RECENT_SALES_IN_RESPONSE = 5


def economic_to_response(econ: EconomicSnapshot | None) -> EconomicResponse | None:
    if econ is None:
        return None
    return EconomicResponse(
        base_rate=econ.base_rate,
        inflation=econ.inflation,
        unemployment_rate=econ.unemployment_rate,
        gdp_growth=econ.gdp_growth,
        data_sources={k: v.value for k, v in econ.data_sources.items()},
        last_updated=econ.last_updated,
    )


def _report_to_response(report: PredictionReport) -> PredictionResponse:
    """Convert an engine PredictionReport to the API response."""
    data = report.data
    metrics = data.metrics
    rec = report.recommendation

    real_time = RealTimeDataResponse(
        economic=economic_to_response(data.economic),
        recent_sales=[
            SaleResponse(
                price=s.price,
                date=s.date,
                property_type=s.property_type.value,
                tenure=s.tenure,
                address=s.address,
                postcode=s.postcode,
                new_build=s.new_build,
            )
            for s in data.recent_sales[:RECENT_SALES_IN_RESPONSE]
        ],
        crime_data=(
            CrimeResponse(
                total_crimes=data.crime.total_crimes,
                crime_rate=data.crime.crime_rate,
                categories=data.crime.categories,
                source=data.crime.source.value,
            )
            if data.crime is not None else None
        ),
        enhanced_metrics=EnhancedMetricsResponse(
            average_price=metrics.average_price,
            price_growth=metrics.price_growth,
            property_types=metrics.property_types,
            economic_impact=(
                EconomicImpactResponse(**vars(metrics.economic_impact))
                if metrics.economic_impact is not None else None
            ),
            crime_impact=(
                CrimeImpactResponse(**vars(metrics.crime_impact))
                if metrics.crime_impact is not None else None
            ),
        ),
    )

    quality = data.data_quality
    return PredictionResponse(
        postcode=report.postcode,
        predictions=[YearPredictionResponse(**vars(p)) for p in report.predictions],
        risk_score=report.risk_score,
        recommendation=RecommendationResponse(
            label=rec.label.value,
            score=rec.score,
            reasoning=rec.reasoning,
            confidence=rec.confidence,
            data_quality=rec.data_quality,
            area_specific=rec.area_specific,
            area_coverage=rec.area_coverage,
            economic_context=rec.economic_context,
        ),
        area_info=AreaInfoResponse(**vars(report.area_info)),
        real_time_data=real_time,
        data_quality=DataQualityResponse(
            economic={k: v.value for k, v in quality.economic.items()},
            recent_sales=quality.recent_sales.value,
            crime=quality.crime.value,
        ),
        data_source=report.data_source,
        error=report.error,
        generated_at=report.generated_at,
    )


@router.get(
    "/predictions",
    response_model=PredictionResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_predictions(
    postcode: str | None = Query(None, description="UK postcode or outward code"),
    provider: RealTimeDataProvider = Depends(get_provider),
    engine: PredictionEngine = Depends(get_engine),
):
    """Five-year price/yield forecast, risk score and recommendation for a postcode.

    ValidationError (400) and ComputationError (500) are mapped by the app's
    exception handlers.
    """
    report = await forecast_postcode(postcode, provider, engine)
    return _report_to_response(report)
