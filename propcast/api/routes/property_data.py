"""Stored property data routes (read-through with area-baseline fallback)."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError

from propcast.api.deps import get_area_table, get_metrics_store, get_provider
from propcast.api.schemas import ErrorResponse, NearbyAreasResponse, PropertyDataResponse
from propcast.data.metrics_store import MetricsStore, baseline_metrics, metrics_to_dict, nearby_to_dict
from propcast.data.provider import RealTimeDataProvider
from propcast.engine.areas import AreaTable
from propcast.engine.geo import DEFAULT_RADIUS_KM, validate_coordinates
from propcast.engine.postcode import validate_postcode
from propcast.errors import UpstreamError
from propcast.models.market import Coordinates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["property-data"])


@router.get(
    "/property-data",
    response_model=PropertyDataResponse | NearbyAreasResponse,
    responses={400: {"model": ErrorResponse}},
)
async def get_property_data(
    postcode: str | None = Query(None),
    lat: float | None = Query(None),
    lng: float | None = Query(None),
    radius: float = Query(DEFAULT_RADIUS_KM, description="Search radius in km"),
    store: MetricsStore = Depends(get_metrics_store),
    areas: AreaTable = Depends(get_area_table),
    provider: RealTimeDataProvider = Depends(get_provider),
):
    """Persisted investment metrics for a postcode, or for every area near a coordinate.

    A postcode takes precedence over lat/lng. Missing rows fall back to area baselines.
    """
    if not postcode and (lat is not None or lng is not None):
        return await _nearby_areas(lat, lng, radius, store, areas, provider)

    postcode = validate_postcode(postcode)
    now = datetime.now(timezone.utc)

    try:
        record = await store.get_investment_metrics(postcode)
        sales = await store.get_recent_sales(postcode)
        crime = await store.get_crime_data(postcode)
        transport = await store.get_transport_data(postcode)
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Metrics store unavailable for %s: %s", postcode, e)
        record, sales, crime, transport = None, [], [], []

    if record is not None:
        metrics = metrics_to_dict(record)
        source = "database"
    else:
        metrics = baseline_metrics(postcode, areas.profile_for(postcode))
        source = "generated"

    return PropertyDataResponse(
        postcode=postcode,
        metrics=metrics,
        recent_sales=[
            {
                "price": s.price,
                "date_of_transfer": s.date_of_transfer.isoformat(),
                "property_type": s.property_type,
                "tenure": s.tenure,
                "address": s.address,
            }
            for s in sales
        ],
        crime_data=[
            {"month": c.month.isoformat(), "category": c.category, "count": c.count}
            for c in crime
        ],
        transport_data=[
            {"station_name": t.station_name, "mode": t.mode, "distance_meters": t.distance_meters}
            for t in transport
        ],
        source=source,
        last_updated=now,
    )


async def _nearby_areas(
    lat: float | None,
    lng: float | None,
    radius: float,
    store: MetricsStore,
    areas: AreaTable,
    provider: RealTimeDataProvider,
) -> NearbyAreasResponse:
    lat, lng, radius = validate_coordinates(lat, lng, radius)

    try:
        rows = await store.get_nearby(lat, lng, radius)
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Metrics store unavailable for %s,%s: %s", lat, lng, e)
        rows = []

    if rows:
        found = [nearby_to_dict(record, area, distance) for record, area, distance in rows]
        source = "database"
    else:
        found = [await _nearest_baseline(Coordinates(latitude=lat, longitude=lng), areas, provider)]
        source = "generated"

    return NearbyAreasResponse(
        latitude=lat,
        longitude=lng,
        radius_km=radius,
        areas=found,
        count=len(found),
        source=source,
        last_updated=datetime.now(timezone.utc),
    )


async def _nearest_baseline(coords: Coordinates, areas: AreaTable, provider: RealTimeDataProvider) -> dict:
    """Baseline metrics for the area of the closest known postcode, or the UK average."""
    try:
        postcode = await provider.get_nearest_postcode(coords)
    except UpstreamError as e:
        logger.warning("Reverse geocode failed for %s,%s: %s", coords.latitude, coords.longitude, e)
        return baseline_metrics("", areas.default)
    return baseline_metrics(postcode, areas.profile_for(postcode))
