"""Market data and refresh routes."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from propcast.api.deps import get_metrics_store, get_provider
from propcast.api.routes.predictions import economic_to_response
from propcast.api.schemas import EconomicResponse, RefreshResponse
from propcast.config import settings
from propcast.data.metrics_store import MetricsStore
from propcast.data.provider import RealTimeDataProvider
from propcast.models.market import ECONOMIC_INDICATORS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["market"])


def _check_token(authorization: str | None) -> None:
    if not settings.update_api_key:
        return
    if authorization != f"Bearer {settings.update_api_key}":
        raise HTTPException(status_code=401, detail="Invalid or missing bearer token")


@router.get("/market/economic", response_model=EconomicResponse | None)
async def get_economic(provider: RealTimeDataProvider = Depends(get_provider)):
    """Current UK economic indicators; null when every source is unavailable."""
    return economic_to_response(await provider.economic.fetch())


@router.post("/data/refresh", response_model=RefreshResponse)
async def refresh_data(
    authorization: str | None = Header(None),
    provider: RealTimeDataProvider = Depends(get_provider),
    store: MetricsStore = Depends(get_metrics_store),
):
    """Called by the external scheduler: re-fetch economic data and stamp stored metrics."""
    _check_token(authorization)

    await provider.economic.invalidate()
    economic = await provider.economic.fetch()
    sources = (
        {k: v.value for k, v in economic.data_sources.items()} if economic is not None
        else {name: "unavailable" for name in ECONOMIC_INDICATORS}
    )

    rows_updated = None
    try:
        rows_updated = await store.stamp_refresh()
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Metrics store unavailable during refresh: %s", e)

    return RefreshResponse(
        message="Data updated successfully",
        economic_sources=sources,
        metrics_rows_updated=rows_updated,
        timestamp=datetime.now(timezone.utc),
    )
