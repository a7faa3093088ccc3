"""Real-time data provider: orchestrates every upstream source for one postcode.

Flow: postcode → (economic ∥ land registry ∥ postcodes.io) → police crime
(needs coordinates) → fusion → EnhancedPropertyData

Branches settle independently; any failure becomes "field absent".
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable

from propcast.config import settings
from propcast.data.base import CrimeSource, GeocodeSource, SalesSource
from propcast.data.cache import DataCache, MemoryCache
from propcast.data.economic import EconomicDataFetcher
from propcast.data.land_registry import LandRegistryClient
from propcast.data.police import PoliceClient, default_crime_month
from propcast.data.postcodes import PostcodesClient
from propcast.engine.fusion import fuse
from propcast.engine.postcode import normalize_postcode
from propcast.errors import UpstreamError
from propcast.models.market import (
    ECONOMIC_INDICATORS,
    Coordinates,
    CrimeSnapshot,
    DataQuality,
    EconomicSnapshot,
    EnhancedPropertyData,
    SaleRecord,
    SourceStatus,
)

logger = logging.getLogger(__name__)


class RealTimeDataProvider:
    def __init__(
        self,
        cache: DataCache | None = None,
        economic_fetcher: EconomicDataFetcher | None = None,
        sales_client: SalesSource | None = None,
        geocode_client: GeocodeSource | None = None,
        crime_client: CrimeSource | None = None,
        fetch_timeout: float | None = None,
    ):
        self.cache = cache if cache is not None else MemoryCache()
        self.economic = economic_fetcher or EconomicDataFetcher(cache=self.cache)
        self.sales_client = sales_client or LandRegistryClient()
        self.geocode_client = geocode_client or PostcodesClient()
        self.crime_client = crime_client or PoliceClient()
        self.fetch_timeout = fetch_timeout or settings.fetch_timeout_seconds

    async def _bounded(self, name: str, coro: Awaitable[Any]) -> Any:
        try:
            return await asyncio.wait_for(coro, timeout=self.fetch_timeout)
        except asyncio.TimeoutError as e:
            raise UpstreamError(name, f"timed out after {self.fetch_timeout}s") from e

    async def get_recent_sales(self, postcode: str) -> list[SaleRecord]:
        key = f"land_registry:{postcode}"
        cached = await self.cache.get(key)
        if cached is not None:
            return [SaleRecord.from_dict(s) for s in cached]
        sales = await self.sales_client.get_recent_sales(postcode)
        await self.cache.set(key, [s.to_dict() for s in sales], settings.land_registry_ttl)
        return sales

    async def get_coordinates(self, postcode: str) -> Coordinates:
        key = f"coordinates:{postcode}"
        cached = await self.cache.get(key)
        if cached is not None:
            return Coordinates.from_dict(cached)
        coords = await self.geocode_client.get_coordinates(postcode)
        await self.cache.set(key, coords.to_dict(), settings.coordinates_ttl)
        return coords

    async def get_crime(self, coords: Coordinates, month: str | None = None) -> CrimeSnapshot:
        """Live crime snapshot, or the fixed fallback snapshot if the police API fails."""
        month = month or default_crime_month()
        try:
            return await self._fetch_crime(coords, month)
        except UpstreamError as e:
            logger.warning("Crime data unavailable, using fallback: %s", e)
        except Exception as e:
            logger.warning("Unexpected error fetching crime data, using fallback: %r", e)
        return CrimeSnapshot.fallback()

    async def _fetch_crime(self, coords: Coordinates, month: str) -> CrimeSnapshot:
        key = f"crime:{coords.latitude}:{coords.longitude}:{month}"
        cached = await self.cache.get(key)
        if cached is not None:
            return CrimeSnapshot.from_dict(cached)

        crime = await self._bounded(
            "police",
            self.crime_client.get_street_crime(coords.latitude, coords.longitude, month),
        )
        await self.cache.set(key, crime.to_dict(), settings.crime_ttl)
        return crime

    async def get_nearest_postcode(self, coords: Coordinates) -> str:
        """Reverse-geocode a coordinate pair to the closest full postcode."""
        key = f"nearest_postcode:{coords.latitude}:{coords.longitude}"
        cached = await self.cache.get(key)
        if cached is not None:
            return cached
        postcode = await self._bounded("postcodes_io", self.geocode_client.get_nearest_postcode(coords))
        await self.cache.set(key, postcode, settings.coordinates_ttl)
        return postcode

    async def get_enhanced_property_data(self, postcode: str) -> EnhancedPropertyData:
        clean = normalize_postcode(postcode)
        logger.info("Getting enhanced data for %s", clean)

        economic_result, sales_result, coords_result = await asyncio.gather(
            self._bounded("economic", self.economic.fetch()),
            self._bounded("land_registry", self.get_recent_sales(clean)),
            self._bounded("postcodes_io", self.get_coordinates(clean)),
            return_exceptions=True,
        )

        economic: EconomicSnapshot | None = None
        if isinstance(economic_result, BaseException):
            logger.warning("Economic data failed: %s", economic_result)
        else:
            economic = economic_result

        sales: list[SaleRecord] = []
        if isinstance(sales_result, BaseException):
            logger.warning("Land Registry failed for %s: %s", clean, sales_result)
        else:
            sales = sales_result

        coords: Coordinates | None = None
        if isinstance(coords_result, BaseException):
            logger.warning("Postcode coordinates failed for %s: %s", clean, coords_result)
        else:
            coords = coords_result

        crime = await self.get_crime(coords) if coords is not None else None

        return EnhancedPropertyData(
            postcode=postcode.strip().upper(),
            economic=economic,
            recent_sales=sales,
            coordinates=coords,
            crime=crime,
            metrics=fuse(economic, sales, crime),
            data_quality=DataQuality(
                economic=(
                    dict(economic.data_sources) if economic is not None
                    else {name: SourceStatus.UNAVAILABLE for name in ECONOMIC_INDICATORS}
                ),
                recent_sales=SourceStatus.LIVE if sales else SourceStatus.UNAVAILABLE,
                crime=crime.source if crime is not None else SourceStatus.UNAVAILABLE,
            ),
            last_updated=datetime.now(timezone.utc),
        )
