"""Economic data fetcher: assembles an EconomicSnapshot from BoE and ONS."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable

from propcast.config import settings
from propcast.data.base import BaseRateSource, EconomicIndicatorSource
from propcast.data.boe import BankOfEnglandClient
from propcast.data.cache import DataCache, MemoryCache
from propcast.data.ons import ONSClient
from propcast.errors import UpstreamError
from propcast.models.market import ECONOMIC_INDICATORS, EconomicSnapshot, SourceStatus

logger = logging.getLogger(__name__)

# Used for any indicator that cannot be fetched while at least one other is live
FALLBACK_VALUES: dict[str, float] = {
    "bank_rate": 5.25,
    "inflation": 4.2,
    "unemployment": 4.1,
    "gdp_growth": 0.6,
}


class EconomicDataFetcher:
    def __init__(
        self,
        boe_client: BaseRateSource | None = None,
        ons_client: EconomicIndicatorSource | None = None,
        cache: DataCache | None = None,
    ):
        self.boe = boe_client or BankOfEnglandClient()
        self.ons = ons_client or ONSClient()
        self.cache = cache if cache is not None else MemoryCache()

    def _sources(self) -> dict[str, tuple[Callable[[], Awaitable[float]], int]]:
        return {
            "bank_rate": (self.boe.get_base_rate, settings.bank_rate_ttl),
            "inflation": (self.ons.get_inflation, settings.ons_ttl),
            "unemployment": (self.ons.get_unemployment_rate, settings.ons_ttl),
            "gdp_growth": (self.ons.get_gdp_growth, settings.ons_ttl),
        }

    async def _cached(self, key: str, fetch: Callable[[], Awaitable[float]], ttl: int) -> float:
        cached = await self.cache.get(key)
        if cached is not None:
            return float(cached)
        value = await fetch()
        await self.cache.set(key, value, ttl)
        return value

    async def invalidate(self) -> None:
        for key in ECONOMIC_INDICATORS:
            await self.cache.delete(key)

    async def fetch(self) -> EconomicSnapshot | None:
        """Fetch all indicators concurrently; each may fail independently.

        Returns None when no indicator is live, so callers never treat a
        snapshot made purely of fallback constants as real data.
        """
        sources = self._sources()
        results = await asyncio.gather(
            *(self._cached(key, fetch, ttl) for key, (fetch, ttl) in sources.items()),
            return_exceptions=True,
        )

        values: dict[str, float] = {}
        statuses: dict[str, SourceStatus] = {}
        for key, result in zip(sources, results):
            if isinstance(result, BaseException):
                if not isinstance(result, UpstreamError):
                    logger.warning("Unexpected error fetching %s: %r", key, result)
                else:
                    logger.warning("Economic indicator %s unavailable: %s", key, result)
                values[key] = FALLBACK_VALUES[key]
                statuses[key] = SourceStatus.FALLBACK
            else:
                values[key] = result
                statuses[key] = SourceStatus.LIVE

        if not any(s == SourceStatus.LIVE for s in statuses.values()):
            logger.warning("No live economic data available")
            return None

        return EconomicSnapshot(
            base_rate=values["bank_rate"],
            inflation=values["inflation"],
            unemployment_rate=values["unemployment"],
            gdp_growth=values["gdp_growth"],
            data_sources=statuses,
            last_updated=datetime.now(timezone.utc),
        )
