"""ONS time-series client for inflation, unemployment and GDP growth."""

import logging

import httpx

from propcast.config import settings
from propcast.data.base import http_get, parse_json
from propcast.errors import UpstreamError

logger = logging.getLogger(__name__)

SOURCE = "ons"

# (dataset, series) pairs
SERIES = {
    "cpih": ("cpih01", "L55O"),
    "cpi": ("mm23", "D7G7"),
    "unemployment": ("lms", "MGSX"),
    "gdp_growth": ("qna", "IHYQ"),
}


def latest_observation(data: dict, period: str = "months") -> float:
    """Return the newest value in an ONS time-series payload.

    Observations are listed oldest first; blank values are skipped.
    """
    observations = data.get(period) or []
    for obs in reversed(observations):
        value = str(obs.get("value", "")).strip()
        if value:
            try:
                return float(value)
            except ValueError:
                continue
    raise UpstreamError(SOURCE, f"no {period} observations")


class ONSClient:
    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self.transport = transport

    async def _get_series(self, key: str, period: str = "months") -> float:
        dataset, series_id = SERIES[key]
        url = f"{settings.ons_base_url}/{dataset}/editions/time-series/timeseries/{series_id}.json"
        resp = await http_get(SOURCE, url, timeout=self.timeout, transport=self.transport)
        return latest_observation(parse_json(SOURCE, resp), period)

    async def get_inflation(self) -> float:
        """CPIH annual rate, falling back to the CPI annual rate."""
        try:
            value = await self._get_series("cpih")
            logger.info("ONS inflation (CPIH): %s%%", value)
            return value
        except UpstreamError as e:
            logger.warning("ONS CPIH failed, trying CPI: %s", e)

        value = await self._get_series("cpi")
        logger.info("ONS inflation (CPI): %s%%", value)
        return value

    async def get_unemployment_rate(self) -> float:
        value = await self._get_series("unemployment")
        logger.info("ONS unemployment rate: %s%%", value)
        return value

    async def get_gdp_growth(self) -> float:
        value = await self._get_series("gdp_growth", period="quarters")
        logger.info("ONS GDP growth: %s%%", value)
        return value
