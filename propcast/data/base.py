"""Protocol definitions for data sources, plus the shared HTTP request helper.

Each protocol defines the interface that concrete data source implementations must satisfy.
Every method raises UpstreamError when the source cannot supply a value.
"""

from typing import Any, Protocol, runtime_checkable

import httpx

from propcast.config import settings
from propcast.errors import UpstreamError
from propcast.models.market import Coordinates, CrimeSnapshot, SaleRecord


@runtime_checkable
class BaseRateSource(Protocol):
    async def get_base_rate(self) -> float:
        """Get the current central-bank base rate (%)."""
        ...


@runtime_checkable
class EconomicIndicatorSource(Protocol):
    async def get_inflation(self) -> float:
        """Get the latest annual inflation rate (%)."""
        ...

    async def get_unemployment_rate(self) -> float:
        """Get the latest unemployment rate (%)."""
        ...

    async def get_gdp_growth(self) -> float:
        """Get the latest quarterly GDP growth (%)."""
        ...


@runtime_checkable
class SalesSource(Protocol):
    async def get_recent_sales(self, postcode: str) -> list[SaleRecord]:
        """Fetch recent residential sales for a postcode, newest first."""
        ...


@runtime_checkable
class GeocodeSource(Protocol):
    async def get_coordinates(self, postcode: str) -> Coordinates:
        """Resolve a postcode (or outward code) to a coordinate pair."""
        ...

    async def get_nearest_postcode(self, coords: Coordinates) -> str:
        ...


@runtime_checkable
class CrimeSource(Protocol):
    async def get_street_crime(self, latitude: float, longitude: float, month: str) -> CrimeSnapshot:
        """Fetch street-level crime around a point for one month (YYYY-MM)."""
        ...


async def http_get(
    source: str,
    url: str,
    *,
    params: Any = None,
    headers: dict[str, str] | None = None,
    timeout: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.Response:
    """GET a URL, converting every transport or status failure into UpstreamError."""
    try:
        async with httpx.AsyncClient(
            timeout=timeout or settings.http_timeout_seconds,
            transport=transport,
            follow_redirects=True,
        ) as client:
            resp = await client.get(url, params=params, headers=headers)
            resp.raise_for_status()
            return resp
    except httpx.HTTPStatusError as e:
        raise UpstreamError(source, f"HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        raise UpstreamError(source, f"request failed: {e!r}") from e


def parse_json(source: str, resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError as e:
        raise UpstreamError(source, "response is not valid JSON") from e
