"""Postcode geocoding via postcodes.io (free, no key needed)."""

import logging

import httpx

from propcast.config import settings
from propcast.data.base import http_get, parse_json
from propcast.engine.postcode import normalize_postcode, outward_code
from propcast.errors import UpstreamError
from propcast.models.market import Coordinates

logger = logging.getLogger(__name__)

SOURCE = "postcodes_io"


def _coordinates_from(data: dict) -> Coordinates:
    result = data.get("result") or {}
    lat = result.get("latitude")
    lng = result.get("longitude")
    if lat is None or lng is None:
        raise UpstreamError(SOURCE, "no coordinates in result")
    return Coordinates(latitude=float(lat), longitude=float(lng))


class PostcodesClient:
    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self.transport = transport

    async def _lookup(self, path: str) -> Coordinates:
        resp = await http_get(
            SOURCE,
            f"{settings.postcodes_io_url}/{path}",
            timeout=self.timeout,
            transport=self.transport,
        )
        return _coordinates_from(parse_json(SOURCE, resp))

    async def get_coordinates(self, postcode: str) -> Coordinates:
        """Full-postcode lookup, falling back to the outward-code centroid."""
        clean = normalize_postcode(postcode)
        try:
            return await self._lookup(f"postcodes/{clean}")
        except UpstreamError as e:
            logger.warning("Postcode lookup failed for %s, trying outward code: %s", clean, e)

        return await self._lookup(f"outcodes/{outward_code(clean)}")

    async def get_nearest_postcode(self, coords: Coordinates) -> str:
        """Reverse lookup: the closest full postcode to a coordinate pair."""
        resp = await http_get(
            SOURCE,
            f"{settings.postcodes_io_url}/postcodes",
            params={"lat": coords.latitude, "lon": coords.longitude, "limit": 1},
            timeout=self.timeout,
            transport=self.transport,
        )
        data = parse_json(SOURCE, resp)
        results = data.get("result") if isinstance(data, dict) else None
        first = results[0] if isinstance(results, list) and results else None
        if not isinstance(first, dict) or not first.get("postcode"):
            raise UpstreamError(SOURCE, f"no postcode near {coords.latitude},{coords.longitude}")
        return first["postcode"]
