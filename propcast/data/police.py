"""data.police.uk street-level crime lookup."""

import logging
from collections import Counter
from datetime import date

import httpx

from propcast.config import settings
from propcast.data.base import http_get, parse_json
from propcast.errors import UpstreamError
from propcast.models.market import CrimeSnapshot, SourceStatus

logger = logging.getLogger(__name__)

SOURCE = "police"

# The street-crime archive is usually published about two months behind
PUBLICATION_LAG_MONTHS = 2


def default_crime_month(today: date | None = None) -> str:
    """Configured month, or the most recent month likely to be published."""
    if settings.police_crime_month:
        return settings.police_crime_month
    today = today or date.today()
    total = today.year * 12 + (today.month - 1) - PUBLICATION_LAG_MONTHS
    return f"{total // 12:04d}-{total % 12 + 1:02d}"


def categorize_crimes(crimes: list[dict]) -> dict[str, int]:
    return dict(Counter(c.get("category", "unknown") for c in crimes))


class PoliceClient:
    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self.transport = transport

    async def get_street_crime(self, latitude: float, longitude: float, month: str) -> CrimeSnapshot:
        params = {"lat": latitude, "lng": longitude, "date": month}
        resp = await http_get(
            SOURCE,
            f"{settings.police_api_url}/crimes-street/all-crime",
            params=params,
            timeout=self.timeout,
            transport=self.transport,
        )
        crimes = parse_json(SOURCE, resp)
        if not isinstance(crimes, list):
            raise UpstreamError(SOURCE, "expected a list of crimes")
        if not all(isinstance(c, dict) for c in crimes):
            raise UpstreamError(SOURCE, "unexpected crime record format")

        logger.info("Found %d crimes near %s,%s in %s", len(crimes), latitude, longitude, month)
        return CrimeSnapshot(
            total_crimes=len(crimes),
            crime_rate=float(len(crimes) * 12),
            categories=categorize_crimes(crimes),
            source=SourceStatus.LIVE,
        )
