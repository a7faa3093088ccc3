"""Bank of England base rate: IADB CSV series first, Bank Rate web page second."""

import logging
import re

import httpx

from propcast.config import settings
from propcast.data.base import http_get
from propcast.errors import UpstreamError

logger = logging.getLogger(__name__)

SOURCE = "bank_of_england"

# Official Bank Rate series in the Interactive Database
BANK_RATE_SERIES = "IUDBEDR"

RATE_PATTERNS = (
    re.compile(r"Bank Rate is (\d+\.?\d*)%"),
    re.compile(r"(\d+\.?\d*)%"),
)


def parse_bank_rate_csv(text: str) -> float:
    """Return the most recent rate from an IADB CSV download (date, value rows)."""
    for line in reversed(text.splitlines()):
        line = line.strip()
        if not line or "DATE" in line.upper():
            continue
        parts = [p.strip().strip('"') for p in line.split(",")]
        if len(parts) >= 2 and parts[1]:
            try:
                return float(parts[1])
            except ValueError:
                continue
    raise UpstreamError(SOURCE, "no rate found in CSV")


def parse_bank_rate_html(html: str) -> float:
    for pattern in RATE_PATTERNS:
        match = pattern.search(html)
        if match:
            return float(match.group(1))
    raise UpstreamError(SOURCE, "no rate found in page")


class BankOfEnglandClient:
    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self.transport = transport
        self.headers = {"User-Agent": settings.user_agent}

    async def _from_database(self) -> float:
        params = {
            "csv.x": "yes",
            "Datefrom": "01/Jan/2024",
            "Dateto": "now",
            "SeriesCodes": BANK_RATE_SERIES,
            "CSVF": "TN",
            "UsingCodes": "Y",
        }
        resp = await http_get(
            SOURCE,
            settings.boe_database_url,
            params=params,
            headers={**self.headers, "Accept": "text/csv"},
            timeout=self.timeout,
            transport=self.transport,
        )
        return parse_bank_rate_csv(resp.text)

    async def _from_web_page(self) -> float:
        resp = await http_get(
            SOURCE,
            settings.boe_bank_rate_page_url,
            headers=self.headers,
            timeout=self.timeout,
            transport=self.transport,
        )
        return parse_bank_rate_html(resp.text)

    async def get_base_rate(self) -> float:
        try:
            rate = await self._from_database()
            logger.info("BoE base rate: %s%%", rate)
            return rate
        except UpstreamError as e:
            logger.warning("BoE database failed, trying Bank Rate page: %s", e)

        try:
            rate = await self._from_web_page()
        except UpstreamError as e:
            raise UpstreamError(SOURCE, f"all base rate sources failed ({e})") from e
        logger.info("BoE base rate (scraped): %s%%", rate)
        return rate
