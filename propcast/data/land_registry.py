"""HM Land Registry Price Paid Data: recent residential sales for a postcode.

CSV columns (no header guaranteed):
  0 transaction id, 1 price, 2 date of transfer, 3 postcode, 4 property type,
  5 new build (Y/N), 6 tenure (F/L), 7 PAON, 8 SAON, 9 street, 10 locality,
  11 town, ...
"""

import csv
import io
import logging
from datetime import date

import httpx

from propcast.config import settings
from propcast.data.base import http_get
from propcast.models.market import PropertyType, SaleRecord

logger = logging.getLogger(__name__)

SOURCE = "land_registry"

MIN_FIELDS = 12
MAX_RECORDS = 50


def _parse_row(parts: list[str]) -> SaleRecord | None:
    if len(parts) < MIN_FIELDS:
        return None
    parts = [p.strip().strip('"') for p in parts]
    try:
        price = int(parts[1])
        sale_date = date.fromisoformat(parts[2][:10])
    except ValueError:
        return None
    if price <= 0:
        return None

    address = " ".join(p for p in (parts[7], parts[8], parts[9]) if p)
    return SaleRecord(
        price=price,
        date=sale_date,
        property_type=PropertyType.from_code(parts[4]),
        tenure=parts[6],
        address=address,
        postcode=parts[3],
        new_build=parts[5].upper() == "Y",
    )


def parse_price_paid_csv(text: str, limit: int = MAX_RECORDS) -> list[SaleRecord]:
    """Parse a price-paid CSV payload. Malformed rows (and any header) are skipped.

    Returns at most `limit` records, newest first.
    """
    sales = []
    skipped = 0
    for parts in csv.reader(io.StringIO(text)):
        if not parts or not any(p.strip() for p in parts):
            continue
        sale = _parse_row(parts)
        if sale is None:
            skipped += 1
            continue
        sales.append(sale)

    if skipped:
        logger.debug("Skipped %d malformed price-paid rows", skipped)

    sales.sort(key=lambda s: s.date, reverse=True)
    return sales[:limit]


class LandRegistryClient:
    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self.transport = transport

    async def get_recent_sales(self, postcode: str) -> list[SaleRecord]:
        clean = "".join(postcode.split()).upper()
        params = [
            ("et[]", "lrcommon:freehold"),
            ("et[]", "lrcommon:leasehold"),
            ("nb[]", "true"),
            ("nb[]", "false"),
            ("tc[]", "ppd:standardPricePaidTransaction"),
            ("tc[]", "ppd:additionalPricePaidTransaction"),
            ("postcode", clean),
        ]
        resp = await http_get(
            SOURCE,
            settings.land_registry_url,
            params=params,
            headers={"Accept": "text/csv", "User-Agent": settings.user_agent},
            timeout=self.timeout,
            transport=self.transport,
        )
        sales = parse_price_paid_csv(resp.text)
        logger.info("Found %d recent sales for %s", len(sales), clean)
        return sales
