"""Read access to the persisted market store (investment metrics, sales, crime, transport)."""

import logging
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from propcast.engine.geo import bounding_box, haversine_km
from propcast.models.area import AreaProfile
from propcast.models.db import (
    CrimeDataRecord,
    InvestmentMetricsRecord,
    PropertyAreaRecord,
    PropertyPriceRecord,
    TransportDataRecord,
)

logger = logging.getLogger(__name__)

REFRESHED_CONFIDENCE = Decimal("0.90")


def _num(value: Decimal | None) -> float | None:
    return float(value) if value is not None else None


def metrics_to_dict(record: InvestmentMetricsRecord) -> dict:
    return {
        "postcode": record.postcode,
        "avg_price": _num(record.avg_price),
        "price_growth_12m": _num(record.price_growth_12m),
        "rental_yield": _num(record.rental_yield),
        "investment_score": _num(record.investment_score),
        "transport_score": _num(record.transport_score),
        "crime_rate": _num(record.crime_rate),
        "employment_rate": _num(record.employment_rate),
        "school_rating": record.school_rating,
        "new_developments": record.new_developments,
        "data_confidence": _num(record.data_confidence),
        "last_updated": record.last_updated.isoformat() if record.last_updated else None,
    }


def nearby_to_dict(record: InvestmentMetricsRecord, area: PropertyAreaRecord, distance_km: float) -> dict:
    return {
        **metrics_to_dict(record),
        "district": area.district,
        "latitude": area.latitude,
        "longitude": area.longitude,
        "distance_km": round(distance_km, 2),
    }


def baseline_metrics(postcode: str, profile: AreaProfile) -> dict:
    """investment_metrics-shaped record derived from the area baseline."""
    return {
        "postcode": postcode.strip().upper(),
        "avg_price": float(profile.base_price),
        "price_growth_12m": profile.growth_rate,
        "rental_yield": profile.yield_percent,
        "region": profile.region,
        "data_confidence": 0.5 if profile.is_default else 0.7,
        "last_updated": datetime.now(timezone.utc).isoformat(),
    }


class MetricsStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_investment_metrics(self, postcode: str) -> InvestmentMetricsRecord | None:
        stmt = select(InvestmentMetricsRecord).where(
            InvestmentMetricsRecord.postcode == postcode.strip().upper()
        )
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def get_recent_sales(self, postcode: str, limit: int = 10) -> list[PropertyPriceRecord]:
        stmt = (
            select(PropertyPriceRecord)
            .where(PropertyPriceRecord.postcode == postcode.strip().upper())
            .order_by(PropertyPriceRecord.date_of_transfer.desc())
            .limit(limit)
        )
        return list((await self.session.execute(stmt)).scalars())

    async def get_crime_data(self, postcode: str, since: date | None = None) -> list[CrimeDataRecord]:
        """Crime rows for the last twelve months unless `since` is given."""
        since = since or (date.today() - timedelta(days=365))
        stmt = (
            select(CrimeDataRecord)
            .where(CrimeDataRecord.postcode == postcode.strip().upper())
            .where(CrimeDataRecord.month >= since)
            .order_by(CrimeDataRecord.month.desc())
        )
        return list((await self.session.execute(stmt)).scalars())

    async def get_transport_data(self, postcode: str) -> list[TransportDataRecord]:
        stmt = (
            select(TransportDataRecord)
            .where(TransportDataRecord.postcode == postcode.strip().upper())
            .order_by(TransportDataRecord.distance_meters.asc())
        )
        return list((await self.session.execute(stmt)).scalars())

    async def get_nearby(
        self, latitude: float, longitude: float, radius_km: float
    ) -> list[tuple[InvestmentMetricsRecord, PropertyAreaRecord, float]]:
        """Metrics rows whose area centroid lies within `radius_km`, nearest first."""
        min_lat, max_lat, min_lng, max_lng = bounding_box(latitude, longitude, radius_km)
        stmt = (
            select(InvestmentMetricsRecord, PropertyAreaRecord)
            .join(PropertyAreaRecord, PropertyAreaRecord.postcode == InvestmentMetricsRecord.postcode)
            .where(PropertyAreaRecord.latitude.between(min_lat, max_lat))
            .where(PropertyAreaRecord.longitude.between(min_lng, max_lng))
        )
        nearby = []
        for record, area in (await self.session.execute(stmt)).all():
            distance = haversine_km(latitude, longitude, area.latitude, area.longitude)
            if distance <= radius_km:
                nearby.append((record, area, distance))
        nearby.sort(key=lambda row: row[2])
        return nearby

    async def stamp_refresh(self) -> int:
        """Mark every metrics row as refreshed now. Returns the number of rows touched."""
        stmt = update(InvestmentMetricsRecord).values(
            last_updated=datetime.now(timezone.utc).replace(tzinfo=None),
            data_confidence=REFRESHED_CONFIDENCE,
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        logger.info("Stamped %d investment_metrics rows", result.rowcount)
        return result.rowcount
