"""Real-time market data types: economic indicators, sales, crime and fused metrics."""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum

# Economic indicator names, in the order they are fetched and reported
ECONOMIC_INDICATORS = ("bank_rate", "inflation", "unemployment", "gdp_growth")


class SourceStatus(Enum):
    LIVE = "live"
    FALLBACK = "fallback"
    UNAVAILABLE = "unavailable"


class PropertyType(Enum):
    """Price-paid property type codes."""
    DETACHED = "D"
    SEMI_DETACHED = "S"
    TERRACED = "T"
    FLAT = "F"
    OTHER = "O"

    @classmethod
    def from_code(cls, code: str) -> "PropertyType":
        try:
            return cls(code.strip().upper())
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class EconomicSnapshot:
    base_rate: float
    inflation: float
    unemployment_rate: float
    gdp_growth: float
    data_sources: dict[str, SourceStatus] = field(default_factory=dict)
    last_updated: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def live_count(self) -> int:
        return sum(1 for s in self.data_sources.values() if s == SourceStatus.LIVE)

    def is_live(self, indicator: str) -> bool:
        return self.data_sources.get(indicator) == SourceStatus.LIVE


@dataclass(frozen=True)
class SaleRecord:
    price: int
    date: date
    property_type: PropertyType
    tenure: str
    address: str
    postcode: str
    new_build: bool = False

    def to_dict(self) -> dict:
        return {
            "price": self.price,
            "date": self.date.isoformat(),
            "property_type": self.property_type.value,
            "tenure": self.tenure,
            "address": self.address,
            "postcode": self.postcode,
            "new_build": self.new_build,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SaleRecord":
        return cls(
            price=int(data["price"]),
            date=date.fromisoformat(data["date"]),
            property_type=PropertyType.from_code(data["property_type"]),
            tenure=data.get("tenure", ""),
            address=data.get("address", ""),
            postcode=data.get("postcode", ""),
            new_build=bool(data.get("new_build", False)),
        )


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}

    @classmethod
    def from_dict(cls, data: dict) -> "Coordinates":
        return cls(latitude=float(data["latitude"]), longitude=float(data["longitude"]))


@dataclass(frozen=True)
class CrimeSnapshot:
    total_crimes: int
    crime_rate: float  # annualised estimate
    categories: dict[str, int] = field(default_factory=dict)
    source: SourceStatus = SourceStatus.LIVE

    @property
    def is_live(self) -> bool:
        return self.source == SourceStatus.LIVE

    @classmethod
    def fallback(cls) -> "CrimeSnapshot":
        return cls(total_crimes=25, crime_rate=300.0, categories={}, source=SourceStatus.FALLBACK)

    def to_dict(self) -> dict:
        return {
            "total_crimes": self.total_crimes,
            "crime_rate": self.crime_rate,
            "categories": dict(self.categories),
            "source": self.source.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CrimeSnapshot":
        return cls(
            total_crimes=int(data["total_crimes"]),
            crime_rate=float(data["crime_rate"]),
            categories=dict(data.get("categories", {})),
            source=SourceStatus(data.get("source", "live")),
        )


@dataclass(frozen=True)
class EconomicImpact:
    interest_rate_effect: float
    inflation_effect: float
    unemployment_effect: float


@dataclass(frozen=True)
class CrimeImpact:
    crime_rate: float
    safety_score: float  # 1-10


@dataclass(frozen=True)
class EnhancedMetrics:
    """Metrics derived from whichever real-time sources succeeded. None = not derivable."""
    average_price: int | None = None
    price_growth: float | None = None
    property_types: dict[str, int] | None = None
    economic_impact: EconomicImpact | None = None
    crime_impact: CrimeImpact | None = None


@dataclass(frozen=True)
class DataQuality:
    economic: dict[str, SourceStatus] = field(
        default_factory=lambda: {name: SourceStatus.UNAVAILABLE for name in ECONOMIC_INDICATORS}
    )
    recent_sales: SourceStatus = SourceStatus.UNAVAILABLE
    crime: SourceStatus = SourceStatus.UNAVAILABLE


@dataclass(frozen=True)
class EnhancedPropertyData:
    postcode: str
    economic: EconomicSnapshot | None = None
    recent_sales: list[SaleRecord] = field(default_factory=list)
    coordinates: Coordinates | None = None
    crime: CrimeSnapshot | None = None
    metrics: EnhancedMetrics = field(default_factory=EnhancedMetrics)
    data_quality: DataQuality = field(default_factory=DataQuality)
    last_updated: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def sale_count(self) -> int:
        return len(self.recent_sales)

    @property
    def has_live_crime(self) -> bool:
        return self.crime is not None and self.crime.is_live

    @classmethod
    def empty(cls, postcode: str) -> "EnhancedPropertyData":
        """No real-time data at all: the engine runs on area baselines only."""
        return cls(postcode=postcode.strip().upper())
