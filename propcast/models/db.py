"""SQLAlchemy ORM models for the persisted market store."""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, Float, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class InvestmentMetricsRecord(Base):
    __tablename__ = "investment_metrics"

    postcode: Mapped[str] = mapped_column(String(10), primary_key=True)

    avg_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=True)
    price_growth_12m: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=True)
    rental_yield: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=True)
    investment_score: Mapped[Decimal] = mapped_column(Numeric(4, 2), nullable=True)
    transport_score: Mapped[Decimal] = mapped_column(Numeric(4, 2), nullable=True)
    crime_rate: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=True)
    employment_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=True)
    school_rating: Mapped[str | None] = mapped_column(String(50), nullable=True)
    new_developments: Mapped[int | None] = mapped_column(Integer, nullable=True)

    data_confidence: Mapped[Decimal] = mapped_column(Numeric(3, 2), nullable=True)
    last_updated: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())


class PropertyPriceRecord(Base):
    __tablename__ = "property_prices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    postcode: Mapped[str] = mapped_column(String(10), index=True)
    price: Mapped[int] = mapped_column(Integer)
    date_of_transfer: Mapped[date] = mapped_column(Date, index=True)
    property_type: Mapped[str] = mapped_column(String(1))  # D/S/T/F/O
    tenure: Mapped[str] = mapped_column(String(1), default="")
    address: Mapped[str] = mapped_column(String(255), default="")


class CrimeDataRecord(Base):
    __tablename__ = "crime_data"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    postcode: Mapped[str] = mapped_column(String(10), index=True)
    month: Mapped[date] = mapped_column(Date, index=True)
    category: Mapped[str] = mapped_column(String(100))
    count: Mapped[int] = mapped_column(Integer, default=0)


class TransportDataRecord(Base):
    __tablename__ = "transport_data"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    postcode: Mapped[str] = mapped_column(String(10), index=True)
    station_name: Mapped[str] = mapped_column(String(255))
    mode: Mapped[str] = mapped_column(String(50))  # rail, tube, bus, tram
    distance_meters: Mapped[int] = mapped_column(Integer)


class PropertyAreaRecord(Base):
    __tablename__ = "property_areas"

    postcode: Mapped[str] = mapped_column(String(10), ForeignKey("investment_metrics.postcode"), primary_key=True)
    district: Mapped[str | None] = mapped_column(String(100), nullable=True)
    latitude: Mapped[float] = mapped_column(Float, index=True)
    longitude: Mapped[float] = mapped_column(Float, index=True)
