"""FastAPI dependency injection."""

from functools import lru_cache
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from propcast.config import settings
from propcast.data.cache import DataCache, build_cache
from propcast.data.metrics_store import MetricsStore
from propcast.data.provider import RealTimeDataProvider
from propcast.engine.areas import AreaTable, load_area_table
from propcast.engine.predictor import PredictionEngine


@lru_cache(maxsize=1)
def get_cache() -> DataCache:
    """One cache per process, shared by every request."""
    return build_cache()


@lru_cache(maxsize=1)
def _session_factory() -> async_sessionmaker[AsyncSession]:
    db_engine = create_async_engine(settings.database_url, echo=settings.debug, pool_pre_ping=True)
    return async_sessionmaker(db_engine, expire_on_commit=False)


async def get_db() -> AsyncIterator[AsyncSession]:
    async with _session_factory()() as session:
        yield session


def get_area_table() -> AreaTable:
    return load_area_table()


def get_engine() -> PredictionEngine:
    return PredictionEngine(load_area_table())


def get_provider() -> RealTimeDataProvider:
    return RealTimeDataProvider(cache=get_cache())


async def get_metrics_store() -> AsyncIterator[MetricsStore]:
    async for session in get_db():
        yield MetricsStore(session)
