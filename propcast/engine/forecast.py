"""Forecast orchestration: real-time path first, pure area baseline second."""

import logging
from typing import Protocol

from propcast.engine.postcode import validate_postcode
from propcast.engine.predictor import PredictionEngine
from propcast.errors import ComputationError
from propcast.models.market import EnhancedPropertyData
from propcast.models.prediction import PredictionReport

logger = logging.getLogger(__name__)

FALLBACK_NOTICE = "Real-time data unavailable, using comprehensive estimates"


class EnhancedDataSource(Protocol):
    async def get_enhanced_property_data(self, postcode: str) -> EnhancedPropertyData:
        ...


async def forecast_postcode(
    postcode: str | None,
    provider: EnhancedDataSource | None,
    engine: PredictionEngine,
) -> PredictionReport:
    """Validate, then forecast with live data, degrading to area baselines.

    Raises ValidationError for a bad postcode and ComputationError only when
    the fallback forecast also fails. With provider=None the live path is skipped.
    """
    postcode = validate_postcode(postcode)

    if provider is not None:
        try:
            data = await provider.get_enhanced_property_data(postcode)
            return engine.predict(postcode, data)
        except Exception:
            logger.exception("Real-time prediction failed for %s, using fallback", postcode)

    try:
        return engine.predict(
            postcode,
            EnhancedPropertyData.empty(postcode),
            data_source="fallback",
            error=FALLBACK_NOTICE if provider is not None else None,
        )
    except Exception as e:
        logger.exception("Fallback prediction failed for %s", postcode)
        raise ComputationError(str(e)) from e
