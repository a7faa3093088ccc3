"""FastAPI application entry point."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from propcast.api.routes import market, predictions, property_data
from propcast.config import settings
from propcast.errors import ComputationError, ValidationError

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Propcast",
    description="UK residential property investment forecasts by postcode",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(predictions.router)
app.include_router(property_data.router)
app.include_router(market.router)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})


@app.exception_handler(ComputationError)
async def computation_error_handler(request: Request, exc: ComputationError):
    logger.error("Prediction failed for %s: %s", request.query_params.get("postcode"), exc)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Prediction failed",
            "postcode": request.query_params.get("postcode"),
        },
    )


@app.get("/health")
async def health():
    return {"status": "ok"}
