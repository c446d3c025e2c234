"""FastAPI application serving the published snow forecasts."""

import logging
import time
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, HTTPException, Response, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from handlers.weather_processor import update_weather_data
from handlers.weather_scheduler import WeatherUpdateScheduler
from models.forecast import ResortRecord
from services.weather_data_store import PublishedDataset, WeatherDataStore
from utils.cache import (
    CACHE_CONTROL_NO_STORE,
    CACHE_CONTROL_PUBLIC,
    CACHE_CONTROL_PUBLIC_LONG,
    cached_hierarchy,
)
from utils.constants import (
    CORS_ORIGINS,
    ENABLE_SCHEDULER,
    LOG_LEVEL,
    UPDATE_INTERVAL_SECONDS,
)
from utils.location_loader import LocationLoader

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


# Lazy-initialized services
_data_store = None
_location_loader = None
_scheduler = None


def reset_services():
    """Reset all lazy-initialized services. Useful for testing."""
    global _data_store, _location_loader, _scheduler
    if _scheduler is not None:
        _scheduler.stop(timeout=1)
    _data_store = None
    _location_loader = None
    _scheduler = None


def get_data_store() -> WeatherDataStore:
    global _data_store
    if _data_store is None:
        _data_store = WeatherDataStore()
    return _data_store


def get_location_loader() -> LocationLoader:
    global _location_loader
    if _location_loader is None:
        _location_loader = LocationLoader()
    return _location_loader


def get_scheduler() -> WeatherUpdateScheduler:
    global _scheduler
    if _scheduler is None:
        store = get_data_store()
        loader = get_location_loader()
        _scheduler = WeatherUpdateScheduler(
            lambda: update_weather_data(store, loader=loader),
            interval_seconds=UPDATE_INTERVAL_SECONDS,
        )
    return _scheduler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start background weather updates with the app."""
    if ENABLE_SCHEDULER:
        get_scheduler().start()
    yield
    if _scheduler is not None:
        _scheduler.stop(timeout=5)


app = FastAPI(
    title="Snow Forecast API",
    description="Period-aggregated snow forecasts for ski resorts at three elevations",
    version=API_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request, call_next):
    """Log slow and failing requests with timing."""
    start = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start) * 1000

    path = request.url.path
    if duration_ms > 1000:
        logger.warning(
            "[SLOW] %s %s %.0fms status=%d",
            request.method,
            path,
            duration_ms,
            response.status_code,
        )
    elif response.status_code >= 500 and response.status_code != 503:
        logger.error(
            "[ERROR] %s %s %.0fms status=%d",
            request.method,
            path,
            duration_ms,
            response.status_code,
        )

    return response


class ResortsRequest(BaseModel):
    """Body of the filtered lookup."""

    resort_ids: list[str] = Field(..., description="Resort ids to look up")


class ForecastResponse(BaseModel):
    updated_at: datetime | None
    data: dict[str, ResortRecord]


class ResortForecastResponse(BaseModel):
    updated_at: datetime | None
    data: ResortRecord


def _require_ready(response: Response) -> PublishedDataset:
    """Current snapshot, or 503 while the first update is still pending."""
    dataset = get_data_store().snapshot()
    if not dataset.ready:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Initializing...",
            headers={"Cache-Control": CACHE_CONTROL_NO_STORE, "Retry-After": "60"},
        )
    response.headers["Cache-Control"] = CACHE_CONTROL_PUBLIC
    return dataset


# MARK: - Health Check


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    dataset = get_data_store().snapshot()
    return {
        "status": "healthy" if dataset.ready else "initializing",
        "timestamp": datetime.now(UTC).isoformat(),
        "version": API_VERSION,
        "ready": dataset.ready,
        "updated_at": dataset.updated_at.isoformat() if dataset.updated_at else None,
        "dataset_version": dataset.version,
        "resort_count": len(dataset),
        "updating": _scheduler.is_updating if _scheduler is not None else False,
    }


# MARK: - Hierarchy


@cached_hierarchy
def _get_hierarchy_cached() -> list[dict]:
    return [c.model_dump() for c in get_location_loader().get_hierarchy()]


@app.get("/hierarchy")
async def get_hierarchy(response: Response):
    """Continent -> country -> province -> resort hierarchy."""
    try:
        continents = _get_hierarchy_cached()
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Error building hierarchy: {e}")
        continents = []
    else:
        response.headers["Cache-Control"] = CACHE_CONTROL_PUBLIC_LONG
    return {"continents": continents}


# MARK: - Forecasts


@app.get("/all", response_model=ForecastResponse)
async def get_all_forecasts(response: Response):
    """All published resort forecasts."""
    dataset = _require_ready(response)
    return ForecastResponse(updated_at=dataset.updated_at, data=dict(dataset.records))


@app.post("/resorts", response_model=ForecastResponse)
async def get_resort_forecasts(request: ResortsRequest, response: Response):
    """Forecasts for a list of resort ids; unknown ids are left out."""
    dataset = _require_ready(response)
    return ForecastResponse(
        updated_at=dataset.updated_at, data=dataset.select(request.resort_ids)
    )


@app.get("/{resort_id}", response_model=ResortForecastResponse)
async def get_resort_forecast(resort_id: str, response: Response):
    """Forecast for one resort."""
    dataset = _require_ready(response)
    record = dataset.get(resort_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Resort not found"
        )
    return ResortForecastResponse(updated_at=dataset.updated_at, data=record)


# For local development
if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
