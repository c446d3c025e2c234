"""Services for the snow forecast backend."""

from .fetch_orchestrator import FetchOrchestrator, RequestPacer
from .openmeteo_service import OpenMeteoService
from .weather_data_store import WeatherDataStore

__all__ = [
    "FetchOrchestrator",
    "OpenMeteoService",
    "RequestPacer",
    "WeatherDataStore",
]
