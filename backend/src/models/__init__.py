"""Data models for the snow forecast backend."""

from .forecast import (
    DayForecast,
    ElevationForecast,
    Period,
    PeriodAggregate,
    ResortRecord,
    SnowEstimate,
    SnowQuality,
)
from .location import ElevationLevel, Location
from .provider import HourlySeries, PointResponse

__all__ = [
    "DayForecast",
    "ElevationForecast",
    "ElevationLevel",
    "HourlySeries",
    "Location",
    "Period",
    "PeriodAggregate",
    "PointResponse",
    "ResortRecord",
    "SnowEstimate",
    "SnowQuality",
]
