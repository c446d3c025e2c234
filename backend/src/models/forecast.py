"""Forecast and snow estimate data models."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SnowQuality(str, Enum):
    """Snow quality classes derived from wet-bulb temperature."""

    RAIN = "rain"
    SLEET_MIX = "sleet/mix"
    WET_SNOW = "wet_snow"
    DRY_SNOW = "dry_snow"
    POWDER = "powder"

    @property
    def rank(self) -> int:
        """Rank from worst (rain) to best (powder)."""
        return SNOW_QUALITY_RANK[self]


# Worst to best: rain -> sleet/mix -> wet_snow -> dry_snow -> powder
SNOW_QUALITY_RANK: dict[SnowQuality, int] = {
    SnowQuality.RAIN: 0,
    SnowQuality.SLEET_MIX: 1,
    SnowQuality.WET_SNOW: 2,
    SnowQuality.DRY_SNOW: 3,
    SnowQuality.POWDER: 4,
}


class Period(str, Enum):
    """Day-parts used for aggregation."""

    AM = "AM"  # 00:00 - 11:59
    PM = "PM"  # 12:00 - 17:59
    NIGHT = "NIGHT"  # 18:00 - 23:59

    @classmethod
    def for_hour(cls, hour: int) -> "Period":
        if hour < 12:
            return cls.AM
        if hour < 18:
            return cls.PM
        return cls.NIGHT


@dataclass(frozen=True)
class SnowEstimate:
    """Snow estimate for a single forecast hour."""

    snow_cm: float
    ratio: float
    snow_fraction: float
    quality: SnowQuality


@dataclass(frozen=True)
class HourlySample:
    """One forecast hour of the main variables. Values may be None when missing."""

    wind_speed: float | None
    wind_direction: float | None
    temperature: float | None
    humidity: float | None
    precipitation: float | None
    weather_code: float | None
    surface_pressure: float | None
    rain: float | None
    snowfall: float | None


class PeriodAggregate(BaseModel):
    """Aggregated weather for one period (AM/PM/NIGHT) of one date."""

    temperature_max: float | None = Field(None, description="Max temperature (°C)")
    temperature_min: float | None = Field(None, description="Min temperature (°C)")
    temperature_avg: float | None = Field(None, description="Mean temperature (°C)")
    temperature_median: float | None = Field(
        None, description="Median temperature (°C)"
    )
    wind_speed: float | None = Field(None, description="Mean wind speed (km/h)")
    wind_direction: int | None = Field(
        None, description="Most frequent wind direction (degrees)"
    )
    relative_humidity: float | None = Field(
        None, description="Mean relative humidity (%)"
    )
    precipitation_total: float = Field(0.0, description="Total precipitation (mm)")
    rain_total: float = Field(0.0, description="Total rain (mm)")
    snowfall_total: float = Field(
        0.0, description="Total provider snowfall (cm, 0.7 density)"
    )
    weather_code: int | None = Field(None, description="Most frequent WMO code")
    surface_pressure: float | None = Field(
        None, description="Mean surface pressure (hPa)"
    )
    freezing_level: float | None = Field(
        None, description="Max freezing level height (m), None without samples"
    )

    # Snow estimation
    snowfall_estimate: float = Field(
        0.0, description="Estimated snow accumulation using Kuchera ratios (cm)"
    )
    snow_to_liquid_ratio: float = Field(
        0.0, description="Mean snow-to-liquid ratio of hours with an estimate"
    )
    snow_quality: SnowQuality | None = Field(
        None, description="Worst snow quality among hours with precipitation"
    )

    model_config = ConfigDict(frozen=True, use_enum_values=True)


class DayForecast(BaseModel):
    """The three period aggregates of one calendar date."""

    am: PeriodAggregate | None = None
    pm: PeriodAggregate | None = None
    night: PeriodAggregate | None = None

    model_config = ConfigDict(frozen=True)


class ElevationMetadata(BaseModel):
    elevation: float
    lat: float
    lon: float

    model_config = ConfigDict(frozen=True)


class ElevationForecast(BaseModel):
    """Forecast for one resort elevation, keyed by ISO date."""

    metadata: ElevationMetadata
    forecast: dict[str, DayForecast] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


class ResortRecord(BaseModel):
    """Three-elevation forecast record published for a resort."""

    base: ElevationForecast
    mid: ElevationForecast
    top: ElevationForecast

    model_config = ConfigDict(frozen=True)
