"""Aggregation of hourly provider forecasts into AM/PM/NIGHT periods per date."""

import logging
import statistics
from collections.abc import Iterable
from datetime import UTC, datetime

from models.forecast import (
    DayForecast,
    HourlySample,
    Period,
    PeriodAggregate,
    SnowQuality,
)
from models.provider import MAIN_HOURLY_VARIABLES, HourlySeries, PointResponse
from services.snow_estimation_service import estimate_hourly_snow

logger = logging.getLogger(__name__)

# Decimal precision of published values
DEFAULT_PRECISION = 2
# Precipitation-family sums keep sub-unit detail
PRECIPITATION_PRECISION = 4

_VARIABLE_INDEX = {name: i for i, name in enumerate(MAIN_HOURLY_VARIABLES)}


def _round(value: float | None, digits: int = DEFAULT_PRECISION) -> float | None:
    if value is None:
        return None
    return round(value, digits)


def _present(values: Iterable[float | None]) -> list[float]:
    """Drop missing provider values."""
    return [v for v in values if v is not None]


def _mean(values: list[float]) -> float | None:
    return statistics.fmean(values) if values else None


def _mode(values: list[float]) -> float | None:
    """Most frequent value; ties go to the larger value."""
    if not values:
        return None
    counts: dict[float, int] = {}
    max_freq = 0
    mode = values[0]
    for value in values:
        counts[value] = counts.get(value, 0) + 1
        if counts[value] > max_freq:
            max_freq = counts[value]
            mode = value
        elif counts[value] == max_freq and value > mode:
            mode = value
    return mode


def _date_and_period(timestamp: int, utc_offset_seconds: int) -> tuple[str, Period]:
    """Local date key and period for an epoch timestamp."""
    local = datetime.fromtimestamp(timestamp + utc_offset_seconds, UTC)
    return local.date().isoformat(), Period.for_hour(local.hour)


def _value_at(values: list[float | None], index: int) -> float | None:
    return values[index] if index < len(values) else None


def hourly_samples(hourly: HourlySeries) -> list[HourlySample]:
    """Build one HourlySample per step of the main series."""

    def column(name: str) -> list[float | None]:
        position = _VARIABLE_INDEX[name]
        if position >= len(hourly.variables):
            return []
        return hourly.values(position)

    wind_speed = column("wind_speed_10m")
    wind_direction = column("wind_direction_10m")
    temperature = column("temperature_2m")
    humidity = column("relative_humidity_2m")
    precipitation = column("precipitation")
    weather_code = column("weather_code")
    pressure = column("surface_pressure")
    rain = column("rain")
    snowfall = column("snowfall")

    return [
        HourlySample(
            wind_speed=_value_at(wind_speed, i),
            wind_direction=_value_at(wind_direction, i),
            temperature=_value_at(temperature, i),
            humidity=_value_at(humidity, i),
            precipitation=_value_at(precipitation, i),
            weather_code=_value_at(weather_code, i),
            surface_pressure=_value_at(pressure, i),
            rain=_value_at(rain, i),
            snowfall=_value_at(snowfall, i),
        )
        for i in range(hourly.length)
    ]


def aggregate_period(
    samples: list[HourlySample], freezing_levels: list[float]
) -> PeriodAggregate | None:
    """Reduce the hours of one period.

    Returns None for a period without hours, so "no data" never reads as
    calm weather.
    """
    if not samples:
        return None

    total_snow_estimate_cm = 0.0
    ratios: list[float] = []
    qualities: list[SnowQuality] = []

    for sample in samples:
        if (
            sample.temperature is None
            or sample.humidity is None
            or sample.snowfall is None
        ):
            continue
        estimate = estimate_hourly_snow(
            sample.temperature, sample.humidity, sample.snowfall
        )
        total_snow_estimate_cm += estimate.snow_cm
        if estimate.ratio > 0:
            ratios.append(estimate.ratio)
        # Quality only for hours with precipitation
        if sample.precipitation is not None and sample.precipitation > 0:
            qualities.append(estimate.quality)

    # min() keeps the first of equally bad qualities
    worst_quality = min(qualities, key=lambda q: q.rank) if qualities else None
    avg_ratio = statistics.fmean(ratios) if ratios else 0.0

    temperatures = _present(s.temperature for s in samples)
    wind_direction = _mode(_present(s.wind_direction for s in samples))
    weather_code = _mode(_present(s.weather_code for s in samples))
    freezing = _present(freezing_levels)

    return PeriodAggregate(
        temperature_max=_round(max(temperatures)) if temperatures else None,
        temperature_min=_round(min(temperatures)) if temperatures else None,
        temperature_avg=_round(_mean(temperatures)),
        temperature_median=_round(
            statistics.median(temperatures) if temperatures else None
        ),
        wind_speed=_round(_mean(_present(s.wind_speed for s in samples))),
        wind_direction=round(wind_direction) if wind_direction is not None else None,
        relative_humidity=_round(_mean(_present(s.humidity for s in samples))),
        precipitation_total=_round(
            sum(_present(s.precipitation for s in samples)), PRECIPITATION_PRECISION
        ),
        rain_total=_round(
            sum(_present(s.rain for s in samples)), PRECIPITATION_PRECISION
        ),
        snowfall_total=_round(
            sum(_present(s.snowfall for s in samples)), PRECIPITATION_PRECISION
        ),
        weather_code=int(weather_code) if weather_code is not None else None,
        surface_pressure=_round(
            _mean(_present(s.surface_pressure for s in samples))
        ),
        freezing_level=_round(max(freezing)) if freezing else None,
        snowfall_estimate=_round(total_snow_estimate_cm, PRECIPITATION_PRECISION),
        snow_to_liquid_ratio=_round(avg_ratio),
        snow_quality=worst_quality,
    )


def aggregate_forecast(
    main: PointResponse | None, freezing: PointResponse | None = None
) -> dict[str, DayForecast] | None:
    """Aggregate one elevation's hourly forecast into dated AM/PM/NIGHT periods.

    The main series decides which dates exist; freezing level samples are
    bucketed with their own start, interval and UTC offset and dropped when
    their date has no main-series hours.

    Returns:
        Mapping of ISO date to DayForecast, or None when the main response
        carries no hourly data.
    """
    if main is None or main.hourly is None:
        logger.warning("Skipping location: missing response or hourly data")
        return None

    hourly = main.hourly
    samples = hourly_samples(hourly)
    if not samples:
        logger.warning("Skipping location: empty hourly series")
        return None

    hours_by_date: dict[str, dict[Period, list[HourlySample]]] = {}
    for i, sample in enumerate(samples):
        date_key, period = _date_and_period(
            hourly.time + i * hourly.interval, main.utc_offset_seconds
        )
        day = hours_by_date.setdefault(date_key, {p: [] for p in Period})
        day[period].append(sample)

    freezing_by_date: dict[str, dict[Period, list[float]]] = {
        date_key: {p: [] for p in Period} for date_key in hours_by_date
    }
    if freezing is not None and freezing.hourly is not None:
        freezing_hourly = freezing.hourly
        levels = freezing_hourly.values(0) if freezing_hourly.variables else []
        for i, level in enumerate(levels):
            date_key, period = _date_and_period(
                freezing_hourly.time + i * freezing_hourly.interval,
                freezing.utc_offset_seconds,
            )
            if date_key in freezing_by_date and level is not None:
                freezing_by_date[date_key][period].append(level)

    forecast: dict[str, DayForecast] = {}
    for date_key, periods in hours_by_date.items():
        freezing_periods = freezing_by_date[date_key]
        forecast[date_key] = DayForecast(
            am=aggregate_period(periods[Period.AM], freezing_periods[Period.AM]),
            pm=aggregate_period(periods[Period.PM], freezing_periods[Period.PM]),
            night=aggregate_period(
                periods[Period.NIGHT], freezing_periods[Period.NIGHT]
            ),
        )

    return forecast
