"""Pytest configuration and shared fixtures."""

from datetime import UTC, datetime

import pytest

from models.forecast import (
    DayForecast,
    ElevationForecast,
    ElevationMetadata,
    PeriodAggregate,
    ResortRecord,
)
from models.location import Coordinates, Elevations, Location
from models.provider import MAIN_HOURLY_VARIABLES, HourlySeries, PointResponse

# 2026-01-15T00:00:00Z
START = int(datetime(2026, 1, 15, tzinfo=UTC).timestamp())
HOUR = 3600


def _column(value, hours):
    if isinstance(value, list):
        return list(value)
    return [value] * hours


def build_main_response(
    hours=24,
    start=START,
    utc_offset=0,
    interval=HOUR,
    wind_speed=10.0,
    wind_direction=270.0,
    temperature=-5.0,
    humidity=80.0,
    precipitation=0.0,
    weather_code=3.0,
    surface_pressure=850.0,
    rain=0.0,
    snowfall=0.0,
    latitude=50.0,
    longitude=-120.0,
    elevation=1500.0,
) -> PointResponse:
    """Main-variable response; scalars are repeated for every hour."""
    columns = {
        "wind_speed_10m": wind_speed,
        "wind_direction_10m": wind_direction,
        "temperature_2m": temperature,
        "relative_humidity_2m": humidity,
        "precipitation": precipitation,
        "weather_code": weather_code,
        "surface_pressure": surface_pressure,
        "rain": rain,
        "snowfall": snowfall,
    }
    return PointResponse(
        latitude=latitude,
        longitude=longitude,
        elevation=elevation,
        utc_offset_seconds=utc_offset,
        hourly=HourlySeries(
            time=start,
            time_end=start + hours * interval,
            interval=interval,
            variables=[_column(columns[name], hours) for name in MAIN_HOURLY_VARIABLES],
        ),
    )


def build_freezing_response(
    levels, start=START, utc_offset=0, interval=HOUR, latitude=50.0, longitude=-120.0
) -> PointResponse:
    """Freezing level response with one value per step."""
    return PointResponse(
        latitude=latitude,
        longitude=longitude,
        utc_offset_seconds=utc_offset,
        hourly=HourlySeries(
            time=start,
            time_end=start + len(levels) * interval,
            interval=interval,
            variables=[list(levels)],
        ),
    )


class FakeForecastProvider:
    """In-memory provider recording calls.

    Each response echoes its requested point so alignment can be checked.
    Calls listed in fail_calls (1-based) raise instead.
    """

    def __init__(self, fail_calls=(), hours=24, fail_all=False):
        self.calls = []
        self.fail_calls = set(fail_calls)
        self.fail_all = fail_all
        self.hours = hours

    def fetch_points(
        self, latitudes, longitudes, hourly, model, forecast_days, elevations=None
    ):
        self.calls.append(
            {
                "latitudes": list(latitudes),
                "longitudes": list(longitudes),
                "elevations": list(elevations) if elevations is not None else None,
                "hourly": list(hourly),
                "model": model,
                "forecast_days": forecast_days,
            }
        )
        if self.fail_all or len(self.calls) in self.fail_calls:
            raise ConnectionError("provider unavailable")

        if list(hourly) == ["freezing_level_height"]:
            return [
                build_freezing_response(
                    [2000.0] * self.hours, latitude=lat, longitude=lon
                )
                for lat, lon in zip(latitudes, longitudes)
            ]
        return [
            build_main_response(
                hours=self.hours,
                latitude=lat,
                longitude=lon,
                elevation=elev,
                snowfall=0.5,
                precipitation=0.4,
            )
            for lat, lon, elev in zip(latitudes, longitudes, elevations)
        ]


def build_location(
    location_id="big-white",
    country="Canada",
    lat=49.7167,
    lon=-118.9333,
    base=1508,
    mid=1800,
    top=2319,
    with_coordinates=True,
) -> Location:
    return Location(
        location_id=location_id,
        display_name=location_id.replace("-", " ").title(),
        country=country,
        province="Test Province",
        continent="Test Continent",
        coordinates=Coordinates(latitude=lat, longitude=lon)
        if with_coordinates
        else None,
        elevations=Elevations(base=base, mid=mid, top=top),
    )


def build_resort_record(temperature=-5.0, date="2026-01-15") -> ResortRecord:
    """Minimal record with one AM period per elevation."""

    def elevation(meters):
        return ElevationForecast(
            metadata=ElevationMetadata(elevation=meters, lat=49.7, lon=-118.9),
            forecast={
                date: DayForecast(
                    am=PeriodAggregate(
                        temperature_max=temperature,
                        temperature_min=temperature,
                        temperature_avg=temperature,
                        temperature_median=temperature,
                        snowfall_total=1.0,
                        snowfall_estimate=1.0,
                    )
                )
            },
        )

    return ResortRecord(base=elevation(1500), mid=elevation(1800), top=elevation(2300))


@pytest.fixture
def make_main_response():
    return build_main_response


@pytest.fixture
def make_freezing_response():
    return build_freezing_response


@pytest.fixture
def make_location():
    return build_location


@pytest.fixture
def make_resort_record():
    return build_resort_record


@pytest.fixture
def fake_provider_factory():
    return FakeForecastProvider


@pytest.fixture
def sample_locations():
    """Five resorts in three countries; verbier has no coordinates."""
    return [
        build_location("whistler-blackcomb", "Canada", 50.1163, -122.9574, 675, 1500, 2284),
        build_location("alta", "USA", 40.5884, -111.6386, 2600, 2900, 3216),
        build_location("big-white", "Canada", 49.7167, -118.9333, 1508, 1800, 2319),
        build_location("verbier", "Switzerland", 46.0, 7.2, 820, 2200, 3330, with_coordinates=False),
        build_location("zermatt", "Switzerland", 46.0207, 7.7491, 1620, 2600, 3883),
    ]


@pytest.fixture
def locations_file(tmp_path):
    """Hierarchy file with resorts, structural entries and a malformed resort."""
    path = tmp_path / "locations.json"
    path.write_text(
        """{
  "North America": {
    "Canada": {
      "British Columbia": {
        "whistler-blackcomb": {"displayName": "Whistler Blackcomb", "bot": 675, "mid": 1500, "top": 2284, "loc": [50.1163, -122.9574]},
        "big-white": {"bot": 1508, "mid": 1800, "top": 2319, "loc": [49.7167, -118.9333]},
        "_meta": {"source": "manual"}
      },
      "Yukon": {
        "notes": "no resorts yet"
      }
    },
    "USA": {
      "Utah": {
        "alta": {"displayName": "Alta", "bot": 2600, "mid": 2900, "top": 3216, "loc": [40.5884, -111.6386]},
        "broken-resort": {"displayName": "Broken", "bot": 1000}
      }
    }
  },
  "Europe": {
    "Switzerland": {
      "Valais": {
        "verbier": {"displayName": "Verbier", "bot": 820, "mid": 2200, "top": 3330}
      }
    }
  }
}""",
        encoding="utf-8",
    )
    return path
