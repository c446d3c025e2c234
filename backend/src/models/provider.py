"""Weather provider request and response models."""

from pydantic import BaseModel, ConfigDict, Field

# Order matters: values are read back by position of the request's hourly list
MAIN_HOURLY_VARIABLES: tuple[str, ...] = (
    "wind_speed_10m",
    "wind_direction_10m",
    "temperature_2m",
    "relative_humidity_2m",
    "precipitation",
    "weather_code",
    "surface_pressure",
    "rain",
    "snowfall",
)

FREEZING_HOURLY_VARIABLES: tuple[str, ...] = ("freezing_level_height",)


class HourlySeries(BaseModel):
    """Hourly series of one provider point response."""

    time: int = Field(..., description="Series start (epoch seconds, UTC)")
    time_end: int = Field(..., description="Series end, exclusive (epoch seconds)")
    interval: int = Field(..., gt=0, description="Step between samples (seconds)")
    variables: list[list[float | None]] = Field(
        default_factory=list,
        description="One value list per requested variable, in request order",
    )

    model_config = ConfigDict(frozen=True)

    @property
    def length(self) -> int:
        """Number of samples between start and end."""
        return max(0, (self.time_end - self.time) // self.interval)

    def values(self, index: int) -> list[float | None]:
        """Values of the variable at a request position."""
        return self.variables[index]


class PointResponse(BaseModel):
    """Provider response for one requested point."""

    latitude: float
    longitude: float
    elevation: float | None = None
    utc_offset_seconds: int = 0
    hourly: HourlySeries | None = None

    model_config = ConfigDict(frozen=True)


class LocationResponses(BaseModel):
    """Provider responses belonging to one location, None where the fetch failed."""

    location_id: str
    base: PointResponse | None = None
    mid: PointResponse | None = None
    top: PointResponse | None = None
    freezing: PointResponse | None = None

    model_config = ConfigDict(frozen=True)
