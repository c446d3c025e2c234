"""Location data models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ElevationLevel(str, Enum):
    """Elevation levels for ski resorts."""

    BASE = "base"
    MID = "mid"
    TOP = "top"


ELEVATION_LEVELS: tuple[ElevationLevel, ...] = (
    ElevationLevel.BASE,
    ElevationLevel.MID,
    ElevationLevel.TOP,
)


class Coordinates(BaseModel):
    """Latitude/longitude pair for a resort."""

    latitude: float = Field(..., ge=-90, le=90, description="Latitude coordinate")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude coordinate")

    model_config = ConfigDict(frozen=True)


class Elevations(BaseModel):
    """Base, mid and top elevations of a resort in meters."""

    base: float = Field(..., description="Base elevation in meters")
    mid: float = Field(..., description="Mid-mountain elevation in meters")
    top: float = Field(..., description="Summit elevation in meters")

    model_config = ConfigDict(frozen=True)

    def at(self, level: ElevationLevel) -> float:
        """Get elevation for a level."""
        return getattr(self, ElevationLevel(level).value)

    def as_list(self) -> list[float]:
        """Elevations in base, mid, top order."""
        return [self.base, self.mid, self.top]


class Location(BaseModel):
    """A queryable ski resort taken from the location hierarchy."""

    location_id: str = Field(..., description="Unique identifier for the resort")
    display_name: str = Field(..., description="Resort display name")
    country: str = Field(..., description="Owning country name")
    province: str | None = Field(None, description="State/Province")
    continent: str | None = Field(None, description="Continent name")
    coordinates: Coordinates | None = Field(
        None, description="Resort coordinates, None when unknown"
    )
    elevations: Elevations

    model_config = ConfigDict(frozen=True)

    @property
    def has_coordinates(self) -> bool:
        return self.coordinates is not None


class ResortSummary(BaseModel):
    """Resort entry of the display hierarchy."""

    id: str
    display_name: str


class Province(BaseModel):
    id: str
    name: str
    resorts: list[ResortSummary] = Field(default_factory=list)


class Country(BaseModel):
    id: str
    name: str
    provinces: list[Province] = Field(default_factory=list)


class Continent(BaseModel):
    id: str
    name: str
    countries: list[Country] = Field(default_factory=list)
