"""Planning of provider request batches per country."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from models.location import Location
from utils.constants import COUNTRY_MODELS, DEFAULT_MODEL, MAX_POINTS_PER_BATCH

logger = logging.getLogger(__name__)


def model_for_country(country: str) -> str:
    """Forecast model used for a country's main forecast."""
    return COUNTRY_MODELS.get(country, DEFAULT_MODEL)


def main_points(
    locations: Iterable[Location],
) -> tuple[list[float], list[float], list[float]]:
    """Latitudes, longitudes and elevations of the 3 points per location.

    Point triplet [3i, 3i+1, 3i+2] is always base, mid, top of location i.
    """
    lats: list[float] = []
    lons: list[float] = []
    elevs: list[float] = []
    for loc in locations:
        lat, lon = loc.coordinates.latitude, loc.coordinates.longitude
        lats.extend([lat, lat, lat])
        lons.extend([lon, lon, lon])
        elevs.extend(loc.elevations.as_list())
    return lats, lons, elevs


def freezing_points(
    locations: Iterable[Location],
) -> tuple[list[float], list[float]]:
    """Latitudes and longitudes of the single freezing level point per location."""
    locations = list(locations)
    return (
        [loc.coordinates.latitude for loc in locations],
        [loc.coordinates.longitude for loc in locations],
    )


@dataclass(frozen=True)
class RequestChunk:
    """A provider-call-sized, contiguous slice of a country batch."""

    country: str
    model: str
    index: int
    total: int
    locations: tuple[Location, ...]

    @property
    def size(self) -> int:
        return len(self.locations)

    @property
    def location_ids(self) -> list[str]:
        return [loc.location_id for loc in self.locations]

    def main_points(self) -> tuple[list[float], list[float], list[float]]:
        return main_points(self.locations)

    def freezing_points(self) -> tuple[list[float], list[float]]:
        return freezing_points(self.locations)


@dataclass
class CountryBatch:
    """Locations of one country sharing a forecast model, in input order."""

    country: str
    model: str
    locations: list[Location] = field(default_factory=list)
    chunk_size: int = MAX_POINTS_PER_BATCH

    @property
    def location_ids(self) -> list[str]:
        return [loc.location_id for loc in self.locations]

    def chunks(self) -> list[RequestChunk]:
        """Slice the batch into request chunks of at most chunk_size locations."""
        slices = [
            tuple(self.locations[i : i + self.chunk_size])
            for i in range(0, len(self.locations), self.chunk_size)
        ]
        return [
            RequestChunk(
                country=self.country,
                model=self.model,
                index=i,
                total=len(slices),
                locations=locations,
            )
            for i, locations in enumerate(slices)
        ]


def plan_batches(
    locations: Iterable[Location], chunk_size: int = MAX_POINTS_PER_BATCH
) -> list[CountryBatch]:
    """Group locations by country, one batch per country in first-seen order.

    Locations without coordinates cannot be fetched and are left out.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    batches: dict[str, CountryBatch] = {}
    for location in locations:
        if not location.has_coordinates:
            logger.debug(f"Skipping {location.location_id}: no coordinates")
            continue

        batch = batches.get(location.country)
        if batch is None:
            batch = CountryBatch(
                country=location.country,
                model=model_for_country(location.country),
                chunk_size=chunk_size,
            )
            batches[location.country] = batch
        batch.locations.append(location)

    return list(batches.values())
