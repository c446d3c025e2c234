"""Load ski resort locations from the hierarchy JSON file.

The file nests continent -> country -> province -> resort id. Resort entries
carry an elevation payload::

    {"displayName": "Whistler Blackcomb", "bot": 675, "mid": 1500,
     "top": 2284, "loc": [50.1163, -122.9574]}

Entries without elevations are structural only and are skipped.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from models.location import (
    Continent,
    Coordinates,
    Country,
    Elevations,
    Location,
    Province,
    ResortSummary,
)
from utils.constants import LOCATIONS_FILE

logger = logging.getLogger(__name__)

# Keys that mark a hierarchy entry as a resort
RESORT_MARKER_KEYS = ("bot", "mid", "top")


class ResortEntry(BaseModel):
    """Leaf node of the hierarchy file."""

    display_name: str | None = Field(None, alias="displayName")
    bot: float
    mid: float
    top: float
    loc: tuple[float, float] | None = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def to_slug_id(name: str) -> str:
    """Convert a name to a URL-friendly id, e.g. 'British Columbia' -> 'british-columbia'."""
    slug = re.sub(r"\s+", "-", name.lower())
    return re.sub(r"[^a-z0-9-]", "", slug)


def default_display_name(resort_id: str) -> str:
    return resort_id.replace("-", " ")


def parse_entry(resort_id: str, payload: Any) -> ResortEntry | None:
    """Classify a hierarchy entry.

    Returns a ResortEntry for resorts and None for structural entries.
    Malformed resort entries are logged and treated as structural.
    """
    if not isinstance(payload, dict):
        return None
    if not any(key in payload for key in RESORT_MARKER_KEYS):
        return None
    try:
        return ResortEntry.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Invalid resort entry {resort_id}: {e.error_count()} errors")
        return None


class LocationLoader:
    """Load and flatten the resort hierarchy from a JSON file."""

    def __init__(self, data_file: Path = LOCATIONS_FILE):
        self.data_file = Path(data_file)
        self._data: dict[str, Any] | None = None

    def load(self, refresh: bool = False) -> dict[str, Any]:
        """Load data from the JSON file, reading it again if refresh is set."""
        if self._data is None or refresh:
            if not self.data_file.exists():
                raise FileNotFoundError(
                    f"Location data file not found: {self.data_file}"
                )

            with open(self.data_file, "r", encoding="utf-8") as f:
                data = json.load(f)

            if not isinstance(data, dict):
                raise ValueError(
                    f"Location data must be a JSON object, got {type(data).__name__}"
                )
            self._data = data
            logger.info(f"Loaded location hierarchy from {self.data_file}")

        return self._data

    def _iter_resorts(self, refresh: bool = False):
        """Yield (continent, country, province, resort_id, entry) for each resort."""
        data = self.load(refresh)
        for continent_name, countries in data.items():
            if not isinstance(countries, dict):
                continue
            for country_name, provinces in countries.items():
                if not isinstance(provinces, dict):
                    continue
                for province_name, resorts in provinces.items():
                    if not isinstance(resorts, dict):
                        continue
                    for resort_id, payload in resorts.items():
                        entry = parse_entry(resort_id, payload)
                        if entry is not None:
                            yield (
                                continent_name,
                                country_name,
                                province_name,
                                resort_id,
                                entry,
                            )

    def get_locations(self, refresh: bool = False) -> dict[str, Location]:
        """Get all resorts as Location objects keyed by id, in file order."""
        locations: dict[str, Location] = {}

        for continent, country, province, resort_id, entry in self._iter_resorts(
            refresh
        ):
            coordinates = None
            if entry.loc is not None:
                try:
                    coordinates = Coordinates(
                        latitude=entry.loc[0], longitude=entry.loc[1]
                    )
                except ValidationError:
                    logger.warning(f"Invalid coordinates for {resort_id}: {entry.loc}")

            if resort_id in locations:
                logger.warning(f"Duplicate resort id {resort_id}, keeping the last one")

            locations[resort_id] = Location(
                location_id=resort_id,
                display_name=entry.display_name or default_display_name(resort_id),
                country=country,
                province=province,
                continent=continent,
                coordinates=coordinates,
                elevations=Elevations(base=entry.bot, mid=entry.mid, top=entry.top),
            )

        return locations

    def get_hierarchy(self) -> list[Continent]:
        """Build the continent -> country -> province -> resort display hierarchy.

        Groups without any resort are left out.
        """
        continents: dict[str, Continent] = {}
        countries: dict[tuple[str, str], Country] = {}
        provinces: dict[tuple[str, str, str], Province] = {}

        for continent_name, country_name, province_name, resort_id, entry in (
            self._iter_resorts()
        ):
            continent = continents.get(continent_name)
            if continent is None:
                continent = Continent(id=to_slug_id(continent_name), name=continent_name)
                continents[continent_name] = continent

            country_key = (continent_name, country_name)
            country = countries.get(country_key)
            if country is None:
                country = Country(id=to_slug_id(country_name), name=country_name)
                countries[country_key] = country
                continent.countries.append(country)

            province_key = (continent_name, country_name, province_name)
            province = provinces.get(province_key)
            if province is None:
                province = Province(id=to_slug_id(province_name), name=province_name)
                provinces[province_key] = province
                country.provinces.append(province)

            province.resorts.append(
                ResortSummary(
                    id=resort_id,
                    display_name=entry.display_name
                    or default_display_name(resort_id),
                )
            )

        return list(continents.values())
