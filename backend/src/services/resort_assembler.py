"""Assembly of three-elevation resort records from fetched responses."""

import logging

from models.forecast import ElevationForecast, ElevationMetadata, ResortRecord
from models.location import ELEVATION_LEVELS, Location
from models.provider import LocationResponses
from services.fetch_orchestrator import CountryResponses
from services.period_aggregation_service import aggregate_forecast

logger = logging.getLogger(__name__)


def assemble_resort(
    location: Location, responses: LocationResponses
) -> ResortRecord | None:
    """Build a resort record, or None if any elevation has no forecast.

    All elevations share the location's freezing level series.
    """
    lat = location.coordinates.latitude
    lon = location.coordinates.longitude

    elevation_forecasts: dict[str, ElevationForecast] = {}
    for level in ELEVATION_LEVELS:
        forecast = aggregate_forecast(getattr(responses, level.value), responses.freezing)
        if not forecast:
            return None
        elevation_forecasts[level.value] = ElevationForecast(
            metadata=ElevationMetadata(
                elevation=location.elevations.at(level), lat=lat, lon=lon
            ),
            forecast=forecast,
        )

    return ResortRecord(**elevation_forecasts)


def assemble_resorts(
    locations: dict[str, Location],
    country_responses: dict[str, CountryResponses],
) -> dict[str, ResortRecord]:
    """Assemble records for every fetched location.

    Resorts with incomplete data are left out of this cycle; one bad resort
    never stops the others.
    """
    records: dict[str, ResortRecord] = {}

    for country, responses in country_responses.items():
        for location_responses in responses.by_location():
            location_id = location_responses.location_id
            try:
                location = locations[location_id]
                record = assemble_resort(location, location_responses)
                if record is None:
                    logger.warning(
                        f"Incomplete data for {location_id} ({country}), skipping resort"
                    )
                    continue
                records[location_id] = record
            except Exception as e:
                logger.error(f"Error processing {location_id}: {e}")

    return records
