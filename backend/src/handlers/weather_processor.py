"""Weather update cycle: plan, fetch, assemble and publish resort forecasts.

A cycle runs sequentially:
1. Load the resort locations from the hierarchy file
2. Group them into per-country request batches
3. Fetch every chunk, paced by the provider rate limit
4. Aggregate each resort's base/mid/top forecast
5. Merge the records into the published dataset
"""

import logging
from datetime import UTC, datetime
from typing import Any

from services.batch_planner import plan_batches
from services.fetch_orchestrator import FetchOrchestrator
from services.openmeteo_service import OpenMeteoService
from services.resort_assembler import assemble_resorts
from services.weather_data_store import WeatherDataStore
from utils.constants import MAX_POINTS_PER_BATCH
from utils.location_loader import LocationLoader

logger = logging.getLogger(__name__)


def update_weather_data(
    store: WeatherDataStore,
    loader: LocationLoader | None = None,
    orchestrator: FetchOrchestrator | None = None,
    chunk_size: int = MAX_POINTS_PER_BATCH,
) -> dict[str, Any]:
    """Run one full update cycle and publish its records.

    Chunk and resort failures are absorbed inside the cycle. Any other
    exception propagates before the dataset is touched, so a failed cycle
    leaves the published data exactly as it was.

    Returns:
        Cycle statistics
    """
    started_at = datetime.now(UTC)
    logger.info(f"[{started_at.isoformat()}] Starting weather update...")

    loader = loader or LocationLoader()
    orchestrator = orchestrator or FetchOrchestrator(OpenMeteoService())

    locations = loader.get_locations(refresh=True)
    batches = plan_batches(locations.values(), chunk_size)
    total_chunks = sum(len(batch.chunks()) for batch in batches)
    planned = sum(len(batch.locations) for batch in batches)
    logger.info(
        f"Planned {planned}/{len(locations)} resorts in {len(batches)} countries, "
        f"{total_chunks} chunks"
    )

    country_responses = orchestrator.fetch_all(batches)
    records = assemble_resorts(locations, country_responses)

    completed_at = datetime.now(UTC)
    # Nothing to fetch is a valid, resort-less world rather than a cold start
    dataset = store.apply_update(records, completed_at, mark_ready=not batches)

    stats = {
        "locations": len(locations),
        "locations_planned": planned,
        "countries": len(batches),
        "chunks": total_chunks,
        "failed_chunks": sum(r.failed_chunks for r in country_responses.values()),
        "resorts_updated": len(records),
        "resorts_published": len(dataset),
        "dataset_version": dataset.version,
        "duration_seconds": (completed_at - started_at).total_seconds(),
    }

    logger.info(
        f"[{completed_at.isoformat()}] Weather update complete. "
        f"Updated {stats['resorts_updated']} resorts, "
        f"{stats['failed_chunks']}/{stats['chunks']} chunks failed"
    )
    return stats
