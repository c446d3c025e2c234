"""Paced, failure-isolated fetching of planned request chunks."""

import logging
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Protocol

from models.provider import (
    FREEZING_HOURLY_VARIABLES,
    MAIN_HOURLY_VARIABLES,
    LocationResponses,
    PointResponse,
)
from services.batch_planner import CountryBatch, RequestChunk
from utils.constants import BATCH_DELAY_SECONDS, FORECAST_DAYS, FREEZING_LEVEL_MODEL

logger = logging.getLogger(__name__)

POINTS_PER_LOCATION = 3  # base, mid, top


class ForecastProvider(Protocol):
    def fetch_points(
        self,
        latitudes,
        longitudes,
        hourly,
        model: str,
        forecast_days: int,
        elevations=None,
    ) -> list[PointResponse]: ...


class RequestPacer:
    """Fixed-interval ticker shared by every chunk of a run.

    The first dispatch after reset() goes out immediately; every later one
    waits the full interval.
    """

    def __init__(
        self,
        interval_seconds: float = BATCH_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.interval_seconds = interval_seconds
        self._sleep = sleep
        self._first = True

    def reset(self) -> None:
        self._first = True

    def wait(self) -> float:
        """Block until the next dispatch is allowed. Returns seconds waited."""
        if self._first:
            self._first = False
            return 0.0
        if self.interval_seconds <= 0:
            return 0.0
        logger.info(f"  Waiting {self.interval_seconds:g}s before next chunk...")
        self._sleep(self.interval_seconds)
        return self.interval_seconds


@dataclass
class CountryResponses:
    """Responses of one country, aligned to the batch's location order.

    main holds 3 entries per location (base, mid, top) and freezing holds one;
    entries are None for locations of failed chunks.
    """

    country: str
    location_ids: list[str]
    main: list[PointResponse | None] = field(default_factory=list)
    freezing: list[PointResponse | None] = field(default_factory=list)
    failed_chunks: int = 0

    def __post_init__(self) -> None:
        self._positions = {lid: i for i, lid in enumerate(self.location_ids)}

    def for_location(self, location_id: str) -> LocationResponses:
        """Responses of one location, keyed by elevation."""
        i = self._positions[location_id]
        base = POINTS_PER_LOCATION * i

        def main_at(index: int) -> PointResponse | None:
            return self.main[index] if index < len(self.main) else None

        return LocationResponses(
            location_id=location_id,
            base=main_at(base),
            mid=main_at(base + 1),
            top=main_at(base + 2),
            freezing=self.freezing[i] if i < len(self.freezing) else None,
        )

    def by_location(self) -> Iterator[LocationResponses]:
        for location_id in self.location_ids:
            yield self.for_location(location_id)


class FetchOrchestrator:
    """Run every chunk of every country batch against the provider, one at a time."""

    def __init__(
        self,
        provider: ForecastProvider,
        pacer: RequestPacer | None = None,
        forecast_days: int = FORECAST_DAYS,
        freezing_model: str = FREEZING_LEVEL_MODEL,
    ):
        self.provider = provider
        self.pacer = pacer or RequestPacer()
        self.forecast_days = forecast_days
        self.freezing_model = freezing_model

    def fetch_all(self, batches: list[CountryBatch]) -> dict[str, CountryResponses]:
        """Fetch all batches sequentially.

        A failing chunk never aborts the run: its positions are padded with
        None so every country's lists keep 3 main and 1 freezing entry per
        location.
        """
        self.pacer.reset()
        results: dict[str, CountryResponses] = {}

        for batch in batches:
            chunks = batch.chunks()
            total = len(chunks)
            logger.info(
                f"Fetching data for {batch.country} ({len(batch.locations)} resorts, "
                f"{total} batch{'es' if total > 1 else ''}) using model: {batch.model}..."
            )

            responses = CountryResponses(
                country=batch.country, location_ids=batch.location_ids
            )
            for chunk in chunks:
                self.pacer.wait()
                main, freezing = self.fetch_chunk(chunk)
                if main is None or freezing is None:
                    responses.failed_chunks += 1
                    main = [None] * (POINTS_PER_LOCATION * chunk.size)
                    freezing = [None] * chunk.size
                responses.main.extend(main)
                responses.freezing.extend(freezing)

            results[batch.country] = responses

        return results

    def fetch_chunk(
        self, chunk: RequestChunk
    ) -> tuple[list[PointResponse] | None, list[PointResponse] | None]:
        """Issue the main and freezing level calls for one chunk.

        Returns (None, None) if either call fails.
        """
        logger.info(
            f"  Fetching {chunk.country} chunk {chunk.index + 1}/{chunk.total} "
            f"({chunk.size} resorts)..."
        )
        lats, lons, elevs = chunk.main_points()
        freezing_lats, freezing_lons = chunk.freezing_points()

        try:
            main = self.provider.fetch_points(
                latitudes=lats,
                longitudes=lons,
                elevations=elevs,
                hourly=list(MAIN_HOURLY_VARIABLES),
                model=chunk.model,
                forecast_days=self.forecast_days,
            )
            freezing = self.provider.fetch_points(
                latitudes=freezing_lats,
                longitudes=freezing_lons,
                hourly=list(FREEZING_HOURLY_VARIABLES),
                model=self.freezing_model,
                forecast_days=self.forecast_days,
            )
        except Exception as e:
            logger.error(
                f"  Failed to fetch batch for {chunk.country} chunk "
                f"{chunk.index + 1}/{chunk.total}: {e}"
            )
            return None, None

        if len(main) != len(lats) or len(freezing) != len(freezing_lats):
            logger.error(
                f"  Misaligned response for {chunk.country} chunk "
                f"{chunk.index + 1}/{chunk.total}: got {len(main)}/{len(freezing)} "
                f"points for {len(lats)}/{len(freezing_lats)} requested"
            )
            return None, None

        return main, freezing
