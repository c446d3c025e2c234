"""Published, in-memory forecast dataset.

The dataset is an immutable snapshot. Each completed update cycle produces a
new snapshot with merge_dataset() and the store swaps its reference, so
readers always see either the previous or the new snapshot, never a partial
merge.
"""

import logging
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType

from models.forecast import ResortRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishedDataset:
    """Immutable snapshot of all published resort records."""

    records: Mapping[str, ResortRecord] = field(
        default_factory=lambda: MappingProxyType({})
    )
    updated_at: datetime | None = None
    version: int = 0
    ready: bool = False

    def __len__(self) -> int:
        return len(self.records)

    def get(self, resort_id: str) -> ResortRecord | None:
        return self.records.get(resort_id)

    def select(self, resort_ids: Iterable[str]) -> dict[str, ResortRecord]:
        """Records for the known ids of a list; unknown ids are ignored."""
        return {
            rid: self.records[rid]
            for rid in resort_ids
            if isinstance(rid, str) and rid in self.records
        }


EMPTY_DATASET = PublishedDataset()


def merge_dataset(
    old: PublishedDataset,
    delta: Mapping[str, ResortRecord],
    updated_at: datetime,
    mark_ready: bool | None = None,
) -> PublishedDataset:
    """Overlay a cycle's records onto a snapshot.

    New records replace same-id records and every other record is kept. An
    empty delta keeps the existing records untouched. The update timestamp
    always advances.

    Args:
        old: Current snapshot
        delta: Records produced by the cycle
        updated_at: Cycle completion time
        mark_ready: Also mark the dataset ready when the delta is empty.
            A non-empty delta always makes it ready.
    """
    if delta:
        records = MappingProxyType({**old.records, **delta})
    else:
        records = old.records

    ready = old.ready or bool(delta) or bool(mark_ready)
    return PublishedDataset(
        records=records,
        updated_at=updated_at,
        version=old.version + 1,
        ready=ready,
    )


class WeatherDataStore:
    """Single-writer owner of the published dataset.

    Readers call snapshot() and keep the returned immutable value; they never
    block on writers.
    """

    def __init__(self, initial: PublishedDataset = EMPTY_DATASET):
        self._dataset = initial
        self._write_lock = threading.Lock()

    def snapshot(self) -> PublishedDataset:
        return self._dataset

    def is_ready(self) -> bool:
        return self._dataset.ready

    def get_resort(self, resort_id: str) -> ResortRecord | None:
        return self._dataset.get(resort_id)

    def get_resorts(self, resort_ids: Iterable[str]) -> dict[str, ResortRecord]:
        return self._dataset.select(resort_ids)

    def apply_update(
        self,
        records: Mapping[str, ResortRecord],
        updated_at: datetime,
        mark_ready: bool | None = None,
    ) -> PublishedDataset:
        """Merge a cycle's records and publish the new snapshot."""
        with self._write_lock:
            new = merge_dataset(self._dataset, records, updated_at, mark_ready)
            self._dataset = new

        logger.info(
            f"Published dataset v{new.version}: {len(records)} updated, "
            f"{len(new)} total resorts"
        )
        return new

    def reset(self) -> None:
        """Drop all data. Useful for testing."""
        with self._write_lock:
            self._dataset = EMPTY_DATASET
