"""Fold flat reachability rows into a station-keyed index."""

import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from ..config import RunConfig
from ..core.models import (
    FlatRow,
    ReachableInfo,
    StationRecord,
    StructuredOutput,
    TargetIndexEntry,
)

logger = logging.getLogger(__name__)


def pick_better_reachable(
    existing: ReachableInfo, candidate: ReachableInfo
) -> ReachableInfo:
    """Choose the better of two entries for the same station and origin.

    Fewer minutes wins. On equal minutes the band with the smaller lower
    bound wins ("10-20" beats "20-30"). A full tie keeps ``existing``.
    """
    if existing.time_minutes != candidate.time_minutes:
        return existing if existing.time_minutes < candidate.time_minutes else candidate
    if candidate.band_lower < existing.band_lower:
        return candidate
    return existing


class StationAggregator:
    """Incrementally merge rows into ``stations_by_id`` and ``targets_index``.

    Rows must be added in production order. Per station, ``reachable`` keeps
    exactly one best entry per origin, ``lines`` never repeats a line, and
    coordinate/address are taken from the first row that has them. The
    ``targets_index`` band lists record every band a station was ever seen
    in, independent of which band ``reachable`` finally points at.
    """

    def __init__(self, config: RunConfig):
        self.config = config
        self.stations_by_id: dict[str, StationRecord] = {}
        self.targets_index: dict[str, TargetIndexEntry] = {}
        self.rows_seen = 0

        for origin in config.origins:
            self.targets_index[origin.node] = TargetIndexEntry(
                target=origin.name,
                target_node=origin.node,
                time_bands={band.label: [] for band in config.bands},
            )

    def add(self, row: FlatRow) -> None:
        """Merge one row."""
        self.rows_seen += 1
        station = self.stations_by_id.get(row.station_id)
        if station is None:
            station = StationRecord.from_row(row)
            self.stations_by_id[row.station_id] = station

        station.fill_missing(row)
        station.add_line(row.line, row.line_id, row.line_color)

        candidate = ReachableInfo.from_row(row)
        current = station.reachable.get(row.target_node)
        if current is None:
            station.reachable[row.target_node] = candidate
        elif pick_better_reachable(current, candidate) is candidate:
            station.reachable[row.target_node] = candidate

        entry = self.targets_index.get(row.target_node)
        if entry is None:
            entry = TargetIndexEntry(target=row.target, target_node=row.target_node)
            self.targets_index[row.target_node] = entry
        entry.record(row.time_band, row.station_id)

    def extend(self, rows: Iterable[FlatRow]) -> None:
        for row in rows:
            self.add(row)

    def build(self, generated_at: datetime | None = None) -> StructuredOutput:
        """Assemble the structured snapshot of everything merged so far."""
        logger.info(
            f"Aggregated {self.rows_seen} rows into {len(self.stations_by_id)} stations"
        )
        return StructuredOutput(
            generated_at=generated_at or datetime.now(timezone.utc),
            source=self.config.to_source(),
            stations_by_id=self.stations_by_id,
            targets_index=self.targets_index,
        )


def aggregate(
    rows: Iterable[FlatRow],
    config: RunConfig,
    generated_at: datetime | None = None,
) -> StructuredOutput:
    """Build the structured output from a complete row collection."""
    aggregator = StationAggregator(config)
    aggregator.extend(rows)
    return aggregator.build(generated_at=generated_at)
