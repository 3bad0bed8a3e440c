"""Query a written reachable-station index."""

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from ..core.exceptions import ValidationError
from ..core.models import ReachableInfo, StationRecord, StructuredOutput
from ..utils.address import prefecture_code

logger = logging.getLogger(__name__)


class ReachableIndex:
    """Search stations in a structured output snapshot."""

    def __init__(self, output: StructuredOutput):
        self.output = output

    @classmethod
    def load(cls, file_path: Path) -> "ReachableIndex":
        """Load a structured artifact from disk.

        Raises:
            FileNotFoundError: If the file does not exist
            ValidationError: If the file is not a valid structured artifact
        """
        with open(file_path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValidationError(f"{file_path} is not valid JSON: {e}") from e

        try:
            output = StructuredOutput.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(f"{file_path} is not a structured output: {e}") from e

        logger.debug(f"Loaded {len(output.stations_by_id)} stations from {file_path}")
        return cls(output)

    def __len__(self) -> int:
        return len(self.output.stations_by_id)

    def get(self, station_id: str) -> StationRecord | None:
        return self.output.stations_by_id.get(station_id)

    def stations_in_band(self, origin_node: str, band: str) -> list[StationRecord]:
        """Stations ever observed within ``band`` from ``origin_node``."""
        entry = self.output.targets_index.get(origin_node)
        if entry is None:
            return []
        return [
            self.output.stations_by_id[station_id]
            for station_id in entry.time_bands.get(band, [])
            if station_id in self.output.stations_by_id
        ]

    def search(
        self,
        origins: Iterable[str] | None = None,
        bands: Iterable[str] | None = None,
        max_minutes: int | None = None,
        keyword: str | None = None,
        pref: str | None = None,
        require_coord: bool = False,
    ) -> list[StationRecord]:
        """Filter stations and sort them by fastest matching time.

        A station matches when at least one of its best reachable entries
        satisfies the origin, band and minute filters together, and the
        station itself satisfies the keyword, prefecture and coordinate
        filters.

        Args:
            origins: Origin node ids to accept (all when None)
            bands: Band labels to accept (all when None)
            max_minutes: Maximum travel minutes
            keyword: Substring of station name, address or a line name
            pref: Exact prefecture name, or its JIS code such as "13"
            require_coord: Drop stations without a coordinate

        Returns:
            Matching stations, fastest first, ties by station id
        """
        origin_set = set(origins) if origins is not None else None
        band_set = set(bands) if bands is not None else None

        def entry_matches(info: ReachableInfo) -> bool:
            if origin_set is not None and info.target_node not in origin_set:
                return False
            if band_set is not None and info.time_band not in band_set:
                return False
            if max_minutes is not None and info.time_minutes > max_minutes:
                return False
            return True

        matches: list[tuple[int, str, StationRecord]] = []
        for station in self.output.stations_by_id.values():
            if require_coord and station.coord is None:
                continue
            if pref and not _matches_pref(station, pref):
                continue
            if keyword and not _matches_keyword(station, keyword):
                continue

            times = [
                info.time_minutes
                for info in station.reachable.values()
                if entry_matches(info)
            ]
            if not times:
                continue
            matches.append((min(times), station.station_id, station))

        matches.sort(key=lambda item: (item[0], item[1]))
        return [station for _, _, station in matches]


def _matches_pref(station: StationRecord, pref: str) -> bool:
    if pref.isdigit():
        return prefecture_code(station.pref) == pref.zfill(2)
    return station.pref == pref


def _matches_keyword(station: StationRecord, keyword: str) -> bool:
    if keyword in station.station_name or keyword in station.rough_address:
        return True
    return any(keyword in line for line in station.lines)
