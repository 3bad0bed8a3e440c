"""Sequential origin x time-band collection driver."""

import logging
import time
from collections.abc import Callable
from typing import Any

import requests

from ..config import RunConfig
from ..core.exceptions import CollectionError, NetworkError, ResponseFormatError
from ..core.fetcher import ResilientFetcher
from ..core.models import FlatRow, Origin, TimeBand
from .normalizer import normalize_response

logger = logging.getLogger(__name__)


def build_reachable_url(config: RunConfig, origin: Origin, band: TimeBand) -> str:
    """Build the reachable endpoint URL for one (origin, band) cell."""
    params = {
        "start": origin.node,
        "lower_term": str(band.lower),
        "higher_term": str(band.higher),
        "transit_limit": str(config.transit_limit),
        "first_train": "1" if config.first_train else "0",
        "express_train": "1" if config.express_train else "0",
    }
    prepared = requests.Request("GET", config.endpoint, params=params).prepare()
    return str(prepared.url)


class RangeMatrixDriver:
    """Walk the configured origin x band matrix one request at a time."""

    def __init__(
        self,
        config: RunConfig,
        fetcher: ResilientFetcher | None = None,
        sleep: Callable[[float], None] = time.sleep,
        progress_callback: Callable[[dict[str, Any]], None] | None = None,
    ):
        """Initialize the driver.

        Args:
            config: Run configuration (origins, bands, flags, pacing)
            fetcher: Fetcher to use; one is built from ``config.retry`` if omitted
            sleep: Callable used for the pacing delay (swap in tests)
            progress_callback: Optional callback receiving per-cell progress
        """
        self.config = config
        self.fetcher = fetcher or ResilientFetcher(policy=config.retry, sleep=sleep)
        self.sleep = sleep
        self.progress_callback = progress_callback

    def cells(self) -> list[tuple[Origin, TimeBand]]:
        """Return (origin, band) pairs in request order."""
        return [
            (origin, band) for origin in self.config.origins for band in self.config.bands
        ]

    def run(self) -> list[FlatRow]:
        """Collect rows for every cell of the matrix.

        Returns:
            All rows, in matrix iteration order

        Raises:
            CollectionError: If any cell exhausts its retries; rows gathered
                so far are discarded
        """
        cells = self.cells()
        rows: list[FlatRow] = []
        logger.info(f"Collecting {len(cells)} origin/band cells")

        for index, (origin, band) in enumerate(cells):
            if index > 0:
                self.sleep(self.config.pacing_delay)

            url = build_reachable_url(self.config, origin, band)
            logger.info(f"[API] {origin.name} {band.label} => {url}")

            try:
                payload = self.fetcher.get_json(url)
                cell_rows = normalize_response(payload, origin, band)
            except (NetworkError, ResponseFormatError) as e:
                logger.error(
                    f"Aborting collection at {origin.name} {band.label}: {e}"
                )
                raise CollectionError(
                    f"Failed to collect {origin.name} {band.label}: {e}",
                    origin=origin.node,
                    band=band.label,
                ) from e

            rows.extend(cell_rows)
            logger.info(f"[OK] {origin.name} {band.label} rows+={len(cell_rows)}")
            self._update_progress(origin, band, index + 1, len(cells), len(rows))

        logger.info(f"Collected {len(rows)} rows")
        return rows

    def _update_progress(
        self, origin: Origin, band: TimeBand, completed: int, total: int, rows: int
    ) -> None:
        if self.progress_callback:
            self.progress_callback(
                {
                    "origin": origin.name,
                    "band": band.label,
                    "completed": completed,
                    "total": total,
                    "rows": rows,
                }
            )
