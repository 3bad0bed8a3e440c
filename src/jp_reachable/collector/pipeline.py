"""End-to-end collection run: drive, aggregate, write."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..config import RunConfig
from ..core.fetcher import ResilientFetcher
from ..core.models import FlatRow, StructuredOutput
from .aggregator import aggregate
from .driver import RangeMatrixDriver
from .writer import OutputWriter

logger = logging.getLogger(__name__)


@dataclass
class CollectionResult:
    """Outcome of a completed run."""

    rows: list[FlatRow]
    output: StructuredOutput
    flat_path: Path
    structured_path: Path


def collect(
    config: RunConfig,
    fetcher: ResilientFetcher | None = None,
    sleep: Callable[[float], None] = time.sleep,
    progress_callback: Callable[[dict[str, Any]], None] | None = None,
    output_dir: Path | None = None,
) -> CollectionResult:
    """Run the full origin x band collection and persist both artifacts.

    Nothing is written unless every cell of the matrix succeeds.

    Raises:
        CollectionError: If a request exhausts its retries
        OutputWriteError: If an artifact cannot be written
    """
    driver = RangeMatrixDriver(
        config, fetcher=fetcher, sleep=sleep, progress_callback=progress_callback
    )
    try:
        rows = driver.run()
    finally:
        if fetcher is None:
            driver.fetcher.close()

    output = aggregate(rows, config)
    writer = OutputWriter(output_dir or config.output_dir)
    flat_path, structured_path = writer.write(rows, output)
    logger.info(
        f"Run complete: {len(rows)} rows, {len(output.stations_by_id)} stations"
    )

    return CollectionResult(
        rows=rows,
        output=output,
        flat_path=flat_path,
        structured_path=structured_path,
    )
