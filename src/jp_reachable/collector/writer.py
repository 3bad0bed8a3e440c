"""Persist flat rows and the structured index as JSON artifacts."""

import json
import logging
import os
import tempfile
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from ..core.exceptions import OutputWriteError
from ..core.models import FlatRow, StructuredOutput

logger = logging.getLogger(__name__)

FLAT_FILENAME = "reachable_flat.json"
STRUCTURED_FILENAME = "reachable_structured.json"


def _write_json_atomic(build: Callable[[], Any], file_path: Path) -> None:
    """Serialize ``build()`` fully, then move it into place in one step.

    Raises:
        OutputWriteError: If serialization or the filesystem write fails;
            an existing file at ``file_path`` is left untouched and no
            temporary file remains
    """
    try:
        payload = json.dumps(build(), indent=2, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise OutputWriteError(
            f"Failed to serialize {file_path}: {e}", path=str(file_path)
        ) from e

    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{file_path.name}.", suffix=".tmp", dir=file_path.parent
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            os.replace(tmp_name, file_path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
    except OSError as e:
        raise OutputWriteError(
            f"Failed to write {file_path}: {e}", path=str(file_path)
        ) from e


def write_flat_rows(rows: Sequence[FlatRow], file_path: Path) -> Path:
    """Write the flat row list as a JSON array."""
    _write_json_atomic(lambda: [row.to_json_dict() for row in rows], file_path)
    logger.info(f"[WRITE] {file_path} ({len(rows)} rows)")
    return file_path


def write_structured(output: StructuredOutput, file_path: Path) -> Path:
    """Write the structured snapshot as a JSON object."""
    _write_json_atomic(output.to_json_dict, file_path)
    logger.info(f"[WRITE] {file_path} (stations={len(output.stations_by_id)})")
    return file_path


class OutputWriter:
    """Write both run artifacts into one directory."""

    def __init__(
        self,
        output_dir: Path,
        flat_filename: str = FLAT_FILENAME,
        structured_filename: str = STRUCTURED_FILENAME,
    ):
        self.output_dir = Path(output_dir)
        self.flat_path = self.output_dir / flat_filename
        self.structured_path = self.output_dir / structured_filename

    def write(
        self, rows: Sequence[FlatRow], output: StructuredOutput
    ) -> tuple[Path, Path]:
        """Write both artifacts independently.

        Both writes are always attempted. If either fails, the first failure
        is raised after the other write has finished.

        Returns:
            (flat_path, structured_path)

        Raises:
            OutputWriteError: If either artifact could not be written
        """
        errors: list[OutputWriteError] = []

        try:
            write_flat_rows(rows, self.flat_path)
        except OutputWriteError as e:
            logger.warning(f"Flat output not written: {e}")
            errors.append(e)

        try:
            write_structured(output, self.structured_path)
        except OutputWriteError as e:
            logger.warning(f"Structured output not written: {e}")
            errors.append(e)

        if errors:
            raise errors[0]
        return self.flat_path, self.structured_path
