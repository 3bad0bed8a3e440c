"""Run configuration for reachable station collection."""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .core.exceptions import ConfigurationError, ValidationError
from .core.models import Origin, RunSource, TimeBand

logger = logging.getLogger(__name__)

REACHABLE_ENDPOINT = "https://realestate.navitime.co.jp/api/route/reachable"

DEFAULT_ORIGINS = [
    Origin(name="茅場町", node="00001303"),
    Origin(name="八丁堀", node="00007548"),
    Origin(name="水天宮前", node="00004569"),
]

DEFAULT_BANDS = [
    TimeBand(lower=0, higher=10),
    TimeBand(lower=10, higher=20),
    TimeBand(lower=20, higher=30),
    TimeBand(lower=30, higher=40),
]


class RetryPolicy(BaseModel):
    """Retry, backoff and timeout settings for one HTTP request.

    The delay before retry attempt ``k`` (k >= 1) is ``backoff * 2 ** (k - 1)``.
    """

    model_config = ConfigDict(frozen=True)

    retries: int = Field(3, ge=0, description="Retries after the first attempt")
    backoff: float = Field(0.7, ge=0, description="Backoff base in seconds")
    timeout: float = Field(30.0, gt=0, description="Per-attempt timeout in seconds")

    def delay_before(self, attempt: int) -> float:
        return self.backoff * 2 ** (attempt - 1)

    def with_overrides(
        self,
        retries: int | None = None,
        backoff: float | None = None,
        timeout: float | None = None,
    ) -> "RetryPolicy":
        """Return a copy with any non-None value replaced."""
        updates = {
            key: value
            for key, value in (
                ("retries", retries),
                ("backoff", backoff),
                ("timeout", timeout),
            )
            if value is not None
        }
        return self.model_validate({**self.model_dump(), **updates})


class RunConfig(BaseModel):
    """Explicit configuration of one collection run."""

    origins: list[Origin] = Field(default_factory=lambda: list(DEFAULT_ORIGINS))
    bands: list[TimeBand] = Field(default_factory=lambda: list(DEFAULT_BANDS))
    transit_limit: int = Field(0, ge=0, description="Transfer-count cap sent upstream")
    first_train: bool = True
    express_train: bool = False
    endpoint: str = REACHABLE_ENDPOINT
    pacing_delay: float = Field(0.25, ge=0, description="Seconds between requests")
    retry: RetryPolicy = Field(
        default_factory=lambda: RetryPolicy(retries=4, backoff=0.7, timeout=45.0)
    )
    output_dir: Path = Path("output")

    @field_validator("bands", mode="before")
    @classmethod
    def _parse_band_labels(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        bands = []
        for item in value:
            if isinstance(item, str):
                try:
                    item = TimeBand.parse(item)
                except ValidationError as e:
                    raise ValueError(str(e)) from e
            bands.append(item)
        return bands

    @field_validator("origins", "bands")
    @classmethod
    def _not_empty(cls, value: list) -> list:
        if not value:
            raise ValueError("at least one entry is required")
        return value

    def to_source(self) -> RunSource:
        return RunSource(
            transit_limit=self.transit_limit,
            first_train=self.first_train,
            express_train=self.express_train,
            targets=list(self.origins),
            ranges=list(self.bands),
        )


def default_config() -> RunConfig:
    """Get the built-in run configuration."""
    return RunConfig()


def load_config(path: Path) -> RunConfig:
    """Load a run configuration from a JSON file.

    Args:
        path: JSON file holding any subset of RunConfig fields

    Returns:
        Validated RunConfig

    Raises:
        ConfigurationError: If the file cannot be read or is invalid
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Failed to read config {path}: {e}") from e

    try:
        config = RunConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid config {path}: {e}") from e

    logger.info(
        f"Loaded config from {path}: {len(config.origins)} origins, {len(config.bands)} bands"
    )
    return config
