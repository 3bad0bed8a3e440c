"""Core models and errors."""

from .exceptions import (
    CollectionError,
    ConfigurationError,
    NetworkError,
    OutputWriteError,
    ReachableSearchError,
    ResponseFormatError,
    ValidationError,
)
from .models import (
    Coord,
    FlatRow,
    LineMeta,
    Origin,
    ReachableInfo,
    RunSource,
    StationRecord,
    StructuredOutput,
    TargetIndexEntry,
    TimeBand,
)

__all__ = [
    "Coord",
    "FlatRow",
    "LineMeta",
    "Origin",
    "ReachableInfo",
    "RunSource",
    "StationRecord",
    "StructuredOutput",
    "TargetIndexEntry",
    "TimeBand",
    "ReachableSearchError",
    "NetworkError",
    "ResponseFormatError",
    "CollectionError",
    "ConfigurationError",
    "OutputWriteError",
    "ValidationError",
]
