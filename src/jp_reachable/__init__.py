"""Japanese Reachable Stations Package

Collects the rail stations reachable without transfer from a fixed set of
origins, within configured travel-time bands, into a deduplicated index.
"""

__version__ = "0.1.0"

from .config import RetryPolicy, RunConfig, default_config, load_config
from .core.fetcher import ResilientFetcher
from .core.models import FlatRow, Origin, StationRecord, StructuredOutput, TimeBand
from .collector import ReachableIndex, aggregate, collect

__all__ = [
    "FlatRow",
    "Origin",
    "ReachableIndex",
    "ResilientFetcher",
    "RetryPolicy",
    "RunConfig",
    "StationRecord",
    "StructuredOutput",
    "TimeBand",
    "aggregate",
    "collect",
    "default_config",
    "load_config",
]
