"""Reachable station collection pipeline."""

from .aggregator import StationAggregator, aggregate, pick_better_reachable
from .driver import RangeMatrixDriver, build_reachable_url
from .normalizer import normalize_response
from .pipeline import CollectionResult, collect
from .query import ReachableIndex
from .writer import OutputWriter, write_flat_rows, write_structured

__all__ = [
    "CollectionResult",
    "OutputWriter",
    "RangeMatrixDriver",
    "ReachableIndex",
    "StationAggregator",
    "aggregate",
    "build_reachable_url",
    "collect",
    "normalize_response",
    "pick_better_reachable",
    "write_flat_rows",
    "write_structured",
]
