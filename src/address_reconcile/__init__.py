"""Reconcile registry address points with crowd-sourced map address nodes."""

from .components import AddressRecord, MatchedPair
from .engine import EngineConfig, MatchEngine, match_nodes
from .exceptions import FeedFormatError, InvalidRecordError, LoaderError, ReconcileError
from .scorer import numbers_match, planar_distance, select_nearest

__all__ = [
    "AddressRecord",
    "EngineConfig",
    "FeedFormatError",
    "InvalidRecordError",
    "LoaderError",
    "MatchEngine",
    "MatchedPair",
    "ReconcileError",
    "match_nodes",
    "numbers_match",
    "planar_distance",
    "select_nearest",
]
