"""Processors for loading, correlating and positioning traces."""

from .snapshot_loader import TraceSnapshotLoader
from .trace_correlator import TraceCorrelator
from .timeline_normalizer import TimelineNormalizer

__all__ = [
    "TraceSnapshotLoader",
    "TraceCorrelator",
    "TimelineNormalizer",
]
