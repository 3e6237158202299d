"""Core components for trace lenses."""

from .types import (
    CodeLens,
    LensConfig,
    RenderPayload,
    SourceParseError,
    TestNode,
    TraceLensError,
    TraceSelection,
    TraceSnapshotError,
)
from .lens_service import TraceLensService

__all__ = [
    "TraceLensService",
    "CodeLens",
    "LensConfig",
    "RenderPayload",
    "TestNode",
    "TraceSelection",
    "TraceLensError",
    "SourceParseError",
    "TraceSnapshotError",
]
