"""
Trace Lenses - correlate recorded test traces with test declarations
"""

__version__ = "1.0.0"

from .core.lens_service import TraceLensService
from .core.types import LensConfig, TraceSelection, TraceSnapshotError

__all__ = ["TraceLensService", "LensConfig", "TraceSelection", "TraceSnapshotError"]
