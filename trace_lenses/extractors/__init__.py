"""Extraction utilities for source files and trace records."""

from .path_normalizer import PathNormalizer
from .record_extractor import RecordExtractor
from .summary_extractor import SummaryExtractor
from .tree_extractor import NAME_RULES, TestTreeExtractor

__all__ = [
    "PathNormalizer",
    "RecordExtractor",
    "SummaryExtractor",
    "TestTreeExtractor",
    "NAME_RULES",
]
