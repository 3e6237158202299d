"""
Correlation of recorded traces with test declarations.
"""

from typing import Iterable, List, Sequence

from ..core.types import TestNode, TraceRecord
from ..extractors import PathNormalizer


class TraceCorrelator:
    """Selects the traces recorded for one test."""

    @staticmethod
    def title_paths_match(record_path: Sequence[str], test_path: Sequence[str]) -> bool:
        """
        Exact, ordered, case-sensitive comparison of two title paths.

        A prefix or a subset of the test's path is not a match.
        """
        if len(record_path) != len(test_path):
            return False
        for recorded, expected in zip(record_path, test_path):
            if recorded != expected:
                return False
        return True

    @staticmethod
    def correlate_title_path(
        title_path: Sequence[str],
        records: Iterable[TraceRecord],
        document_relative_path: str
    ) -> List[TraceRecord]:
        """
        Filter records down to those of one file and title path.

        Args:
            title_path: Titles from the outermost test group to the test
            records: Trace records, typically a TraceSnapshot
            document_relative_path: Workspace-relative path of the test file

        Returns:
            Matching records in their original order
        """
        return [
            record for record in records
            if PathNormalizer.same_file(record.file, document_relative_path)
            and TraceCorrelator.title_paths_match(record.title_path, title_path)
        ]

    @staticmethod
    def correlate(
        node: TestNode,
        records: Iterable[TraceRecord],
        document_relative_path: str
    ) -> List[TraceRecord]:
        """
        Filter records down to those recorded for a test node.

        Args:
            node: Test node; its ancestors must still be alive
            records: Trace records, typically a TraceSnapshot
            document_relative_path: Workspace-relative path of the test file

        Returns:
            Matching records in their original order

        Raises:
            ReferenceError: If an ancestor of the node has been collected
        """
        return TraceCorrelator.correlate_title_path(
            node.title_path, records, document_relative_path
        )
