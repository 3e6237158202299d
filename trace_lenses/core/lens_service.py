"""
Main trace lens orchestrator.
"""

import logging
import os
from typing import List, Optional

from ..core.types import (
    CodeLens,
    LensConfig,
    RenderPayload,
    TestNode,
    TimelineEntry,
    TraceSelection,
    TraceSnapshot,
)
from ..extractors import PathNormalizer, SummaryExtractor, TestTreeExtractor
from ..processors import TimelineNormalizer, TraceCorrelator, TraceSnapshotLoader

logger = logging.getLogger(__name__)


class TraceLensService:
    """Entry point used by editor integrations, the web API and the CLI."""

    def __init__(
        self,
        workspace_root: str,
        traces_dir_name: str = 'traces',
        lens_title: str = 'Traces',
        test_function_names=('describe', 'it'),
        tag_function_name: str = 'tags',
        only_modifier: str = 'only'
    ):
        """
        Initialize the TraceLensService.

        Args:
            workspace_root: Root directory of the workspace under test
            traces_dir_name: Directory below the root holding trace snapshots
            lens_title: Label of every code lens
            test_function_names: Call names recognized as test declarations
            tag_function_name: Name of the tagging helper in `tags(...).it(...)`
            only_modifier: Property marking a focused test, as in `it.only(...)`
        """
        self.workspace_root = os.path.abspath(workspace_root)
        self.config = LensConfig(
            traces_dir_name=traces_dir_name,
            lens_title=lens_title,
            test_function_names=test_function_names,
            tag_function_name=tag_function_name,
            only_modifier=only_modifier
        )

        self.snapshot_loader = TraceSnapshotLoader()
        self.correlator = TraceCorrelator()
        self.timeline_normalizer = TimelineNormalizer()
        self.summary_extractor = SummaryExtractor()

    @property
    def traces_dir(self) -> str:
        return os.path.join(self.workspace_root, self.config.traces_dir_name)

    def resolve_document(self, document_path: str) -> str:
        """Absolute path of a document given absolute or workspace-relative."""
        if os.path.isabs(document_path):
            return document_path
        return os.path.join(self.workspace_root, document_path)

    def read_source(self, document_path: str) -> str:
        with open(self.resolve_document(document_path), 'r', encoding='utf-8', newline='') as f:
            return f.read()

    def extract_tests(self, document_path: str, source: Optional[str] = None) -> List[TestNode]:
        """
        Build the test forest of a document.

        Args:
            document_path: Absolute or workspace-relative path of the document
            source: Current document text; read from disk when None

        Returns:
            Root test nodes, empty for unsupported file types
        """
        extractor = TestTreeExtractor.for_path(document_path, self.config)
        if extractor is None:
            logger.debug("Unsupported file type: %s", document_path)
            return []
        if source is None:
            source = self.read_source(document_path)
        return extractor.extract(source)

    def provide_lenses(self, document_path: str, source: Optional[str] = None) -> List[CodeLens]:
        """
        Create one code lens per test declaration in a document.

        Args:
            document_path: Absolute or workspace-relative path of the document
            source: Current document text; read from disk when None

        Returns:
            List of CodeLens objects in document order
        """
        lenses = []
        for root in self.extract_tests(document_path, source):
            for node in root.walk():
                lenses.append(CodeLens(
                    line=node.line,
                    column=node.column,
                    title=self.config.lens_title,
                    title_path=node.title_path
                ))
        return lenses

    @staticmethod
    def find_node(roots: List[TestNode], selection: TraceSelection) -> Optional[TestNode]:
        """
        Find the test node a selection refers to.

        When several declarations start on the selected line, the outermost
        one wins.

        Args:
            roots: Forest returned by extract_tests
            selection: TraceSelection with line, title_path or source_offset

        Returns:
            The selected TestNode or None
        """
        for root in roots:
            for node in root.walk():
                if selection.title_path is not None:
                    if tuple(selection.title_path) == node.title_path:
                        return node
                elif selection.source_offset is not None:
                    if selection.source_offset == node.source_offset:
                        return node
                elif selection.line is not None:
                    if selection.line == node.line:
                        return node
        return None

    def load_snapshot(self) -> TraceSnapshot:
        return self.snapshot_loader.load(self.traces_dir)

    def handle_show_traces_request(self, selection: TraceSelection) -> RenderPayload:
        """
        Run the full pipeline for one "show traces" request.

        Args:
            selection: The test the user picked

        Returns:
            RenderPayload; without entries when nothing matches

        Raises:
            TraceSnapshotError: If the latest snapshot is malformed
        """
        payload = RenderPayload(document_path=selection.document_path)

        relative_path = PathNormalizer.relative_document_path(
            self.workspace_root, self.resolve_document(selection.document_path)
        )
        if relative_path is None:
            logger.debug("%s is outside workspace %s", selection.document_path, self.workspace_root)
            return payload
        payload.document_path = relative_path

        roots = self.extract_tests(selection.document_path, selection.source)
        node = self.find_node(roots, selection)
        if node is None:
            logger.debug("No test declaration matches %s", selection)
            return payload
        payload.title_path = node.title_path

        snapshot = self.load_snapshot()
        payload.snapshot_path = snapshot.source_path

        records = self.correlator.correlate(node, snapshot, relative_path)
        payload.window = self.timeline_normalizer.compute_window(records)
        spans = [self.timeline_normalizer.span_for(r, payload.window) for r in records]

        for record, span in zip(records, spans):
            payload.entries.append(TimelineEntry(
                record=record,
                summary=self.summary_extractor.summarize(record),
                duration_ms=record.elapsed_ms,
                start_percent=span.start_percent,
                end_percent=span.end_percent
            ))

        logger.debug("%d traces for %s", len(payload.entries), payload.display_title)
        return payload
