"""
Type definitions for test trees, trace records and render payloads.
"""

import weakref
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple


class TraceLensError(Exception):
    """Base class for trace lens errors."""


class SourceParseError(TraceLensError):
    """Raised when a source file cannot be parsed into a syntax tree."""


class TraceSnapshotError(TraceLensError, ValueError):
    """Raised when a trace snapshot file does not hold valid trace records."""


class LensConfig:
    """Configuration for lens discovery and trace lookup."""

    def __init__(
        self,
        traces_dir_name: str = 'traces',
        lens_title: str = 'Traces',
        test_function_names: Sequence[str] = ('describe', 'it'),
        tag_function_name: str = 'tags',
        only_modifier: str = 'only'
    ):
        """
        Initialize lens configuration.

        Args:
            traces_dir_name: Name of the directory, relative to the workspace root,
                             holding trace snapshot files. Default: 'traces'

            lens_title: Label shown on every code lens. Default: 'Traces'

            test_function_names: Call names recognized as test declarations.
                                 Default: ('describe', 'it')

            tag_function_name: Name of the tagging helper; any `tags(...).x(...)`
                               call is treated as a test declaration.
                               Default: 'tags'

            only_modifier: Property that marks a focused test, e.g. `it.only(...)`.
                           Default: 'only'
        """
        self.traces_dir_name = traces_dir_name
        self.lens_title = lens_title
        self.test_function_names = frozenset(test_function_names)
        self.tag_function_name = tag_function_name
        self.only_modifier = only_modifier


@dataclass(eq=False)
class TestNode:
    """A test group or test case found in source text."""
    __test__ = False

    title: str
    source_offset: int
    line: int = 0
    column: int = 0
    children: List['TestNode'] = field(default_factory=list, repr=False)
    _parent_ref: Optional[weakref.ReferenceType] = field(default=None, repr=False)

    @property
    def parent(self) -> Optional['TestNode']:
        """
        The enclosing test node, or None for a root.

        Raises:
            ReferenceError: If the parent has been garbage collected
        """
        if self._parent_ref is None:
            return None
        parent = self._parent_ref()
        if parent is None:
            raise ReferenceError(f"parent of test node '{self.title}' no longer exists")
        return parent

    def add_child(self, child: 'TestNode') -> None:
        child._parent_ref = weakref.ref(self)
        self.children.append(child)

    @property
    def title_path(self) -> Tuple[str, ...]:
        """Titles from the outermost ancestor down to this node."""
        titles = []
        node = self
        while node is not None:
            titles.append(node.title)
            node = node.parent
        titles.reverse()
        return tuple(titles)

    @property
    def depth(self) -> int:
        return len(self.title_path) - 1

    def walk(self) -> Iterator['TestNode']:
        """Yield this node and all of its descendants in document order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


@dataclass(frozen=True)
class HttpRequest:
    method: str
    url: str
    headers: Dict[str, Any] = field(default_factory=dict)
    body: Any = None


@dataclass(frozen=True)
class HttpResponse:
    status: Any
    headers: Dict[str, Any] = field(default_factory=dict)
    body: Any = None


@dataclass(frozen=True)
class TraceErrorInfo:
    message: str
    data: Any = None


@dataclass(frozen=True)
class TraceRecord:
    """Fields shared by every recorded trace."""
    kind: str
    file: str
    title_path: Tuple[str, ...]
    result: str
    elapsed_ms: float
    start_timestamp: Optional[str] = None
    start_ms: Optional[float] = field(default=None, repr=False)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def is_error(self) -> bool:
        return self.result == 'error'


@dataclass(frozen=True)
class RequestTrace(TraceRecord):
    """An HTTP request/response exchange."""
    request: Optional[HttpRequest] = None
    response: Optional[HttpResponse] = None
    error: Optional[TraceErrorInfo] = None


@dataclass(frozen=True)
class SqlTrace(TraceRecord):
    """A single SQL statement execution."""
    sql: str = ''
    sql_params: Any = None
    data: Any = None
    error: Optional[TraceErrorInfo] = None

    @property
    def rows(self) -> Optional[List[Any]]:
        if isinstance(self.data, dict) and isinstance(self.data.get('rows'), list):
            return self.data['rows']
        return None


@dataclass(frozen=True)
class UnknownTrace(TraceRecord):
    """A trace of a kind this package does not know how to describe."""


@dataclass(frozen=True)
class TraceSnapshot:
    """Trace records loaded from the latest snapshot file."""
    source_path: Optional[Path] = None
    records: Tuple[TraceRecord, ...] = ()

    def __iter__(self) -> Iterator[TraceRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class TimelineWindow:
    """Total duration that trace positions are normalized against."""
    window_start_ms: Optional[float]
    duration_ms: float
    timestamped: bool


@dataclass(frozen=True)
class TimelineSpan:
    start_percent: float
    end_percent: float


@dataclass(frozen=True)
class CodeLens:
    line: int
    column: int
    title: str
    title_path: Tuple[str, ...]


@dataclass(frozen=True)
class TraceSelection:
    """
    Identifies the test a user asked to see traces for.

    Exactly one of `line`, `title_path` or `source_offset` is expected. When
    `source` is given it is used instead of reading the document from disk.
    """
    document_path: str
    line: Optional[int] = None
    title_path: Optional[Tuple[str, ...]] = None
    source_offset: Optional[int] = None
    source: Optional[str] = None


@dataclass(frozen=True)
class TimelineEntry:
    record: TraceRecord
    summary: str
    duration_ms: float
    start_percent: float
    end_percent: float


@dataclass
class RenderPayload:
    """Everything a renderer needs to show the traces of one test."""
    document_path: str
    title_path: Tuple[str, ...] = ()
    snapshot_path: Optional[Path] = None
    window: Optional[TimelineWindow] = None
    entries: List[TimelineEntry] = field(default_factory=list)

    @property
    def display_title(self) -> str:
        return ' > '.join(self.title_path)

    @property
    def found_test(self) -> bool:
        return bool(self.title_path)
