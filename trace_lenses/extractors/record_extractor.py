"""
Trace record extraction from deserialized snapshot entries.
"""

from numbers import Real
from typing import Any, Dict, Optional

from ..core.types import (
    HttpRequest,
    HttpResponse,
    RequestTrace,
    SqlTrace,
    TraceErrorInfo,
    TraceRecord,
    TraceSnapshotError,
    UnknownTrace,
)
from ..formatters import parse_timestamp_ms
from .path_normalizer import PathNormalizer


class RecordExtractor:
    """Builds typed trace records from the JSON objects written by the test runner."""

    @staticmethod
    def from_dict(entry: Any, index: int = 0) -> TraceRecord:
        """
        Convert one snapshot entry into a trace record.

        Args:
            entry: Deserialized JSON value for one trace
            index: Position of the entry in the snapshot, used in error messages

        Returns:
            RequestTrace, SqlTrace or UnknownTrace depending on the 'type' field

        Raises:
            TraceSnapshotError: If the entry is missing required fields
        """
        if not isinstance(entry, dict):
            raise TraceSnapshotError(f"Trace #{index} is not an object")

        common = RecordExtractor._extract_common(entry, index)
        kind = common['kind']

        if kind == 'request':
            return RequestTrace(
                **common,
                request=RecordExtractor._extract_request(entry.get('request'), index),
                response=RecordExtractor._extract_response(entry.get('response')),
                error=RecordExtractor._extract_error(entry.get('error')),
            )
        if kind == 'sql':
            sql = entry.get('sql')
            if not isinstance(sql, str):
                raise TraceSnapshotError(f"SQL trace #{index} has no 'sql' statement")
            return SqlTrace(
                **common,
                sql=sql,
                sql_params=entry.get('sqlParams'),
                data=entry.get('data'),
                error=RecordExtractor._extract_error(entry.get('error')),
            )
        return UnknownTrace(**common)

    @staticmethod
    def _extract_common(entry: Dict[str, Any], index: int) -> Dict[str, Any]:
        kind = entry.get('type')
        if not isinstance(kind, str) or not kind:
            raise TraceSnapshotError(f"Trace #{index} has no 'type'")

        file = entry.get('file')
        if not isinstance(file, str):
            raise TraceSnapshotError(f"Trace #{index} has no 'file'")

        title_path = entry.get('testTitlePath')
        if (not isinstance(title_path, list) or not title_path
                or not all(isinstance(t, str) for t in title_path)):
            raise TraceSnapshotError(
                f"Trace #{index} must have a non-empty list of strings as 'testTitlePath'"
            )

        elapsed = entry.get('elapsed', 0)
        if isinstance(elapsed, bool) or not isinstance(elapsed, Real) or elapsed < 0:
            raise TraceSnapshotError(f"Trace #{index} has an invalid 'elapsed' value: {elapsed!r}")

        start = entry.get('start')
        start_ms = None
        if start is not None:
            if not isinstance(start, str):
                raise TraceSnapshotError(f"Trace #{index} has a non-string 'start' value")
            try:
                start_ms = parse_timestamp_ms(start)
            except ValueError as e:
                raise TraceSnapshotError(
                    f"Trace #{index} has an invalid 'start' timestamp: {start!r}"
                ) from e

        return {
            'kind': kind,
            'file': PathNormalizer.normalize_slashes(file),
            'title_path': tuple(title_path),
            'result': 'error' if entry.get('result') == 'error' else 'success',
            'elapsed_ms': float(elapsed),
            'start_timestamp': start,
            'start_ms': start_ms,
            'raw': entry,
        }

    @staticmethod
    def _extract_request(request: Any, index: int) -> HttpRequest:
        if not isinstance(request, dict):
            raise TraceSnapshotError(f"Request trace #{index} has no 'request' object")
        return HttpRequest(
            method=str(request.get('method', '')),
            url=str(request.get('url', '')),
            headers=request.get('headers') or {},
            body=request.get('body'),
        )

    @staticmethod
    def _extract_response(response: Any) -> Optional[HttpResponse]:
        # Failed requests are recorded without a response
        if not isinstance(response, dict):
            return None
        return HttpResponse(
            status=response.get('status'),
            headers=response.get('headers') or {},
            body=response.get('body'),
        )

    @staticmethod
    def _extract_error(error: Any) -> Optional[TraceErrorInfo]:
        if not isinstance(error, dict):
            return None
        return TraceErrorInfo(message=str(error.get('str', '')), data=error.get('data'))
