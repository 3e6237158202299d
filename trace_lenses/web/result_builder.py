"""
Result builder for web interface output.
"""

from typing import Any, Dict, List

from ..core.types import CodeLens, RenderPayload
from ..formatters import format_time


def prepare_lenses(document_path: str, lenses: List[CodeLens]) -> Dict[str, Any]:
    """
    Convert code lenses to a JSON-ready structure.

    Args:
        document_path: Path of the document the lenses belong to
        lenses: CodeLens objects from TraceLensService.provide_lenses

    Returns:
        Dictionary with the document path and one entry per lens
    """
    return {
        'document_path': document_path,
        'lenses': [
            {
                'line': lens.line,
                'column': lens.column,
                'title': lens.title,
                'title_path': list(lens.title_path),
            }
            for lens in lenses
        ],
    }


def prepare_payload(payload: RenderPayload) -> Dict[str, Any]:
    """
    Convert a render payload to a structured format for JSON output.

    Trace bodies are passed through untouched as 'trace'; formatting and
    highlighting them is left to the client.

    Args:
        payload: RenderPayload from TraceLensService.handle_show_traces_request

    Returns:
        Dictionary with test identity, timeline window and timeline entries
    """
    window = payload.window
    traces = []
    for entry in payload.entries:
        traces.append({
            'type': entry.record.kind,
            'summary': entry.summary,
            'result': entry.record.result,
            'duration_ms': entry.duration_ms,
            'duration_formatted': format_time(entry.duration_ms),
            'start_percent': entry.start_percent,
            'end_percent': entry.end_percent,
            'trace': entry.record.raw,
        })

    return {
        'document_path': payload.document_path,
        'test_found': payload.found_test,
        'title_path': list(payload.title_path),
        'display_title': payload.display_title,
        'snapshot': payload.snapshot_path.name if payload.snapshot_path else None,
        'timeline': {
            'timestamped': window.timestamped if window else False,
            'duration_ms': window.duration_ms if window else 0.0,
            'duration_formatted': format_time(window.duration_ms if window else 0.0),
        },
        'traces': traces,
        'trace_count': len(traces),
    }
