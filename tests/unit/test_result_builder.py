"""
Unit tests for trace_lenses.web.result_builder module.
"""
from pathlib import Path

from trace_lenses.core.types import CodeLens, RenderPayload, TimelineEntry, TimelineWindow
from trace_lenses.extractors import RecordExtractor
from trace_lenses.web import prepare_lenses, prepare_payload


class TestPrepareLenses:
    """Tests for prepare_lenses."""

    def test_lenses(self):
        lenses = [CodeLens(line=3, column=0, title='Traces', title_path=('users',))]
        result = prepare_lenses('tests/users.test.ts', lenses)
        assert result == {
            'document_path': 'tests/users.test.ts',
            'lenses': [{'line': 3, 'column': 0, 'title': 'Traces', 'title_path': ['users']}],
        }

    def test_no_lenses(self):
        assert prepare_lenses('a.ts', [])['lenses'] == []


class TestPreparePayload:
    """Tests for prepare_payload."""

    def test_empty_payload(self):
        result = prepare_payload(RenderPayload(document_path='a.ts'))
        assert result['test_found'] is False
        assert result['title_path'] == []
        assert result['display_title'] == ''
        assert result['snapshot'] is None
        assert result['timeline'] == {
            'timestamped': False, 'duration_ms': 0.0, 'duration_formatted': '0 ms',
        }
        assert result['traces'] == []
        assert result['trace_count'] == 0

    def test_payload_with_entry(self, make_trace):
        raw = make_trace(['users', 'creates a user'], elapsed=40)
        record = RecordExtractor.from_dict(raw)
        payload = RenderPayload(
            document_path='tests/users.test.ts',
            title_path=('users', 'creates a user'),
            snapshot_path=Path('/w/traces/2024-03-01T10-00-00.json'),
            window=TimelineWindow(window_start_ms=None, duration_ms=40.0, timestamped=False),
            entries=[TimelineEntry(record=record, summary='POST /users', duration_ms=40,
                                   start_percent=0.0, end_percent=100.0)]
        )
        result = prepare_payload(payload)
        assert result['display_title'] == 'users > creates a user'
        assert result['snapshot'] == '2024-03-01T10-00-00.json'
        assert result['timeline']['duration_formatted'] == '40 ms'
        assert result['trace_count'] == 1
        trace = result['traces'][0]
        assert trace['type'] == 'request'
        assert trace['result'] == 'success'
        assert trace['trace'] is raw
