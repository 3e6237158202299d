"""
Integration tests for the full show-traces workflow.
"""
import shutil

import pytest
from trace_lenses import TraceLensService, TraceSelection, TraceSnapshotError

DOCUMENT = 'tests/users.test.ts'


@pytest.fixture
def service(workspace):
    return TraceLensService(str(workspace))


class TestProvideLenses:
    """Tests for listing code lenses of a document."""

    def test_one_lens_per_declaration(self, service):
        lenses = service.provide_lenses(DOCUMENT)
        assert [lens.title_path[-1] for lens in lenses] == [
            'users', 'creates a user', 'listing', 'returns all users',
            'paginates', 'exports users', 'orders', 'handles "quotes"',
        ]
        assert all(lens.title == 'Traces' for lens in lenses)

    def test_lens_positions(self, service):
        lenses = service.provide_lenses(DOCUMENT)
        assert (lenses[0].line, lenses[0].column) == (3, 0)
        assert (lenses[4].line, lenses[4].column) == (10, 4)

    def test_absolute_document_path(self, service, workspace):
        lenses = service.provide_lenses(str(workspace / DOCUMENT))
        assert len(lenses) == 8

    def test_unsaved_source(self, service):
        lenses = service.provide_lenses(DOCUMENT, source="it('draft', () => {});")
        assert [lens.title_path for lens in lenses] == [('draft',)]

    def test_custom_tag_and_only_names(self, workspace):
        service = TraceLensService(str(workspace), tag_function_name='labels', only_modifier='focus')
        source = (
            "labels('slow').it('tagged', () => {});\n"
            "it.focus('focused', () => {});\n"
            "tags('slow').it('default tag', () => {});\n"
            "it.only('default only', () => {});\n"
        )
        lenses = service.provide_lenses(DOCUMENT, source=source)
        assert [lens.title_path for lens in lenses] == [('tagged',), ('focused',)]

    def test_unsupported_file(self, service, workspace):
        (workspace / 'README.md').write_text("describe('x', () => {});")
        assert service.provide_lenses('README.md') == []

    def test_missing_document(self, service):
        with pytest.raises(FileNotFoundError):
            service.provide_lenses('tests/missing.test.ts')

    def test_custom_lens_title(self, workspace):
        service = TraceLensService(str(workspace), lens_title='Show traces')
        assert service.provide_lenses(DOCUMENT)[0].title == 'Show traces'


class TestHandleShowTracesRequest:
    """Tests for the extractor -> loader -> correlator -> normalizer pipeline."""

    def test_timestamped_test(self, service):
        payload = service.handle_show_traces_request(TraceSelection(DOCUMENT, line=4))
        assert payload.title_path == ('users', 'creates a user')
        assert payload.display_title == 'users > creates a user'
        assert payload.document_path == DOCUMENT
        assert payload.snapshot_path.name == '2024-03-01T10-00-00.json'
        assert payload.window.timestamped
        assert payload.window.duration_ms == pytest.approx(60.0)

        assert [e.summary for e in payload.entries] == ['POST /users', 'SELECT']
        assert [e.duration_ms for e in payload.entries] == [40.0, 20.0]
        assert payload.entries[0].start_percent == pytest.approx(0.0)
        assert payload.entries[0].end_percent == pytest.approx(66.667, abs=0.001)
        assert payload.entries[1].start_percent == pytest.approx(66.667, abs=0.001)
        assert payload.entries[1].end_percent == pytest.approx(100.0)

    def test_untimestamped_test(self, service):
        payload = service.handle_show_traces_request(TraceSelection(DOCUMENT, line=10))
        assert payload.title_path == ('users', 'listing', 'paginates')
        assert not payload.window.timestamped
        assert [(e.start_percent, e.end_percent) for e in payload.entries] == [(0.0, 100.0)]

    def test_group_only_gets_its_own_traces(self, service):
        payload = service.handle_show_traces_request(TraceSelection(DOCUMENT, line=3))
        assert payload.title_path == ('users',)
        assert [e.duration_ms for e in payload.entries] == [5.0]

    def test_select_by_title_path(self, service):
        selection = TraceSelection(DOCUMENT, title_path=('users', 'creates a user'))
        payload = service.handle_show_traces_request(selection)
        assert len(payload.entries) == 2

    def test_select_by_source_offset(self, service, sample_source):
        offset = sample_source.index("it.only('paginates'")
        payload = service.handle_show_traces_request(TraceSelection(DOCUMENT, source_offset=offset))
        assert payload.title_path == ('users', 'listing', 'paginates')

    def test_test_without_traces(self, service):
        selection = TraceSelection(DOCUMENT, title_path=('users', 'listing', 'returns all users'))
        payload = service.handle_show_traces_request(selection)
        assert payload.found_test
        assert payload.entries == []
        assert payload.window.duration_ms == 0.0

    def test_no_test_on_line(self, service):
        payload = service.handle_show_traces_request(TraceSelection(DOCUMENT, line=0))
        assert not payload.found_test
        assert payload.entries == []
        assert payload.snapshot_path is None

    def test_missing_traces_directory(self, service, workspace):
        shutil.rmtree(workspace / 'traces')
        payload = service.handle_show_traces_request(TraceSelection(DOCUMENT, line=4))
        assert payload.found_test
        assert payload.entries == []
        assert payload.snapshot_path is None

    def test_latest_snapshot_is_used(self, service, write_snapshot, make_trace):
        write_snapshot([make_trace(['users', 'creates a user'], elapsed=7)],
                       name='2024-03-02T08-00-00.json')
        payload = service.handle_show_traces_request(TraceSelection(DOCUMENT, line=4))
        assert [e.duration_ms for e in payload.entries] == [7.0]

    def test_malformed_snapshot_propagates(self, service, write_snapshot):
        write_snapshot('[{"broken": ', name='2024-03-09T00-00-00.json')
        with pytest.raises(TraceSnapshotError):
            service.handle_show_traces_request(TraceSelection(DOCUMENT, line=4))

    def test_document_outside_workspace(self, service, tmp_path_factory, sample_source):
        outside = tmp_path_factory.mktemp('elsewhere') / 'users.test.ts'
        outside.write_text(sample_source)
        payload = service.handle_show_traces_request(TraceSelection(str(outside), line=4))
        assert not payload.found_test

    def test_unparseable_source(self, service):
        selection = TraceSelection(DOCUMENT, line=0, source="describe('users', () => {")
        payload = service.handle_show_traces_request(selection)
        assert not payload.found_test

    def test_repeated_requests_are_independent(self, service):
        first = service.handle_show_traces_request(TraceSelection(DOCUMENT, line=4))
        other = service.handle_show_traces_request(TraceSelection(DOCUMENT, line=10))
        again = service.handle_show_traces_request(TraceSelection(DOCUMENT, line=4))
        assert len(first.entries) == 2
        assert len(other.entries) == 1
        assert [e.record for e in first.entries] == [e.record for e in again.entries]
