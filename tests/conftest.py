"""
Pytest configuration and shared fixtures for trace lenses tests.
"""
import json
import pytest


SAMPLE_SOURCE = """import { describe, it } from 'mocha';

// user API tests
describe('users', () => {
  it('creates a user', async () => {
    await api.post('/users', { name: 'a' });
  });

  describe('listing', () => {
    it('returns all users', async () => {});
    it.only('paginates', async () => {});
  });

  tags('slow').it('exports users', async () => {});
});

describe('orders', function () {
  it("handles \\"quotes\\"", () => {});
});
"""


@pytest.fixture
def sample_source():
    """TypeScript test file with nested groups and modifier variants."""
    return SAMPLE_SOURCE


@pytest.fixture
def make_trace():
    """Return a helper that builds a trace entry the way the test runner writes it."""
    def _make_trace(title_path, kind='request', file='tests/users.test.ts',
                    elapsed=100, start=None, result='success', **extra):
        trace = {
            'type': kind,
            'file': file,
            'testTitlePath': list(title_path),
            'result': result,
            'elapsed': elapsed,
        }
        if start is not None:
            trace['start'] = start
        if kind == 'request':
            trace['request'] = {
                'method': 'POST',
                'url': 'http://localhost:3000/users?debug=1',
                'headers': {'content-type': 'application/json'},
                'body': '{"name": "a"}',
            }
            trace['response'] = {
                'status': 201,
                'headers': {'content-type': 'application/json'},
                'body': {'id': 1},
            }
        elif kind == 'sql':
            trace['sql'] = 'SELECT * FROM users WHERE id = $1'
            trace['sqlParams'] = [1]
            trace['data'] = {'rows': [{'id': 1, 'name': 'a'}]}
        trace.update(extra)
        return trace

    return _make_trace


@pytest.fixture
def write_snapshot(tmp_path):
    """Return a helper that writes a snapshot file into a traces directory."""
    def _write_snapshot(traces, name='2024-03-01T10-00-00.json', traces_dir=None):
        directory = traces_dir or tmp_path / 'traces'
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        if isinstance(traces, str):
            path.write_text(traces, encoding='utf-8')
        else:
            path.write_text(json.dumps(traces), encoding='utf-8')
        return path

    return _write_snapshot


@pytest.fixture
def workspace(tmp_path, sample_source, make_trace, write_snapshot):
    """Workspace with one test file and one trace snapshot."""
    tests_dir = tmp_path / 'tests'
    tests_dir.mkdir()
    (tests_dir / 'users.test.ts').write_text(sample_source, encoding='utf-8')

    write_snapshot([
        make_trace(['users', 'creates a user'], elapsed=40,
                   start='2024-03-01T10:00:00.000Z'),
        make_trace(['users', 'creates a user'], kind='sql', elapsed=20,
                   start='2024-03-01T10:00:00.040Z'),
        make_trace(['users', 'listing', 'paginates'], elapsed=15),
        make_trace(['users'], elapsed=5),
        make_trace(['users', 'creates a user'], file='tests/other.test.ts'),
    ], name='2024-03-01T10-00-00.json')
    return tmp_path
