#!/usr/bin/env python3
"""
Flask Web Application for Trace Lenses
Provides REST API endpoints for editor integrations to list test lenses and
fetch the traces recorded for a test.
"""

import os

from flask import Flask, jsonify, request

from trace_lenses import TraceLensService, TraceSelection, TraceSnapshotError
from trace_lenses.extractors import PathNormalizer
from trace_lenses.logging_config import setup_logging
from trace_lenses.web import prepare_lenses, prepare_payload

app = Flask(__name__)
app.config['WORKSPACE_ROOT'] = os.getenv('TRACE_LENSES_WORKSPACE', os.getcwd())
app.config['TRACES_DIR'] = os.getenv('TRACE_LENSES_TRACES_DIR', 'traces')
app.config['TAG_FUNCTION'] = os.getenv('TRACE_LENSES_TAG_FUNCTION', 'tags')
app.config['ONLY_MODIFIER'] = os.getenv('TRACE_LENSES_ONLY_MODIFIER', 'only')


def get_service():
    return TraceLensService(
        workspace_root=app.config['WORKSPACE_ROOT'],
        traces_dir_name=app.config['TRACES_DIR'],
        tag_function_name=app.config['TAG_FUNCTION'],
        only_modifier=app.config['ONLY_MODIFIER']
    )


def read_document_path(data):
    """Return (document_path, error_response) from a request body."""
    document_path = data.get('document_path')
    if not document_path or not isinstance(document_path, str):
        return None, (jsonify({'error': 'No document_path provided'}), 400)

    relative = PathNormalizer.relative_document_path(app.config['WORKSPACE_ROOT'], document_path)
    if relative is None:
        return None, (jsonify({'error': 'Document is outside the workspace'}), 400)
    return document_path, None


@app.route('/api/lenses', methods=['POST'])
def lenses_api():
    """
    API endpoint listing the test lenses of a document.
    Accepts: JSON body with fields:
      - 'document_path': absolute or workspace-relative path (required)
      - 'source': current document text (optional, read from disk otherwise)
    Returns: JSON with one lens per test declaration
    """
    data = request.get_json(silent=True) or {}
    document_path, error = read_document_path(data)
    if error:
        return error

    try:
        lenses = get_service().provide_lenses(document_path, data.get('source'))
    except FileNotFoundError:
        return jsonify({'error': f"Document '{document_path}' not found"}), 404

    return jsonify(prepare_lenses(document_path, lenses))


@app.route('/api/traces', methods=['POST'])
def traces_api():
    """
    API endpoint returning the traces of one test, positioned on a timeline.
    Accepts: JSON body with fields:
      - 'document_path': absolute or workspace-relative path (required)
      - 'line': 0-based line of the test declaration, or
      - 'title_path': list of titles from the outermost group to the test, or
      - 'source_offset': byte offset of the test declaration
      - 'source': current document text (optional, read from disk otherwise)
    Returns: JSON with the test identity, timeline window and traces
    """
    data = request.get_json(silent=True) or {}
    document_path, error = read_document_path(data)
    if error:
        return error

    title_path = data.get('title_path')
    line = data.get('line')
    source_offset = data.get('source_offset')
    if title_path is None and line is None and source_offset is None:
        return jsonify({'error': 'One of line, title_path or source_offset is required'}), 400
    if title_path is not None and (
            not isinstance(title_path, list) or not all(isinstance(t, str) for t in title_path)):
        return jsonify({'error': 'title_path must be a list of strings'}), 400
    if (line is not None and not isinstance(line, int)) or (
            source_offset is not None and not isinstance(source_offset, int)):
        return jsonify({'error': 'line and source_offset must be integers'}), 400

    selection = TraceSelection(
        document_path=document_path,
        line=line,
        title_path=tuple(title_path) if title_path is not None else None,
        source_offset=source_offset,
        source=data.get('source')
    )

    try:
        payload = get_service().handle_show_traces_request(selection)
    except FileNotFoundError:
        return jsonify({'error': f"Document '{document_path}' not found"}), 404
    except TraceSnapshotError as e:
        return jsonify({'error': f'Invalid trace snapshot: {e}'}), 422

    return jsonify(prepare_payload(payload))


if __name__ == '__main__':
    setup_logging()
    app.run(debug=True, host='127.0.0.1', port=5001)
