#!/usr/bin/env python3
"""
Trace Lenses - Command Line Facade
"""

import json
import sys

from trace_lenses import TraceLensService, TraceSelection, TraceSnapshotError
from trace_lenses.formatters import format_time
from trace_lenses.logging_config import setup_logging
from trace_lenses.web import prepare_lenses, prepare_payload

BAR_WIDTH = 40


def render_bar(start_percent: float, end_percent: float, width: int = BAR_WIDTH) -> str:
    """Draw a text timeline bar, clipping positions that fall outside the window."""
    start = min(max(int(round(start_percent / 100 * width)), 0), width)
    end = min(max(int(round(end_percent / 100 * width)), start), width)
    if end == start and end_percent > start_percent and start < width:
        end = start + 1
    return '[' + ' ' * start + '#' * (end - start) + ' ' * (width - end) + ']'


def print_lenses(document_path, lenses):
    if not lenses:
        print(f"No tests found in {document_path}")
        return
    print(f"Tests in {document_path}:")
    for lens in lenses:
        indent = '  ' * (len(lens.title_path) - 1)
        print(f"  {lens.line + 1:>5}  {indent}{lens.title_path[-1]}")


def print_payload(payload):
    if not payload.found_test:
        print(f"No test declaration found in {payload.document_path}")
        return
    print(payload.display_title)
    if payload.snapshot_path:
        print(f"Snapshot: {payload.snapshot_path.name}")
    if not payload.entries:
        print("No traces recorded for this test.")
        return
    print(f"Total: {format_time(payload.window.duration_ms)}\n")
    for entry in payload.entries:
        marker = '!' if entry.record.is_error else ' '
        print(f"{render_bar(entry.start_percent, entry.end_percent)} {marker} "
              f"{entry.summary} ({format_time(entry.duration_ms)})")


def main():
    import argparse
    parser = argparse.ArgumentParser(
        description='Show the traces recorded for a test declared in a JavaScript/TypeScript file.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python show_traces.py . tests/users.test.ts
  python show_traces.py . tests/users.test.ts --line 12
  python show_traces.py . tests/users.test.ts --title "users" --title "creates a user"
  python show_traces.py . tests/users.test.ts --line 12 --json
        """
    )
    parser.add_argument('workspace', help='Workspace root directory')
    parser.add_argument('document', help='Test file, absolute or relative to the workspace')
    selector = parser.add_mutually_exclusive_group()
    selector.add_argument('--line', type=int, help='1-based line of the test declaration')
    selector.add_argument('--title', action='append', dest='titles',
                          help='Title of a test or group; repeat from outermost to innermost')
    parser.add_argument('--traces-dir', default='traces',
                        help='Traces directory below the workspace (default: traces)')
    parser.add_argument('--tag-function', default='tags',
                        help='Name of the tagging helper in tags(...).it(...) (default: tags)')
    parser.add_argument('--only-modifier', default='only',
                        help='Property marking a focused test, as in it.only(...) (default: only)')
    parser.add_argument('--json', action='store_true', help='Print JSON instead of text')
    parser.add_argument('--log-level', default=None, help='Logging level (default: WARNING)')
    args = parser.parse_args()

    setup_logging(args.log_level)
    service = TraceLensService(
        args.workspace,
        traces_dir_name=args.traces_dir,
        tag_function_name=args.tag_function,
        only_modifier=args.only_modifier
    )

    try:
        if args.line is None and not args.titles:
            lenses = service.provide_lenses(args.document)
            if args.json:
                print(json.dumps(prepare_lenses(args.document, lenses), indent=2))
            else:
                print_lenses(args.document, lenses)
            return

        selection = TraceSelection(
            document_path=args.document,
            line=args.line - 1 if args.line is not None else None,
            title_path=tuple(args.titles) if args.titles else None
        )
        payload = service.handle_show_traces_request(selection)
        if args.json:
            print(json.dumps(prepare_payload(payload), indent=2))
        else:
            print_payload(payload)
    except FileNotFoundError:
        print(f"Error: File '{args.document}' not found.")
        sys.exit(1)
    except TraceSnapshotError as e:
        print(f"Error: invalid trace snapshot: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
