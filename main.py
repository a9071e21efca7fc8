"""
Timeline Lens - command line entry point.

Loads a Defender device timeline CSV export and opens the keyboard-driven
viewer, or prints an ingestion summary with --summary.

Exit status: 0 on a normal exit, 1 when the timeline cannot be loaded,
2 on a usage error.
"""

import argparse
import logging
import os
import sys
from collections import Counter

from data.csv_loader import load_timeline
from timeline.data.event_indexer import build_indexes
from timeline.timeline_session import TimelineSession, make_clock
from timeline.utils.error_handler import DataLoadError, ErrorHandler
from utils.error_handler import parse_log_level, setup_logging
from utils.memory_monitor import MemoryMonitor
from utils.viewer_config import RELATIVE_REFERENCES, ViewerConfig

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_LOAD_ERROR = 1


def _positive_int(value):
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return number


def build_parser():
    parser = argparse.ArgumentParser(
        prog="timeline-lens",
        description="Browse a Microsoft Defender device timeline CSV export"
    )
    parser.add_argument("file", metavar="FILE", help="Path to the timeline CSV export")
    parser.add_argument("--max-rows", type=_positive_int,
                        help="Maximum number of events to load (default 100000)")
    parser.add_argument("--display-cap", type=_positive_int,
                        help="Maximum number of events listed at once (default 5000)")
    parser.add_argument("--config", help="JSON configuration file")
    parser.add_argument("--relative-to", choices=RELATIVE_REFERENCES,
                        help="Reference instant for Today/Yesterday/Last N presets")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)")
    parser.add_argument("--log-file", help="Also write logs to this file")
    parser.add_argument("--summary", action="store_true",
                        help="Print an ingestion summary instead of opening the viewer")
    return parser


def load_config(args, parser):
    """Build the effective configuration: defaults, then the JSON file, then flags."""
    if args.config and not os.path.isfile(args.config):
        parser.error(f"configuration file not found: {args.config}")

    config = ViewerConfig(args.config)
    config.override('ingestion', 'max_rows', args.max_rows)
    config.override('display', 'display_cap', args.display_cap)
    config.override('time', 'relative_reference', args.relative_to)
    config.override('logging', 'level', args.log_level)
    config.override('logging', 'file', args.log_file)
    return config


def print_summary(store, indexes, out=None):
    """Print ingestion statistics, the date span and action type counts."""
    out = out or sys.stdout
    print(f"File: {store.source_path}", file=out)
    print(store.summary(), file=out)

    span = indexes.date_span
    if span is None:
        print("Date span: (no events)", file=out)
    else:
        print(f"Date span: {span[0]:%Y-%m-%d} to {span[1]:%Y-%m-%d} "
              f"({len(indexes.dates())} dates, {len(indexes.time_index)} hour buckets)", file=out)

    counts = Counter(record.action_type for record in store)
    print(f"Action types ({len(indexes.action_types)}):", file=out)
    for action_type in indexes.action_types:
        print(f"  {action_type}: {counts[action_type]}", file=out)


def run_viewer(session, title):
    """Start the Qt event loop with the timeline window."""
    # PyQt5 is only needed for the interactive viewer
    from PyQt5.QtWidgets import QApplication
    from timeline.timeline_window import TimelineWindow

    app = QApplication.instance() or QApplication(sys.argv[:1])
    window = TimelineWindow(session, title)
    window.show()
    app.exec_()
    return EXIT_OK


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    config = load_config(args, parser)

    setup_logging(parse_log_level(config.log_level), config.log_file)

    error_handler = ErrorHandler()
    try:
        store = load_timeline(args.file, config.max_rows)
    except DataLoadError as e:
        message = error_handler.handle_error(e, "loading timeline")
        print(f"Error: {message}", file=sys.stderr)
        return EXIT_LOAD_ERROR

    MemoryMonitor().log_memory_usage("after ingestion", len(store))
    indexes = build_indexes(store)

    if args.summary:
        print_summary(store, indexes)
        return EXIT_OK

    clock = make_clock(config.relative_reference, indexes)
    session = TimelineSession(store, indexes, config.display_cap, clock)
    return run_viewer(session, f"Timeline Lens - {os.path.basename(args.file)}")


if __name__ == "__main__":
    sys.exit(main())
