"""
Shared pytest fixtures for timeline tests.
"""

import csv
from datetime import datetime

import pytest

from data.csv_loader import EventStore
from data.timeline_record import COLUMNS, COLUMN_INDEX, TimelineRecord
from data.timestamp_parser import parse_event_time

DEFAULT_FIELDS = {
    'Event Time': '2025-01-15T10:00:00.0000000Z',
    'Machine Id': 'a1b2c3d4e5',
    'Computer Name': 'ws-042.contoso.local',
    'Action Type': 'ProcessCreated',
    'File Name': 'powershell.exe',
    'Folder Path': 'C:\\Windows\\System32\\WindowsPowerShell\\v1.0',
    'Account Name': 'alice',
    'Report Id': '1001',
}


@pytest.fixture
def make_row():
    """Factory building a 66-value row; keyword dict overrides default fields."""
    def _make_row(fields=None):
        values = dict(DEFAULT_FIELDS)
        values.update(fields or {})
        row = [''] * len(COLUMNS)
        for name, value in values.items():
            row[COLUMN_INDEX[name]] = value
        return row
    return _make_row


@pytest.fixture
def make_record(make_row):
    """Factory building a TimelineRecord from field overrides."""
    def _make_record(fields=None):
        row = make_row(fields)
        timestamp = parse_event_time(row[0])
        assert timestamp is not None, f"fixture timestamp did not parse: {row[0]!r}"
        return TimelineRecord(tuple(row), timestamp)
    return _make_record


@pytest.fixture
def make_store(make_record):
    """Factory building an EventStore from a list of field override dicts."""
    def _make_store(field_sets):
        records = tuple(make_record(fields) for fields in field_sets)
        return EventStore(records=records, rows_read=len(records))
    return _make_store


@pytest.fixture
def write_timeline(tmp_path):
    """Factory writing a timeline CSV file and returning its path."""
    def _write(rows, header=COLUMNS, name='timeline.csv', encoding='utf-8'):
        path = tmp_path / name
        with open(path, 'w', encoding=encoding, newline='') as f:
            writer = csv.writer(f)
            if header is not None:
                writer.writerow(header)
            writer.writerows(rows)
        return path
    return _write


@pytest.fixture
def two_event_store(make_store):
    """The two-event timeline used by the end-to-end checks."""
    return make_store([
        {
            'Event Time': '2025-01-15T10:00:00Z',
            'Action Type': 'ProcessCreated',
            'File Name': 'cmd.exe',
        },
        {
            'Event Time': '2025-01-16T09:00:00Z',
            'Action Type': 'ConnectionSuccess',
            'File Name': 'svchost.exe',
            'Remote IP': '10.0.0.5',
        },
    ])


@pytest.fixture
def fixed_now():
    return datetime(2025, 1, 16, 12, 0)
