"""
Tests for the action type and time indexes.
"""

from datetime import date, datetime

from timeline.data.event_indexer import TimelineIndexes, build_indexes


def test_indexes_are_sorted_and_distinct(make_store):
    store = make_store([
        {'Event Time': '2025-01-16T09:30:00Z', 'Action Type': 'ProcessCreated'},
        {'Event Time': '2025-01-15T10:05:00Z', 'Action Type': 'ConnectionSuccess'},
        {'Event Time': '2025-01-15T10:45:00Z', 'Action Type': 'ProcessCreated'},
        {'Event Time': '2025-01-15T08:00:00Z', 'Action Type': ''},
    ])

    indexes = build_indexes(store)

    assert indexes.action_types == ('ConnectionSuccess', 'ProcessCreated')
    assert indexes.time_index == (
        (date(2025, 1, 15), 8),
        (date(2025, 1, 15), 10),
        (date(2025, 1, 16), 9),
    )
    assert indexes.earliest == datetime(2025, 1, 15, 8, 0)
    assert indexes.latest == datetime(2025, 1, 16, 9, 30)


def test_date_helpers(make_store):
    store = make_store([
        {'Event Time': '2025-01-15T10:00:00Z'},
        {'Event Time': '2025-01-15T23:00:00Z'},
        {'Event Time': '2025-01-17T01:00:00Z'},
    ])
    indexes = build_indexes(store)

    assert indexes.dates() == (date(2025, 1, 15), date(2025, 1, 17))
    assert indexes.hours_for(date(2025, 1, 15)) == (10, 23)
    assert indexes.hours_for(date(2025, 1, 16)) == ()
    assert indexes.date_span == (date(2025, 1, 15), date(2025, 1, 17))
    assert not indexes.spans_single_date
    assert (date(2025, 1, 17), 1) in indexes
    assert (date(2025, 1, 17), 2) not in indexes


def test_empty_store():
    indexes = build_indexes([])

    assert indexes == TimelineIndexes()
    assert indexes.is_empty
    assert indexes.dates() == ()
    assert indexes.date_span is None
    assert indexes.earliest is None and indexes.latest is None


def test_single_date(make_store):
    indexes = build_indexes(make_store([
        {'Event Time': '2025-01-15T10:00:00Z'},
        {'Event Time': '2025-01-15T12:00:00Z'},
    ]))
    assert indexes.spans_single_date
