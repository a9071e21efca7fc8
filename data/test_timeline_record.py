"""
Tests for the timeline record model.
"""

from datetime import datetime

import pytest

from data.timeline_record import COLUMNS, COLUMN_COUNT, SEARCHABLE_COLUMNS, TimelineRecord


def test_column_layout():
    assert COLUMN_COUNT == 66
    assert len(set(COLUMNS)) == 66
    assert COLUMNS[0] == 'Event Time'
    assert COLUMNS[3] == 'Action Type'
    assert COLUMNS[-1] == 'Data Type'
    assert len(SEARCHABLE_COLUMNS) == 44
    assert set(SEARCHABLE_COLUMNS) <= set(COLUMNS)


def test_record_requires_all_fields():
    with pytest.raises(ValueError):
        TimelineRecord(('2025-01-15T10:00:00Z', 'x'), datetime(2025, 1, 15, 10))


def test_accessors(make_record):
    record = make_record({'Action Type': 'FileCreated', 'Remote IP': '10.1.1.1'})

    assert record.action_type == 'FileCreated'
    assert record['Remote IP'] == '10.1.1.1'
    assert record.get('Remote Port') == ''
    assert record.get('No Such Column', 'missing') == 'missing'
    assert record.event_time == '2025-01-15T10:00:00.0000000Z'
    assert record.timestamp == datetime(2025, 1, 15, 10, 0)

    as_dict = record.as_dict()
    assert list(as_dict) == list(COLUMNS)
    assert as_dict['Action Type'] == 'FileCreated'


def test_matches_terms_is_case_insensitive_and_conjunctive(make_record):
    record = make_record({'File Name': 'PowerShell.EXE', 'Account Name': 'Alice'})

    assert record.matches_terms(('powershell',))
    assert record.matches_terms(('powershell', 'alice'))
    assert not record.matches_terms(('powershell', 'bob'))
    assert record.matches_terms(())


def test_search_ignores_non_searchable_columns(make_record):
    record = make_record({'Sensitivity Label': 'TopSecretLabel'})
    assert not record.matches_terms(('topsecretlabel',))


def test_term_cannot_span_two_fields(make_record):
    record = make_record({'Sha1': 'abc', 'Sha256': 'def'})
    # 'abc' and 'def' are adjacent searchable fields
    assert record.matches_terms(('abc',))
    assert not record.matches_terms(('abcdef',))


def test_list_line_falls_back_to_initiating_process(make_record):
    record = make_record({
        'Event Time': '2025-01-15T10:00:00Z',
        'File Name': '',
        'Initiating Process File Name': 'explorer.exe',
    })
    assert record.list_line() == '2025-01-15T10:00:00Z | ProcessCreated | explorer.exe'


def test_list_line_falls_back_to_computer_name(make_record):
    record = make_record({'File Name': '', 'Computer Name': '"ws-1"'})
    assert record.list_line().endswith('| ws-1')


def test_detail_lines_skip_empty_fields(make_record):
    record = make_record({'Remote Url': '  "contoso.com" '})
    lines = record.detail_lines()

    labels = [label for label, _ in lines]
    assert labels[0] == 'Event Time'
    assert 'Remote Port' not in labels
    assert ('Remote Url', 'contoso.com') in lines
