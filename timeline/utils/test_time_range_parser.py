"""
Tests for time presets and typed time expressions.
"""

from datetime import datetime, timedelta

import pytest

from timeline.utils.error_handler import TimeExpressionError
from timeline.utils.time_range_parser import (
    PRESETS,
    TimeRange,
    parse_time_expression,
    resolve_preset,
)

NOW = datetime(2025, 1, 16, 12, 0)
BOUNDS = (datetime(2025, 1, 10, 8, 30), datetime(2025, 1, 20, 17, 45))


def test_time_range_rejects_inverted_bounds():
    with pytest.raises(ValueError):
        TimeRange(datetime(2025, 1, 2), datetime(2025, 1, 1))


def test_time_range_contains_is_inclusive():
    time_range = TimeRange(datetime(2025, 1, 1, 10), datetime(2025, 1, 1, 11))
    assert time_range.contains(datetime(2025, 1, 1, 10))
    assert time_range.contains(datetime(2025, 1, 1, 11))
    assert not time_range.contains(datetime(2025, 1, 1, 11, 0, 0, 1))


def test_presets():
    assert PRESETS == ('Today', 'Yesterday', 'Last 24 hours', 'Last 7 days', 'Last 30 days')

    today = resolve_preset('Today', NOW)
    assert today.start == datetime(2025, 1, 16)
    assert today.end == datetime(2025, 1, 16, 23, 59, 59, 999999)

    yesterday = resolve_preset('Yesterday', NOW)
    assert yesterday.start == datetime(2025, 1, 15)
    assert yesterday.end == datetime(2025, 1, 15, 23, 59, 59, 999999)

    assert resolve_preset('Last 24 hours', NOW) == TimeRange(NOW - timedelta(hours=24), NOW)
    assert resolve_preset('Last 7 days', NOW) == TimeRange(NOW - timedelta(days=7), NOW)
    assert resolve_preset('last 30 days', NOW) == TimeRange(NOW - timedelta(days=30), NOW)


def test_unknown_preset():
    with pytest.raises(KeyError):
        resolve_preset('Last century', NOW)


@pytest.mark.parametrize('text', ['clear', '  CLEAR ', '', '   '])
def test_clear(text):
    assert parse_time_expression(text, NOW, BOUNDS) is None


@pytest.mark.parametrize('text, delta', [
    ('last 7 days', timedelta(days=7)),
    ('Last 1 day', timedelta(days=1)),
    ('last 3d', timedelta(days=3)),
    ('7d', timedelta(days=7)),
    ('last 12h', timedelta(hours=12)),
    ('last 12 h', timedelta(hours=12)),
    ('last  2   hours', timedelta(hours=2)),
    ('last 1 hour', timedelta(hours=1)),
    ('24h', timedelta(hours=24)),
])
def test_relative_expressions(text, delta):
    assert parse_time_expression(text, NOW, BOUNDS) == TimeRange(NOW - delta, NOW)


def test_today_and_yesterday_expressions():
    assert parse_time_expression('TODAY', NOW) == resolve_preset('Today', NOW)
    assert parse_time_expression('yesterday', NOW) == resolve_preset('Yesterday', NOW)


def test_after_runs_to_end_of_data():
    result = parse_time_expression('after 2025-01-15', NOW, BOUNDS)
    assert result == TimeRange(datetime(2025, 1, 15), BOUNDS[1])
    assert parse_time_expression('from 2025-01-15', NOW, BOUNDS) == result


def test_before_runs_from_start_of_data():
    result = parse_time_expression('before 2025-01-15', NOW, BOUNDS)
    assert result == TimeRange(BOUNDS[0], datetime(2025, 1, 15, 23, 59, 59, 999999))


def test_after_beyond_data_collapses_to_date():
    result = parse_time_expression('after 2025-02-01', NOW, BOUNDS)
    assert result.start == result.end == datetime(2025, 2, 1)


def test_before_without_data_collapses_to_date():
    result = parse_time_expression('before 2025-01-15', NOW)
    assert result.start == result.end == datetime(2025, 1, 15, 23, 59, 59, 999999)


def test_absolute_range_covers_both_days():
    result = parse_time_expression('2025-01-15 to 2025-01-16', NOW, BOUNDS)
    assert result == TimeRange(datetime(2025, 1, 15), datetime(2025, 1, 16, 23, 59, 59, 999999))
    assert parse_time_expression('2025-01-15..2025-01-16', NOW) == result
    assert parse_time_expression('2025-01-15 .. 2025-01-16', NOW) == result


def test_same_day_range():
    result = parse_time_expression('2025-01-15 to 2025-01-15', NOW)
    assert result.start <= result.end


def test_inverted_range_is_an_error_not_swapped():
    with pytest.raises(TimeExpressionError) as excinfo:
        parse_time_expression('2025-01-16 to 2025-01-15', NOW, BOUNDS)
    assert 'after range end' in excinfo.value.message


def test_timed_endpoints_are_exact():
    result = parse_time_expression('2025-01-15 10:30 to 2025-01-15T11:45:00', NOW)
    assert result == TimeRange(datetime(2025, 1, 15, 10, 30), datetime(2025, 1, 15, 11, 45))


def test_bare_date_is_whole_day():
    result = parse_time_expression('2025-01-15', NOW)
    assert result == TimeRange(datetime(2025, 1, 15), datetime(2025, 1, 15, 23, 59, 59, 999999))


@pytest.mark.parametrize('text', [
    'last days',
    'last 0 days',
    'last -1 days',
    'sometime',
    'after',
    'after tuesday',
    'before 2025-02-30',
    '2025-01-15 to',
    'today to tomorrow',
    '15/01/2025',
    'last 99999999999 days',
    'last 20000000h',
    '800000d',
])
def test_invalid_expressions(text):
    with pytest.raises(TimeExpressionError) as excinfo:
        parse_time_expression(text, NOW, BOUNDS)
    assert excinfo.value.expression == text
    assert 'Try:' in excinfo.value.message


def test_describe():
    time_range = TimeRange(datetime(2025, 1, 15), datetime(2025, 1, 16, 23, 59, 59))
    assert time_range.describe() == '2025-01-15 00:00 to 2025-01-16 23:59'
