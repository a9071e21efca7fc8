"""
Tests for the data-constrained time picker.
"""

from datetime import date, datetime

import pytest

from timeline.data.event_indexer import TimelineIndexes
from timeline.utils.time_picker import (
    FULL_STEPS,
    SINGLE_DATE_STEPS,
    PickerStep,
    offered_choices,
    start_picker,
)

D1, D2, D3 = date(2025, 1, 15), date(2025, 1, 16), date(2025, 1, 18)


@pytest.fixture
def index():
    return TimelineIndexes(time_index=(
        (D1, 8), (D1, 10), (D1, 22),
        (D2, 0), (D2, 9),
        (D3, 5),
    ))


def test_full_flow_offers_constrained_choices(index):
    picker = start_picker(index)
    assert picker.steps == FULL_STEPS
    assert picker.current_step is PickerStep.START_DATE
    assert picker.offered_choices() == (D1, D2, D3)

    picker = picker.commit(D2)
    assert picker.current_step is PickerStep.START_HOUR
    assert picker.offered_choices() == (0, 9)

    picker = picker.commit(9)
    assert picker.offered_choices() == (D2, D3)

    picker = picker.commit(D2)
    # Same day as the start: only hours at or after the start hour
    assert picker.offered_choices() == (9,)

    picker = picker.commit(9)
    assert picker.is_complete
    result = picker.resolve()
    assert result.start == datetime(2025, 1, 16, 9, 0)
    assert result.end == datetime(2025, 1, 16, 9, 59, 59, 999999)


def test_end_hours_on_later_date_are_unrestricted(index):
    picker = start_picker(index).commit(D1).commit(22).commit(D3)
    assert picker.offered_choices() == (5,)

    result = picker.commit(5).resolve()
    assert result.start == datetime(2025, 1, 15, 22)
    assert result.end == datetime(2025, 1, 18, 5, 59, 59, 999999)


def test_single_date_skips_date_steps():
    index = TimelineIndexes(time_index=((D1, 3), (D1, 7), (D1, 12)))
    picker = start_picker(index)

    assert picker.steps == SINGLE_DATE_STEPS
    assert picker.current_step is PickerStep.START_HOUR
    assert picker.offered_choices() == (3, 7, 12)

    picker = picker.commit(7)
    assert picker.current_step is PickerStep.END_HOUR
    assert picker.offered_choices() == (7, 12)

    result = picker.commit(12).resolve()
    assert result.start == datetime(2025, 1, 15, 7)
    assert result.end == datetime(2025, 1, 15, 12, 59, 59, 999999)


def test_back_reoffers_previous_step(index):
    picker = start_picker(index).commit(D1).commit(10)
    back = picker.back()

    assert back.current_step is PickerStep.START_HOUR
    assert back.offered_choices() == (8, 10, 22)
    assert back.back().back() is None


def test_commit_rejects_values_not_offered(index):
    picker = start_picker(index)
    with pytest.raises(ValueError):
        picker.commit(date(2025, 1, 17))

    picker = picker.commit(D2).commit(9)
    with pytest.raises(ValueError):
        picker.commit(D1)


def test_empty_index_cannot_start():
    with pytest.raises(ValueError):
        start_picker(TimelineIndexes())


def test_resolve_requires_complete_picker(index):
    with pytest.raises(ValueError):
        start_picker(index).commit(D1).resolve()


def _walk(picker):
    """Yield every completed picker reachable from the given one."""
    if picker.is_complete:
        yield picker
        return
    for choice in offered_choices(picker.index, picker):
        yield from _walk(picker.commit(choice))


@pytest.mark.parametrize('buckets', [
    ((D1, 8), (D1, 10), (D1, 22), (D2, 0), (D2, 9), (D3, 5)),
    ((D1, 0), (D1, 23)),
    ((D2, 14),),
    ((D1, 23), (D2, 0), (D3, 23)),
])
def test_every_reachable_interval_uses_indexed_buckets(buckets):
    index = TimelineIndexes(time_index=tuple(sorted(buckets)))
    results = [picker.resolve() for picker in _walk(start_picker(index))]

    assert results
    for result in results:
        assert result.start <= result.end
        assert (result.start.date(), result.start.hour) in index
        assert (result.end.date(), result.end.hour) in index
