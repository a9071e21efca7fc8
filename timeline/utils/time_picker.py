"""
Data-constrained time range picker.

The picker walks the analyst through start date, start hour, end date and end
hour, offering only values that exist in the time index and that keep the end
at or after the start. When the data covers a single calendar date the date
steps are skipped.

The offered choices are never stored: they are recomputed from the index and
the stack of commitments made so far, so every completed stack names a valid
interval whose start and end hour buckets exist in the data.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Optional, Tuple, Union

from timeline.data.event_indexer import TimelineIndexes
from timeline.utils.time_range_parser import END_OF_SECOND, TimeRange

logger = logging.getLogger(__name__)

Choice = Union[date, int]


class PickerStep(Enum):
    START_DATE = 'start_date'
    START_HOUR = 'start_hour'
    END_DATE = 'end_date'
    END_HOUR = 'end_hour'

    @property
    def is_date(self) -> bool:
        return self in (PickerStep.START_DATE, PickerStep.END_DATE)

    @property
    def title(self) -> str:
        return {
            PickerStep.START_DATE: "Start date",
            PickerStep.START_HOUR: "Start hour",
            PickerStep.END_DATE: "End date",
            PickerStep.END_HOUR: "End hour",
        }[self]


FULL_STEPS = (PickerStep.START_DATE, PickerStep.START_HOUR, PickerStep.END_DATE, PickerStep.END_HOUR)
SINGLE_DATE_STEPS = (PickerStep.START_HOUR, PickerStep.END_HOUR)


@dataclass(frozen=True)
class PickerState:
    """
    Immutable picker position: the step sequence and the commitments so far.

    Every operation returns a new state.
    """
    index: TimelineIndexes = field(repr=False, compare=False)
    steps: Tuple[PickerStep, ...] = FULL_STEPS
    commitments: Tuple[Choice, ...] = ()

    @property
    def current_step(self) -> Optional[PickerStep]:
        if self.is_complete:
            return None
        return self.steps[len(self.commitments)]

    @property
    def is_complete(self) -> bool:
        return len(self.commitments) == len(self.steps)

    def committed(self, step: PickerStep) -> Optional[Choice]:
        """Value committed for a step, or None when not yet committed."""
        if step not in self.steps:
            return None
        position = self.steps.index(step)
        if position < len(self.commitments):
            return self.commitments[position]
        return None

    def start_date(self) -> Optional[date]:
        if PickerStep.START_DATE not in self.steps:
            return self.index.dates()[0]
        return self.committed(PickerStep.START_DATE)

    def end_date(self) -> Optional[date]:
        if PickerStep.END_DATE not in self.steps:
            return self.start_date()
        return self.committed(PickerStep.END_DATE)

    def offered_choices(self) -> Tuple[Choice, ...]:
        return offered_choices(self.index, self)

    def commit(self, choice: Choice) -> 'PickerState':
        """
        Commit a choice for the current step.

        Raises:
            ValueError: If the picker is complete or the choice is not offered
        """
        if self.is_complete:
            raise ValueError("Picker is already complete")
        if choice not in self.offered_choices():
            raise ValueError(f"{choice!r} is not offered for {self.current_step.title.lower()}")
        return PickerState(self.index, self.steps, self.commitments + (choice,))

    def back(self) -> Optional['PickerState']:
        """Undo the latest commitment; None when there is nothing left to undo."""
        if not self.commitments:
            return None
        return PickerState(self.index, self.steps, self.commitments[:-1])

    def resolve(self) -> TimeRange:
        """
        Turn a complete picker into a time range.

        The start is the top of the start hour, the end is the last instant of
        the end hour.
        """
        if not self.is_complete:
            raise ValueError("Picker is not complete")

        start = datetime.combine(self.start_date(), time(self.committed(PickerStep.START_HOUR)))
        end = datetime.combine(self.end_date(), time(self.committed(PickerStep.END_HOUR), 59, 59))
        return TimeRange(start, end + END_OF_SECOND)


def start_picker(index: TimelineIndexes) -> PickerState:
    """
    Start a picker over the given index.

    Raises:
        ValueError: If the index holds no timestamps
    """
    if index.is_empty:
        raise ValueError("No dates in data to pick from.")

    steps = SINGLE_DATE_STEPS if index.spans_single_date else FULL_STEPS
    logger.debug(f"Starting time picker with steps {[s.value for s in steps]}")
    return PickerState(index, steps)


def offered_choices(index: TimelineIndexes, picker: PickerState) -> Tuple[Choice, ...]:
    """
    Choices valid at the picker's current step.

    - start date: every date in the data
    - start hour: hours present on the start date
    - end date: dates on or after the start date
    - end hour: hours present on the end date, at or after the start hour
      when the end date is the start date
    """
    step = picker.current_step
    if step is None:
        return ()

    if step is PickerStep.START_DATE:
        return index.dates()

    start_date = picker.start_date()

    if step is PickerStep.START_HOUR:
        return index.hours_for(start_date)

    if step is PickerStep.END_DATE:
        return tuple(day for day in index.dates() if day >= start_date)

    end_date = picker.end_date()
    hours = index.hours_for(end_date)
    if end_date == start_date:
        start_hour = picker.committed(PickerStep.START_HOUR)
        hours = tuple(hour for hour in hours if hour >= start_hour)
    return hours
