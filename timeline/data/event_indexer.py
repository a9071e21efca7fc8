"""
Event Indexer for Timeline Lens
===============================

This module derives the lookup structures the viewer needs from a loaded
EventStore, in a single pass over the records:

- the sorted set of distinct, non-empty Action Type values (for the action
  filter list);
- the sorted set of distinct (calendar date, hour of day) buckets (for the
  data-constrained time picker);
- the earliest and latest event timestamps (the data bounds used by
  "after <date>" and "before <date>" expressions).

Indexes are built once after ingestion and never rebuilt.

Author: Timeline Lens Development Team
Version: 1.0
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, Optional, Tuple

from data.timeline_record import TimelineRecord

# Configure logger
logger = logging.getLogger(__name__)

# (calendar date, hour of day) bucket
HourBucket = Tuple[date, int]


@dataclass(frozen=True)
class TimelineIndexes:
    """
    Read-only indexes derived from an EventStore.

    Attributes:
        action_types: Distinct non-empty action types, lexically sorted
        time_index: Distinct (date, hour) buckets, chronologically sorted
        earliest: Timestamp of the earliest event (None for an empty store)
        latest: Timestamp of the latest event (None for an empty store)
    """
    action_types: Tuple[str, ...] = ()
    time_index: Tuple[HourBucket, ...] = ()
    earliest: Optional[datetime] = None
    latest: Optional[datetime] = None
    _hours_by_date: Dict[date, Tuple[int, ...]] = field(
        default_factory=dict, repr=False, compare=False
    )

    def __post_init__(self):
        if not self._hours_by_date and self.time_index:
            grouped = defaultdict(list)
            for day, hour in self.time_index:
                grouped[day].append(hour)
            object.__setattr__(
                self, '_hours_by_date',
                {day: tuple(hours) for day, hours in grouped.items()}
            )

    @property
    def is_empty(self) -> bool:
        return not self.time_index

    def dates(self) -> Tuple[date, ...]:
        """Distinct calendar dates present in the data, ascending."""
        return tuple(self._hours_by_date)

    def hours_for(self, day: date) -> Tuple[int, ...]:
        """Hours of day with at least one event on the given date, ascending."""
        return self._hours_by_date.get(day, ())

    @property
    def date_span(self) -> Optional[Tuple[date, date]]:
        """First and last calendar date present, or None when there is no data."""
        if not self.time_index:
            return None
        return self.time_index[0][0], self.time_index[-1][0]

    @property
    def spans_single_date(self) -> bool:
        return len(self._hours_by_date) == 1

    def __contains__(self, bucket: HourBucket) -> bool:
        day, hour = bucket
        return hour in self.hours_for(day)


def build_indexes(records: Iterable[TimelineRecord]) -> TimelineIndexes:
    """
    Build the action-type and time indexes in one pass.

    Args:
        records: An EventStore or any iterable of TimelineRecord

    Returns:
        TimelineIndexes: Sorted, immutable indexes
    """
    action_types = set()
    buckets = set()
    earliest = None
    latest = None

    for record in records:
        action = record.action_type
        if action.strip():
            action_types.add(action)

        ts = record.timestamp
        buckets.add((ts.date(), ts.hour))

        if earliest is None or ts < earliest:
            earliest = ts
        if latest is None or ts > latest:
            latest = ts

    indexes = TimelineIndexes(
        action_types=tuple(sorted(action_types)),
        time_index=tuple(sorted(buckets)),
        earliest=earliest,
        latest=latest
    )

    logger.info(
        f"Indexed {len(indexes.action_types)} action types and "
        f"{len(indexes.time_index)} hour buckets across {len(indexes.dates())} dates"
    )
    return indexes
