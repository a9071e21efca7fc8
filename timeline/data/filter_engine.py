"""
Filter Engine for Timeline Lens
===============================

This module combines the active predicates (search terms, action type, time
range) into the ordered subset of events shown in the viewer.

A record is visible when:
- every search term is a substring of at least one searchable field
  (case-insensitive), and
- its Action Type equals the selected action type exactly, when one is set, and
- its timestamp lies within the selected time range (inclusive), when one is set.

The visible subset keeps file order and is cut to the display cap; the number
of matches before the cut is kept for the list title.

Author: Timeline Lens Development Team
Version: 1.0
"""

import logging
from dataclasses import dataclass, replace
from typing import Iterable, Optional, Tuple

from data.timeline_record import TimelineRecord
from timeline.utils.time_range_parser import TimeRange

# Configure logger
logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_CAP = 5000


def split_search_terms(text: str) -> Tuple[str, ...]:
    """Lowercase the text and split it on whitespace."""
    return tuple(text.lower().split())


@dataclass(frozen=True)
class ActiveFilter:
    """
    The predicates currently applied to the timeline.

    Attributes:
        search_terms: Lowercase terms, all of which must match (empty = no search)
        action_type: Exact Action Type to keep, or None
        time_range: Inclusive TimeRange to keep, or None
    """
    search_terms: Tuple[str, ...] = ()
    action_type: Optional[str] = None
    time_range: Optional[TimeRange] = None

    @property
    def is_empty(self) -> bool:
        return not self.search_terms and self.action_type is None and self.time_range is None

    @property
    def search_text(self) -> str:
        return ' '.join(self.search_terms)

    def with_search(self, text: str) -> 'ActiveFilter':
        return replace(self, search_terms=split_search_terms(text))

    def with_action_type(self, action_type: Optional[str]) -> 'ActiveFilter':
        return replace(self, action_type=action_type)

    def with_time_range(self, time_range: Optional[TimeRange]) -> 'ActiveFilter':
        return replace(self, time_range=time_range)

    def matches(self, record: TimelineRecord) -> bool:
        if self.action_type is not None and record.action_type != self.action_type:
            return False
        if self.time_range is not None and not self.time_range.contains(record.timestamp):
            return False
        return record.matches_terms(self.search_terms)

    def describe(self) -> Tuple[str, ...]:
        """Human-readable lines naming each active predicate."""
        lines = []
        if self.search_terms:
            lines.append(f'Search: "{self.search_text}"')
        if self.action_type is not None:
            lines.append(f"Action type: {self.action_type}")
        if self.time_range is not None:
            lines.append(f"Time: {self.time_range.describe()}")
        return tuple(lines)


@dataclass(frozen=True)
class VisibleSet:
    """
    Display-capped, order-preserving result of applying an ActiveFilter.

    Attributes:
        records: Matching records in file order, at most display_cap of them
        total_matches: Number of matches before the cap was applied
        display_cap: The cap used
    """
    records: Tuple[TimelineRecord, ...] = ()
    total_matches: int = 0
    display_cap: int = DEFAULT_DISPLAY_CAP

    @property
    def truncated(self) -> bool:
        return self.total_matches > len(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def __getitem__(self, index: int) -> TimelineRecord:
        return self.records[index]

    def __iter__(self):
        return iter(self.records)


def recompute(records: Iterable[TimelineRecord], active_filter: ActiveFilter,
              display_cap: int = DEFAULT_DISPLAY_CAP) -> VisibleSet:
    """
    Apply a filter to the event store.

    Args:
        records: The EventStore (or any ordered iterable of records)
        active_filter: Predicates to apply
        display_cap: Maximum number of records to return

    Returns:
        VisibleSet: Matches in input order, capped
    """
    if display_cap <= 0:
        raise ValueError(f"display_cap must be positive, got {display_cap}")

    visible = []
    total = 0
    for record in records:
        if active_filter.matches(record):
            total += 1
            if len(visible) < display_cap:
                visible.append(record)

    return VisibleSet(tuple(visible), total, display_cap)


class FilterEngine:
    """
    Holds the event store and display cap, recomputing the visible set on demand.

    The last result is kept so an unchanged filter is not recomputed.
    """

    def __init__(self, records: Iterable[TimelineRecord], display_cap: int = DEFAULT_DISPLAY_CAP):
        self.records = records
        self.display_cap = display_cap
        self.logger = logging.getLogger(self.__class__.__name__)
        self._last_filter: Optional[ActiveFilter] = None
        self._last_result: Optional[VisibleSet] = None

    def apply(self, active_filter: ActiveFilter) -> VisibleSet:
        if self._last_result is not None and active_filter == self._last_filter:
            return self._last_result

        result = recompute(self.records, active_filter, self.display_cap)
        self.logger.debug(
            f"Filter {active_filter.describe() or '(none)'}: "
            f"{result.total_matches} matches, showing {len(result)}"
        )

        self._last_filter = active_filter
        self._last_result = result
        return result
