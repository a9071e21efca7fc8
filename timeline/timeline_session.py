"""
Timeline Session
================

This module holds the state of one interactive browsing session over a loaded
timeline: the active filter, the current mode, the list selection, the status
message and the quit flag.

The session feeds logical key events through the mode controller, applies the
committed filter changes, recomputes the visible events and exposes everything
a renderer needs (visible events, prompt text, offered choices, highlight).
It has no GUI dependency; the PyQt5 window only draws what the session reports.

Author: Timeline Lens Development Team
Version: 1.0
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple

from data.timeline_record import TimelineRecord
from timeline.data.event_indexer import TimelineIndexes
from timeline.data.filter_engine import DEFAULT_DISPLAY_CAP, ActiveFilter, FilterEngine, VisibleSet
from timeline.mode_controller import (
    TIME_MENU,
    ActionFilterMode,
    CustomPickMode,
    CustomTypeMode,
    KeyEvent,
    ModeContext,
    NormalMode,
    SearchMode,
    TimePresetsMode,
    Transition,
    transition,
)
from timeline.utils.time_picker import PickerStep
from timeline.utils.time_range_parser import DISPLAY_FORMAT

# Configure logger
logger = logging.getLogger(__name__)


def wall_clock_utc() -> datetime:
    """Current time as a naive UTC datetime, comparable with event timestamps."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def make_clock(reference: str, indexes: TimelineIndexes) -> Callable[[], datetime]:
    """
    Build the clock used for relative time ranges.

    Args:
        reference: 'wall_clock' for the current UTC time, 'latest_event' for the
            timestamp of the newest event (falls back to the wall clock when the
            timeline is empty)
        indexes: Indexes of the loaded timeline

    Returns:
        Callable returning the reference instant
    """
    if reference == 'latest_event':
        latest = indexes.latest
        if latest is not None:
            return lambda: latest
        logger.warning("Timeline is empty; relative ranges use the wall clock")
        return wall_clock_utc
    if reference != 'wall_clock':
        raise ValueError(f"Unknown time reference: {reference}")
    return wall_clock_utc


class TimelineSession:
    """
    One interactive session over a loaded timeline.

    Attributes:
        active_filter: Predicates currently applied
        mode: Current interaction mode
        visible: Events currently shown (display-capped)
        selected_index: Selected row in the visible list, None when empty
        flash: Last status message
        should_quit: Set once the analyst asks to quit
    """

    def __init__(self, store, indexes: TimelineIndexes,
                 display_cap: int = DEFAULT_DISPLAY_CAP,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize the session.

        Args:
            store: Loaded EventStore
            indexes: Indexes built from the store
            display_cap: Maximum number of events shown at once
            clock: Reference clock for relative ranges (UTC wall clock by default)
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self.store = store
        self.indexes = indexes
        self.clock = clock or wall_clock_utc
        self.engine = FilterEngine(store, display_cap)

        self.active_filter = ActiveFilter()
        self.mode = NormalMode()
        self.visible: VisibleSet = self.engine.apply(self.active_filter)
        self.selected_index: Optional[int] = 0 if len(self.visible) else None
        self.flash: Optional[str] = None
        self.should_quit = False

    # ------------------------------------------------------------------
    # Key handling
    # ------------------------------------------------------------------

    def handle_key(self, key: KeyEvent) -> Transition:
        """
        Process one logical key event.

        Args:
            key: The key event

        Returns:
            Transition: What the controller decided, for callers that care
        """
        context = ModeContext(self.indexes, self.active_filter, self.clock)
        result = transition(self.mode, key, context)

        self.mode = result.mode
        self.flash = None

        if result.quit:
            self.should_quit = True

        if result.change is not None:
            self.apply_filter(result.change.apply(self.active_filter))
            self.flash = result.change.describe(self.active_filter, self.visible.total_matches)

        if result.message:
            self.flash = result.message

        if result.move:
            self.move_selection(result.move)

        return result

    def apply_filter(self, active_filter: ActiveFilter) -> VisibleSet:
        """Replace the active filter and recompute the visible events."""
        self.active_filter = active_filter
        self.visible = self.engine.apply(active_filter)
        self.selected_index = 0 if len(self.visible) else None
        self.logger.info(
            f"{self.visible.total_matches} events match "
            f"{', '.join(active_filter.describe()) or 'no filter'}"
        )
        return self.visible

    def move_selection(self, delta: int):
        if self.selected_index is None:
            return
        last = len(self.visible) - 1
        self.selected_index = max(0, min(self.selected_index + delta, last))

    def select(self, index: int):
        """Select a row directly (mouse clicks in the viewer)."""
        if 0 <= index < len(self.visible):
            self.selected_index = index

    # ------------------------------------------------------------------
    # Renderer contract
    # ------------------------------------------------------------------

    def selected_record(self) -> Optional[TimelineRecord]:
        if self.selected_index is None:
            return None
        return self.visible[self.selected_index]

    @property
    def error(self) -> Optional[str]:
        """Parse error of the typed time expression, if one is pending."""
        if isinstance(self.mode, CustomTypeMode):
            return self.mode.error
        return None

    def is_list_mode(self) -> bool:
        return isinstance(self.mode, (ActionFilterMode, TimePresetsMode, CustomPickMode))

    def mode_label(self) -> str:
        if isinstance(self.mode, SearchMode):
            return "SEARCH"
        if isinstance(self.mode, ActionFilterMode):
            return "ACTION TYPE"
        if isinstance(self.mode, (TimePresetsMode, CustomPickMode, CustomTypeMode)):
            return "TIME"
        return "NORMAL"

    def prompt_text(self) -> str:
        """Staged text with its prefix, for modes that compose text."""
        if isinstance(self.mode, SearchMode):
            return f"Search: {self.mode.text}_"
        if isinstance(self.mode, CustomTypeMode):
            return f"Time: {self.mode.text}_"
        return ""

    def hint_text(self) -> str:
        if isinstance(self.mode, SearchMode):
            return "[ Enter ] apply  [ Esc ] cancel"
        if isinstance(self.mode, ActionFilterMode):
            return "j/k move  Enter apply  Esc clear filter"
        if isinstance(self.mode, TimePresetsMode):
            return "j/k move  Enter apply or open Custom  Esc back"
        if isinstance(self.mode, CustomPickMode):
            step = self.mode.picker.current_step
            return f"j/k move  Enter pick {step.title.lower()}  Esc back"
        if isinstance(self.mode, CustomTypeMode):
            return "today, last 7 days, after/before <date>, <date> to <date>, clear  Enter apply  Esc cancel"

        hint = "[ j/k ] up/down  [ / ] search  [ a ] filter  [ t ] time  [ q ] quit"
        if not self.active_filter.is_empty:
            hint = "[ x ] clear all  |  " + hint
        return hint

    def choice_labels(self) -> Tuple[str, ...]:
        """Labels of the list shown in list modes; empty in other modes."""
        if isinstance(self.mode, ActionFilterMode):
            return self.indexes.action_types
        if isinstance(self.mode, TimePresetsMode):
            return TIME_MENU
        if isinstance(self.mode, CustomPickMode):
            step = self.mode.picker.current_step
            choices = self.mode.picker.offered_choices()
            if step.is_date:
                return tuple(day.strftime("%Y-%m-%d") for day in choices)
            return tuple(f"{hour:02d}:00" for hour in choices)
        return ()

    def highlighted_index(self) -> Optional[int]:
        if not self.is_list_mode():
            return None
        count = len(self.choice_labels())
        if count == 0:
            return None
        return max(0, min(self.mode.highlight, count - 1))

    def list_title(self) -> str:
        if isinstance(self.mode, ActionFilterMode):
            return "Filter by action type (Enter apply, Esc clear)"
        if isinstance(self.mode, TimePresetsMode):
            return "Time range presets (Enter apply, Esc back)"
        if isinstance(self.mode, CustomPickMode):
            return self._picker_title()

        total = self.visible.total_matches
        if total == 0:
            return "Events (0) - no results"
        if self.visible.truncated:
            return f"Events ({len(self.visible)} of {total} shown)"
        return f"Events ({total})"

    def _picker_title(self) -> str:
        picker = self.mode.picker
        step = picker.current_step
        if step is PickerStep.START_DATE:
            return "Pick start date"
        if step is PickerStep.START_HOUR:
            return f"Pick start hour for {picker.start_date():%Y-%m-%d}"
        if step is PickerStep.END_DATE:
            return f"Pick end date (>= {picker.start_date():%Y-%m-%d})"
        return f"Pick end hour for {picker.end_date():%Y-%m-%d}"

    def empty_result_lines(self) -> Tuple[str, ...]:
        """Lines explaining an empty result; empty when events are visible."""
        if len(self.visible):
            return ()
        if len(self.store) == 0:
            return ("No events loaded.",)
        return ("No events match.", "") + self.active_filter.describe()

    def status_line(self) -> str:
        parts = [f"{len(self.store):,} events loaded"]
        if self.active_filter.time_range is not None:
            parts.append(f"time {self.active_filter.time_range.start.strftime(DISPLAY_FORMAT)}"
                         f" to {self.active_filter.time_range.end.strftime(DISPLAY_FORMAT)}")
        if self.flash:
            parts.append(self.flash)
        return "  |  ".join(parts)
