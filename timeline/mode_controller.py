"""
Mode Controller
===============

This module implements the modal interaction of the timeline viewer as a pure
transition function:

    transition(mode, key, context) -> Transition

Each mode is an immutable value carrying only its own state (staged text, list
highlight, picker position). A transition never mutates the active filter; it
returns a FilterChange that the session applies, so staged input is kept apart
from committed predicates.

Modes:
- NormalMode: browsing the event list (initial and resting mode)
- SearchMode: composing search text
- ActionFilterMode: choosing an Action Type
- TimePresetsMode: choosing a time preset or a custom entry
- CustomPickMode: the data-constrained start/end picker
- CustomTypeMode: typing a time expression

Author: Timeline Lens Development Team
Version: 1.0
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Optional, Tuple, Union

from timeline.data.event_indexer import TimelineIndexes
from timeline.data.filter_engine import ActiveFilter, split_search_terms
from timeline.utils.error_handler import TimeExpressionError
from timeline.utils.time_picker import PickerState, start_picker
from timeline.utils.time_range_parser import PRESETS, TimeRange, parse_time_expression, resolve_preset

# Configure logger
logger = logging.getLogger(__name__)

CUSTOM_PICK_LABEL = "Custom (pick from data)"
CUSTOM_TYPE_LABEL = "Custom (type range)..."
TIME_MENU: Tuple[str, ...] = PRESETS + (CUSTOM_PICK_LABEL, CUSTOM_TYPE_LABEL)
CUSTOM_PICK_INDEX = TIME_MENU.index(CUSTOM_PICK_LABEL)
CUSTOM_TYPE_INDEX = TIME_MENU.index(CUSTOM_TYPE_LABEL)

NO_DATES_MESSAGE = "No dates in data to pick from."


# ============================================================================
# Keys
# ============================================================================

class KeyKind(Enum):
    """Logical keys understood by the controller."""
    UP = 'up'
    DOWN = 'down'
    CONFIRM = 'confirm'
    CANCEL = 'cancel'
    CHAR = 'char'
    BACKSPACE = 'backspace'
    QUIT = 'quit'
    CLEAR_ALL = 'clear_all'


@dataclass(frozen=True)
class KeyEvent:
    kind: KeyKind
    char: str = ''

    @classmethod
    def of_char(cls, char: str) -> 'KeyEvent':
        return cls(KeyKind.CHAR, char)


# Normal mode commands bound to character keys
NORMAL_KEY_BINDINGS: Dict[str, str] = {
    '/': 'search',
    'a': 'action_filter',
    't': 'time',
    'x': 'clear_all',
    'q': 'quit',
    'j': 'down',
    'k': 'up',
}

# List navigation keys available in every list mode
LIST_KEY_BINDINGS: Dict[str, int] = {
    'j': 1,
    'k': -1,
}


# ============================================================================
# Modes
# ============================================================================

@dataclass(frozen=True)
class NormalMode:
    pass


@dataclass(frozen=True)
class SearchMode:
    text: str = ''


@dataclass(frozen=True)
class ActionFilterMode:
    highlight: int = 0


@dataclass(frozen=True)
class TimePresetsMode:
    highlight: int = 0


@dataclass(frozen=True)
class CustomPickMode:
    picker: PickerState
    highlight: int = 0


@dataclass(frozen=True)
class CustomTypeMode:
    text: str = ''
    error: Optional[str] = None


Mode = Union[NormalMode, SearchMode, ActionFilterMode, TimePresetsMode, CustomPickMode, CustomTypeMode]


# ============================================================================
# Filter changes
# ============================================================================

@dataclass(frozen=True)
class SetSearch:
    terms: Tuple[str, ...]

    def apply(self, active_filter: ActiveFilter) -> ActiveFilter:
        return ActiveFilter(self.terms, active_filter.action_type, active_filter.time_range)

    def describe(self, active_filter: ActiveFilter, total: int) -> str:
        text = ' '.join(self.terms)
        if total == 0 and self.terms:
            return f'No results for "{text}"'
        if total == 0 and active_filter.action_type is not None:
            return "No events match the current filter."
        return f'Search: "{text}" ({total} events)'


@dataclass(frozen=True)
class SetActionType:
    action_type: Optional[str]

    def apply(self, active_filter: ActiveFilter) -> ActiveFilter:
        return active_filter.with_action_type(self.action_type)

    def describe(self, active_filter: ActiveFilter, total: int) -> str:
        if self.action_type is None:
            return "Filter cleared"
        return f"Filter: {self.action_type} ({total} events)"


@dataclass(frozen=True)
class SetTimeRange:
    time_range: Optional[TimeRange]

    def apply(self, active_filter: ActiveFilter) -> ActiveFilter:
        return active_filter.with_time_range(self.time_range)

    def describe(self, active_filter: ActiveFilter, total: int) -> str:
        if self.time_range is None:
            return "Time range cleared"
        return f"{self.time_range.describe()} ({total} events)"


_CLEARED_MESSAGES = {
    (True, True, True): "Search, filter & time range cleared",
    (True, True, False): "Search and filter cleared",
    (True, False, True): "Search and time range cleared",
    (True, False, False): "Search cleared",
    (False, True, True): "Filter and time range cleared",
    (False, True, False): "Filter cleared",
    (False, False, True): "Time range cleared",
}


@dataclass(frozen=True)
class ClearAll:
    previous: ActiveFilter = ActiveFilter()

    def apply(self, active_filter: ActiveFilter) -> ActiveFilter:
        return ActiveFilter()

    def describe(self, active_filter: ActiveFilter, total: int) -> Optional[str]:
        key = (
            bool(self.previous.search_terms),
            self.previous.action_type is not None,
            self.previous.time_range is not None,
        )
        return _CLEARED_MESSAGES.get(key)


FilterChange = Union[SetSearch, SetActionType, SetTimeRange, ClearAll]


# ============================================================================
# Transitions
# ============================================================================

@dataclass(frozen=True)
class ModeContext:
    """
    Read-only inputs a transition may consult.

    Attributes:
        indexes: Derived indexes of the loaded timeline
        active_filter: The filter currently applied
        clock: Returns the reference instant for relative time ranges
    """
    indexes: TimelineIndexes
    active_filter: ActiveFilter
    clock: Callable[[], datetime]


@dataclass(frozen=True)
class Transition:
    """
    Result of handling one key.

    Attributes:
        mode: The mode after the key
        change: Filter change to commit, if any
        message: Status message to show, if any
        quit: True when the viewer should close
        move: Selection movement in the event list (-1, 0 or 1)
    """
    mode: Mode
    change: Optional[FilterChange] = None
    message: Optional[str] = None
    quit: bool = False
    move: int = 0


def transition(mode: Mode, key: KeyEvent, context: ModeContext) -> Transition:
    """
    Handle one logical key in the given mode.

    Args:
        mode: Current mode
        key: Logical key event
        context: Indexes, active filter and clock

    Returns:
        Transition: New mode plus any committed change
    """
    if isinstance(mode, NormalMode):
        return _normal(mode, key, context)
    if isinstance(mode, SearchMode):
        return _search(mode, key)
    if isinstance(mode, ActionFilterMode):
        return _action_filter(mode, key, context)
    if isinstance(mode, TimePresetsMode):
        return _time_presets(mode, key, context)
    if isinstance(mode, CustomPickMode):
        return _custom_pick(mode, key)
    if isinstance(mode, CustomTypeMode):
        return _custom_type(mode, key, context)

    raise TypeError(f"Unknown mode: {mode!r}")


def _normal(mode: NormalMode, key: KeyEvent, context: ModeContext) -> Transition:
    if key.kind is KeyKind.CHAR:
        command = NORMAL_KEY_BINDINGS.get(key.char)
    else:
        command = {
            KeyKind.QUIT: 'quit',
            KeyKind.CANCEL: 'quit',
            KeyKind.CLEAR_ALL: 'clear_all',
            KeyKind.UP: 'up',
            KeyKind.DOWN: 'down',
        }.get(key.kind)

    if command == 'quit':
        return Transition(mode, quit=True)
    if command == 'clear_all':
        return Transition(mode, change=ClearAll(context.active_filter))
    if command == 'up':
        return Transition(mode, move=-1)
    if command == 'down':
        return Transition(mode, move=1)
    if command == 'search':
        return Transition(SearchMode(context.active_filter.search_text))
    if command == 'action_filter':
        return Transition(ActionFilterMode(_initial_action_highlight(context)))
    if command == 'time':
        return Transition(TimePresetsMode())

    return Transition(mode)


def _initial_action_highlight(context: ModeContext) -> int:
    current = context.active_filter.action_type
    action_types = context.indexes.action_types
    if current is not None and current in action_types:
        return action_types.index(current)
    return 0


def _edit_text(text: str, key: KeyEvent) -> Optional[str]:
    """Apply a CHAR or BACKSPACE key to staged text; None for other keys."""
    if key.kind is KeyKind.CHAR:
        # Control characters never reach the staged text
        if key.char and key.char.isprintable():
            return text + key.char
        return text
    if key.kind is KeyKind.BACKSPACE:
        return text[:-1]
    return None


def _search(mode: SearchMode, key: KeyEvent) -> Transition:
    if key.kind is KeyKind.CONFIRM:
        return Transition(NormalMode(), change=SetSearch(split_search_terms(mode.text)))
    if key.kind is KeyKind.CANCEL:
        return Transition(NormalMode())

    text = _edit_text(mode.text, key)
    if text is None:
        return Transition(mode)
    return Transition(SearchMode(text))


def _list_move(key: KeyEvent) -> int:
    if key.kind is KeyKind.UP:
        return -1
    if key.kind is KeyKind.DOWN:
        return 1
    if key.kind is KeyKind.CHAR:
        return LIST_KEY_BINDINGS.get(key.char, 0)
    return 0


def _clamp(highlight: int, count: int) -> int:
    if count <= 0:
        return 0
    return max(0, min(highlight, count - 1))


def _action_filter(mode: ActionFilterMode, key: KeyEvent, context: ModeContext) -> Transition:
    action_types = context.indexes.action_types

    if key.kind is KeyKind.CONFIRM:
        if not action_types:
            return Transition(NormalMode())
        chosen = action_types[_clamp(mode.highlight, len(action_types))]
        return Transition(NormalMode(), change=SetActionType(chosen))
    if key.kind is KeyKind.CANCEL:
        return Transition(NormalMode(), change=SetActionType(None))

    move = _list_move(key)
    if move:
        return Transition(ActionFilterMode(_clamp(mode.highlight + move, len(action_types))))
    return Transition(mode)


def _time_presets(mode: TimePresetsMode, key: KeyEvent, context: ModeContext) -> Transition:
    if key.kind is KeyKind.CANCEL:
        return Transition(NormalMode())

    if key.kind is KeyKind.CONFIRM:
        highlight = _clamp(mode.highlight, len(TIME_MENU))

        if highlight == CUSTOM_PICK_INDEX:
            if context.indexes.is_empty:
                return Transition(mode, message=NO_DATES_MESSAGE)
            return Transition(CustomPickMode(start_picker(context.indexes)))

        if highlight == CUSTOM_TYPE_INDEX:
            return Transition(CustomTypeMode())

        time_range = resolve_preset(TIME_MENU[highlight], context.clock())
        return Transition(NormalMode(), change=SetTimeRange(time_range))

    move = _list_move(key)
    if move:
        return Transition(TimePresetsMode(_clamp(mode.highlight + move, len(TIME_MENU))))
    return Transition(mode)


def _custom_pick(mode: CustomPickMode, key: KeyEvent) -> Transition:
    picker = mode.picker
    choices = picker.offered_choices()

    if key.kind is KeyKind.CONFIRM:
        if not choices:
            return Transition(mode)
        advanced = picker.commit(choices[_clamp(mode.highlight, len(choices))])
        if advanced.is_complete:
            return Transition(NormalMode(), change=SetTimeRange(advanced.resolve()))
        return Transition(CustomPickMode(advanced))

    if key.kind is KeyKind.CANCEL:
        previous = picker.back()
        if previous is None:
            return Transition(TimePresetsMode(CUSTOM_PICK_INDEX))
        undone = picker.commitments[-1]
        offered = previous.offered_choices()
        highlight = offered.index(undone) if undone in offered else 0
        return Transition(CustomPickMode(previous, highlight))

    move = _list_move(key)
    if move:
        return Transition(CustomPickMode(picker, _clamp(mode.highlight + move, len(choices))))
    return Transition(mode)


def _custom_type(mode: CustomTypeMode, key: KeyEvent, context: ModeContext) -> Transition:
    if key.kind is KeyKind.CANCEL:
        return Transition(NormalMode())

    if key.kind is KeyKind.CONFIRM:
        indexes = context.indexes
        try:
            time_range = parse_time_expression(
                mode.text, context.clock(), (indexes.earliest, indexes.latest)
            )
        except TimeExpressionError as e:
            logger.debug(e.details)
            return Transition(CustomTypeMode(mode.text, e.message))
        return Transition(NormalMode(), change=SetTimeRange(time_range))

    text = _edit_text(mode.text, key)
    if text is None:
        return Transition(mode)
    return Transition(CustomTypeMode(text))
