"""
Time Range Parser
=================

This module turns relative presets and typed time expressions into concrete,
inclusive time ranges.

Supported expressions (case-insensitive, extra whitespace ignored):
- clear (or an empty expression): remove the time filter
- today, yesterday
- last N days / last N day / last Nd, bare Nd
- last N hours / last N hour / last Nh / last N h, bare Nh
- after <date>, from <date>: from that date to the end of the data
- before <date>: from the start of the data to the end of that date
- <date> to <date>, <date> .. <date>: both calendar days, inclusive
- <date>: that calendar day

A <date> is YYYY-MM-DD and may carry a time of day ("2025-01-15 10:30",
"2025-01-15T10:30:00"); a timed endpoint is used as is instead of being widened
to the day boundary.

All datetimes are timezone-naive UTC, matching the parsed Event Time values.

Author: Timeline Lens Development Team
Version: 1.0
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Tuple

from data.timestamp_parser import TimestampParser
from timeline.utils.error_handler import TimeExpressionError

# Configure logger
logger = logging.getLogger(__name__)

DISPLAY_FORMAT = "%Y-%m-%d %H:%M"

# Last representable instant of a second-resolution bucket
END_OF_SECOND = timedelta(microseconds=999999)

PRESETS: Tuple[str, ...] = (
    'Today',
    'Yesterday',
    'Last 24 hours',
    'Last 7 days',
    'Last 30 days',
)

_DATE_ONLY_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')
_LAST_RE = re.compile(r'^last (\d+) ?(days?|d|hours?|h)$')
_SHORTHAND_RE = re.compile(r'^(\d+)(d|h)$')
_RANGE_RE = re.compile(r'^(.+?)(?: to |\s*\.\.\s*)(.+)$')


@dataclass(frozen=True)
class TimeRange:
    """
    Inclusive time interval [start, end].

    Attributes:
        start: First instant included
        end: Last instant included (never before start)
    """
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Time range start {self.start} is after end {self.end}")

    def contains(self, timestamp: datetime) -> bool:
        return self.start <= timestamp <= self.end

    def describe(self) -> str:
        start = TimestampParser.format_timestamp(self.start, DISPLAY_FORMAT)
        end = TimestampParser.format_timestamp(self.end, DISPLAY_FORMAT)
        return f"{start} to {end}"


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=23, minute=59, second=59, microsecond=999999)


def resolve_preset(name: str, now: datetime) -> TimeRange:
    """
    Resolve a named preset relative to a reference instant.

    Args:
        name: One of PRESETS (case-insensitive)
        now: Reference instant ("now")

    Returns:
        TimeRange: The concrete interval

    Raises:
        KeyError: If the name is not a known preset
    """
    key = ' '.join(name.lower().split())

    if key == 'today':
        return TimeRange(start_of_day(now), end_of_day(now))
    if key == 'yesterday':
        day = now - timedelta(days=1)
        return TimeRange(start_of_day(day), end_of_day(day))
    if key == 'last 24 hours':
        return TimeRange(now - timedelta(hours=24), now)
    if key == 'last 7 days':
        return TimeRange(now - timedelta(days=7), now)
    if key == 'last 30 days':
        return TimeRange(now - timedelta(days=30), now)

    raise KeyError(f"Unknown time preset: {name}")


def parse_time_expression(text: str, now: datetime,
                          bounds: Tuple[Optional[datetime], Optional[datetime]] = (None, None)
                          ) -> Optional[TimeRange]:
    """
    Parse a typed time expression.

    Args:
        text: The expression as typed
        now: Reference instant for relative expressions
        bounds: (earliest, latest) event timestamps, used by after/before

    Returns:
        TimeRange for the expression, or None for "clear"

    Raises:
        TimeExpressionError: If the expression is not understood or names an
            inverted range

    Examples:
        >>> parse_time_expression("2025-01-15 to 2025-01-16", now).describe()
        '2025-01-15 00:00 to 2025-01-16 23:59'
    """
    expression = ' '.join(text.split()).lower()

    if expression in ('', 'clear'):
        return None

    if expression in ('today', 'yesterday'):
        return resolve_preset(expression, now)

    match = _LAST_RE.match(expression) or _SHORTHAND_RE.match(expression)
    if match:
        count = int(match.group(1))
        if count <= 0:
            raise TimeExpressionError(text, "The count must be a positive number")
        try:
            if match.group(2).startswith('d'):
                return TimeRange(now - timedelta(days=count), now)
            return TimeRange(now - timedelta(hours=count), now)
        except (OverflowError, ValueError):
            raise TimeExpressionError(text, "The count is too large")

    earliest, latest = bounds

    for prefix in ('after ', 'from '):
        if expression.startswith(prefix):
            start, _ = _parse_endpoint(text, expression[len(prefix):])
            end = latest if latest is not None and latest > start else start
            return TimeRange(start, end)

    if expression.startswith('before '):
        moment, timed = _parse_endpoint(text, expression[len('before '):])
        end = moment if timed else end_of_day(moment)
        start = earliest if earliest is not None and earliest < end else end
        return TimeRange(start, end)

    match = _RANGE_RE.match(expression)
    if match:
        first, first_timed = _parse_endpoint(text, match.group(1))
        second, second_timed = _parse_endpoint(text, match.group(2))
        start = first if first_timed else start_of_day(first)
        end = second if second_timed else end_of_day(second)
        if start > end:
            raise TimeExpressionError(text, "Range start is after range end")
        return TimeRange(start, end)

    if _DATE_ONLY_RE.match(expression):
        day, _ = _parse_endpoint(text, expression)
        return TimeRange(start_of_day(day), end_of_day(day))

    logger.debug(f"Unrecognized time expression: {text!r}")
    raise TimeExpressionError(text)


def _parse_endpoint(expression: str, token: str) -> Tuple[datetime, bool]:
    """
    Parse one date endpoint.

    Returns:
        (datetime, timed) where timed is False for a bare calendar date
    """
    token = token.strip().upper()

    if _DATE_ONLY_RE.match(token):
        try:
            return datetime.strptime(token, "%Y-%m-%d"), False
        except ValueError:
            raise TimeExpressionError(expression, f"Invalid date '{token}'")

    moment = TimestampParser.parse_timestamp(token)
    if moment is None:
        raise TimeExpressionError(expression, f"Invalid date '{token.lower()}'")
    return moment, True
