"""
Timestamp Parser for Timeline Exports
=====================================

This module provides timestamp parsing for Defender timeline exports and for
timestamps typed by the analyst. It normalizes every accepted value to a
timezone-naive Python datetime in UTC so that comparisons never mix aware and
naive values.

Supported Formats:
- ISO 8601 strings, with or without fractional seconds and timezone suffix
- Space separated date/time strings ("2025-01-15 10:00:00.000")
- Minute precision strings ("2025-01-15 10:00")
- Date only strings ("2025-01-15"), interpreted as midnight

Author: Timeline Lens Development Team
Version: 1.0
"""

import datetime
import logging
from typing import Optional

# Configure logger
logger = logging.getLogger(__name__)


class TimestampParser:
    """
    Unified timestamp parser for timeline events.

    Event Time cells in Defender exports look like
    "2025-01-15T10:00:00.1234567Z"; hand-written exports and typed input
    usually drop the fractional part or the 'T' separator.
    """

    # Maximum reasonable timestamp (year 2100) - timezone-naive
    MAX_TIMESTAMP = datetime.datetime(2100, 1, 1)

    # Minimum reasonable timestamp (Unix epoch) - timezone-naive
    MIN_TIMESTAMP = datetime.datetime(1970, 1, 1)

    STRING_FORMATS = (
        "%Y-%m-%dT%H:%M:%S.%fZ",      # 2025-01-15T10:00:00.000Z
        "%Y-%m-%dT%H:%M:%SZ",          # 2025-01-15T10:00:00Z
        "%Y-%m-%dT%H:%M:%S.%f",        # 2025-01-15T10:00:00.000
        "%Y-%m-%dT%H:%M:%S",           # 2025-01-15T10:00:00
        "%Y-%m-%dT%H:%M",              # 2025-01-15T10:00
        "%Y-%m-%d %H:%M:%S.%f",        # 2025-01-15 10:00:00.000
        "%Y-%m-%d %H:%M:%S",           # 2025-01-15 10:00:00
        "%Y-%m-%d %H:%M",              # 2025-01-15 10:00
        "%Y-%m-%d",                    # 2025-01-15
    )

    @staticmethod
    def parse_timestamp(timestamp: Optional[str]) -> Optional[datetime.datetime]:
        """
        Parse a timestamp string and return a naive datetime in UTC.

        Args:
            timestamp: Timestamp text, possibly wrapped in stray quotes

        Returns:
            datetime.datetime: Parsed timestamp, or None if parsing fails

        Examples:
            >>> TimestampParser.parse_timestamp("2025-01-15T10:00:00Z")
            datetime.datetime(2025, 1, 15, 10, 0)

            >>> TimestampParser.parse_timestamp("2025-01-15T12:00:00+02:00")
            datetime.datetime(2025, 1, 15, 10, 0)
        """
        if timestamp is None:
            return None

        text = timestamp.strip().strip('"').strip()
        if not text:
            return None

        return TimestampParser._parse_string_timestamp(text)

    @staticmethod
    def _parse_string_timestamp(timestamp_str: str) -> Optional[datetime.datetime]:
        """
        Parse string timestamp in various formats.

        Args:
            timestamp_str: Trimmed timestamp string

        Returns:
            datetime.datetime: Parsed timestamp in UTC, or None if invalid
        """
        # Defender writes 7 fractional digits, which strptime's %f rejects
        normalized = TimestampParser._trim_fraction(timestamp_str)

        try:
            dt = datetime.datetime.fromisoformat(normalized.replace('Z', '+00:00'))
            dt = TimestampParser._ensure_utc(dt)
            if TimestampParser._is_reasonable_timestamp(dt):
                return dt
            return None
        except ValueError:
            pass

        for fmt in TimestampParser.STRING_FORMATS:
            try:
                dt = datetime.datetime.strptime(normalized, fmt)
            except ValueError:
                continue

            if TimestampParser._is_reasonable_timestamp(dt):
                return dt
            return None

        logger.debug(f"Failed to parse string timestamp: {timestamp_str}")
        return None

    @staticmethod
    def _trim_fraction(timestamp_str: str) -> str:
        """Cut fractional seconds down to microsecond precision."""
        dot = timestamp_str.find('.')
        if dot < 0:
            return timestamp_str

        end = dot + 1
        while end < len(timestamp_str) and timestamp_str[end].isdigit():
            end += 1

        digits = timestamp_str[dot + 1:end]
        if len(digits) <= 6:
            return timestamp_str
        return timestamp_str[:dot + 1] + digits[:6] + timestamp_str[end:]

    @staticmethod
    def _ensure_utc(dt: datetime.datetime) -> datetime.datetime:
        """
        Ensure datetime object is in UTC and timezone-naive.

        Naive values are assumed to already be UTC.
        """
        if dt.tzinfo is None:
            return dt
        return dt.astimezone(datetime.timezone.utc).replace(tzinfo=None)

    @staticmethod
    def _is_reasonable_timestamp(dt: datetime.datetime) -> bool:
        """Check that the timestamp lies between 1970 and 2100."""
        return TimestampParser.MIN_TIMESTAMP <= dt <= TimestampParser.MAX_TIMESTAMP

    @staticmethod
    def format_timestamp(dt: Optional[datetime.datetime], format_str: str = "%Y-%m-%d %H:%M") -> str:
        """
        Format datetime object as string.

        Args:
            dt: Datetime object to format
            format_str: Format string (default: "%Y-%m-%d %H:%M")

        Returns:
            str: Formatted timestamp string, or empty string if dt is None
        """
        if dt is None:
            return ""

        return dt.strftime(format_str)


def parse_event_time(value: Optional[str]) -> Optional[datetime.datetime]:
    """Shortcut used by the ingestion pipeline."""
    return TimestampParser.parse_timestamp(value)
