"""
Data access layer for the timeline viewer.
Provides the timeline record model, timestamp parsing and the CSV loader.
"""

from .timeline_record import TimelineRecord, COLUMNS, SEARCHABLE_COLUMNS
from .timestamp_parser import TimestampParser
from .csv_loader import EventStore, TimelineCsvLoader, load_timeline

__all__ = [
    'TimelineRecord',
    'COLUMNS',
    'SEARCHABLE_COLUMNS',
    'TimestampParser',
    'EventStore',
    'TimelineCsvLoader',
    'load_timeline'
]
