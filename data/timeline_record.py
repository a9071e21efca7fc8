"""
Timeline Record Model
=====================

This module defines the fixed-shape event representation for Defender device
timeline exports. Each row of the export carries the same 66 named text columns;
a TimelineRecord stores them in canonical order together with the parsed event
timestamp.

Records are immutable once created by the ingestion pipeline.

Author: Timeline Lens Development Team
Version: 1.0
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple


# Canonical column order of the Defender device timeline CSV export
COLUMNS: Tuple[str, ...] = (
    'Event Time',
    'Machine Id',
    'Computer Name',
    'Action Type',
    'File Name',
    'Folder Path',
    'Sha1',
    'Sha256',
    'MD5',
    'Process Command Line',
    'Account Domain',
    'Account Name',
    'Account Sid',
    'Logon Id',
    'Process Id',
    'Process Creation Time',
    'Process Token Elevation',
    'Registry Key',
    'Registry Value Name',
    'Registry Value Data',
    'Remote Url',
    'Remote Computer Name',
    'Remote IP',
    'Remote Port',
    'Local IP',
    'Local Port',
    'File Origin Url',
    'File Origin IP',
    'Initiating Process SHA1',
    'Initiating Process SHA256',
    'Initiating Process File Name',
    'Initiating Process Folder Path',
    'Initiating Process Id',
    'Initiating Process Command Line',
    'Initiating Process Creation Time',
    'Initiating Process Integrity Level',
    'Initiating Process Token Elevation',
    'Initiating Process Parent Id',
    'Initiating Process Parent File Name',
    'Initiating Process Parent Creation Time',
    'Initiating Process MD5',
    'Initiating Process Account Domain',
    'Initiating Process Account Name',
    'Initiating Process Account Sid',
    'Initiating Process Logon Id',
    'Report Id',
    'Additional Fields',
    'Typed Details',
    'App Guard Container Id',
    'Protocol',
    'Logon Type',
    'Process Integrity Level',
    'Registry Value Type',
    'Previous Registry Value Name',
    'Previous Registry Value Data',
    'Previous Registry Key',
    'File Origin Referrer Url',
    'Sensitivity Label',
    'Sensitivity Sub Label',
    'Is Endpoint Dlp Applied',
    'Is Azure Info Protection Applied',
    'Alert Ids',
    'Categories',
    'Severities',
    'Is Marked',
    'Data Type',
)

COLUMN_COUNT = len(COLUMNS)

EVENT_TIME_COLUMN = 'Event Time'
ACTION_TYPE_COLUMN = 'Action Type'

# Columns that participate in free-text search
SEARCHABLE_COLUMNS: Tuple[str, ...] = (
    'Event Time',
    'Machine Id',
    'Computer Name',
    'Action Type',
    'File Name',
    'Folder Path',
    'Sha1',
    'Sha256',
    'MD5',
    'Process Command Line',
    'Account Domain',
    'Account Name',
    'Account Sid',
    'Process Id',
    'Process Creation Time',
    'Registry Key',
    'Registry Value Name',
    'Registry Value Data',
    'Remote Url',
    'Remote Computer Name',
    'Remote IP',
    'Remote Port',
    'Local IP',
    'Local Port',
    'File Origin Url',
    'File Origin IP',
    'Initiating Process SHA1',
    'Initiating Process SHA256',
    'Initiating Process File Name',
    'Initiating Process Folder Path',
    'Initiating Process Id',
    'Initiating Process Command Line',
    'Initiating Process Creation Time',
    'Initiating Process Parent File Name',
    'Initiating Process Account Domain',
    'Initiating Process Account Name',
    'Report Id',
    'Additional Fields',
    'Typed Details',
    'Protocol',
    'Alert Ids',
    'Categories',
    'Severities',
    'Data Type',
)

COLUMN_INDEX: Dict[str, int] = {name: i for i, name in enumerate(COLUMNS)}

_SEARCHABLE_POSITIONS = tuple(COLUMN_INDEX[name] for name in SEARCHABLE_COLUMNS)

# Joins searchable values so a substring test cannot span two fields
_FIELD_SEPARATOR = '\x1f'


def _clean(value: str) -> str:
    return value.strip().strip('"').strip()


@dataclass(frozen=True)
class TimelineRecord:
    """
    One Defender timeline event.

    Attributes:
        values: The 66 column values in canonical COLUMNS order
        timestamp: Parsed Event Time (timezone-naive, UTC)
    """
    values: Tuple[str, ...]
    timestamp: datetime
    search_text: str = field(default='', repr=False, compare=False)

    def __post_init__(self):
        if len(self.values) != COLUMN_COUNT:
            raise ValueError(
                f"A timeline record needs {COLUMN_COUNT} fields, got {len(self.values)}"
            )
        if not self.search_text:
            text = _FIELD_SEPARATOR.join(self.values[i] for i in _SEARCHABLE_POSITIONS)
            object.__setattr__(self, 'search_text', text.lower())

    @classmethod
    def from_values(cls, values: Iterable[str], timestamp: datetime) -> 'TimelineRecord':
        return cls(tuple(values), timestamp)

    def __getitem__(self, column: str) -> str:
        return self.values[COLUMN_INDEX[column]]

    def get(self, column: str, default: Optional[str] = None) -> Optional[str]:
        index = COLUMN_INDEX.get(column)
        if index is None:
            return default
        return self.values[index]

    @property
    def event_time(self) -> str:
        return self.values[COLUMN_INDEX[EVENT_TIME_COLUMN]]

    @property
    def action_type(self) -> str:
        return self.values[COLUMN_INDEX[ACTION_TYPE_COLUMN]]

    def as_dict(self) -> Dict[str, str]:
        """Return all 66 fields keyed by column name, in canonical order."""
        return dict(zip(COLUMNS, self.values))

    def matches_terms(self, terms: Iterable[str]) -> bool:
        """
        Check whether every term occurs in at least one searchable field.

        Terms are expected lowercase; the comparison is a plain substring test.
        An empty term collection matches every record.
        """
        haystack = self.search_text
        return all(term in haystack for term in terms)

    def list_line(self) -> str:
        """Short one-line summary: time | action | file (or computer)."""
        time_text = _clean(self.event_time)
        action = self.action_type or '-'
        file_name = _clean(self['File Name']) or _clean(self['Initiating Process File Name'])
        if not file_name:
            return f"{time_text} | {action} | {_clean(self['Computer Name'])}"
        return f"{time_text} | {action} | {file_name}"

    def detail_lines(self) -> List[Tuple[str, str]]:
        """Return (label, value) pairs for every non-empty field."""
        lines = []
        for name, value in zip(COLUMNS, self.values):
            value = _clean(value)
            if value:
                lines.append((name, value))
        return lines
