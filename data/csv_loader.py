"""
CSV loader for Defender device timeline exports.

Streams the export row by row, validates the 66-column header, skips rows that
are short, long or carry an unparsable Event Time, and stops reading once the
row cap is reached.
"""

import csv
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from data.timeline_record import COLUMNS, COLUMN_COUNT, TimelineRecord
from data.timestamp_parser import parse_event_time
from timeline.utils.error_handler import DataLoadError, HeaderError
from utils.error_handler import log_execution

DEFAULT_MAX_ROWS = 100_000

# Additional Fields / Typed Details cells can exceed the csv module's default limit
try:
    csv.field_size_limit(sys.maxsize)
except OverflowError:
    csv.field_size_limit(2147483647)


@dataclass
class EventStore:
    """
    Ordered, capped collection of ingested timeline records.

    Records keep their file order. The store is never mutated after the
    loader returns it.
    """
    records: Tuple[TimelineRecord, ...] = ()
    cap: int = DEFAULT_MAX_ROWS
    source_path: Optional[Path] = None
    rows_read: int = 0
    skipped_rows: int = 0
    cap_reached: bool = False

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[TimelineRecord]:
        return iter(self.records)

    def __getitem__(self, index: int) -> TimelineRecord:
        return self.records[index]

    def summary(self) -> str:
        text = f"{len(self.records):,} events loaded, {self.skipped_rows:,} malformed rows skipped"
        if self.cap_reached:
            text += f" (capped at {self.cap:,})"
        return text


def _normalize_header_name(name: str) -> str:
    return ' '.join(name.strip().strip('"').split()).lower()


_CANONICAL_BY_KEY: Dict[str, str] = {_normalize_header_name(name): name for name in COLUMNS}


class TimelineCsvLoader:
    """
    Loader for Defender timeline CSV files.
    Handles header validation, per-row tolerance and the row cap.
    """

    def __init__(self, path: Union[str, Path], max_rows: int = DEFAULT_MAX_ROWS):
        """
        Initialize the loader.

        Args:
            path: Path to the timeline CSV export
            max_rows: Maximum number of records to keep
        """
        if max_rows <= 0:
            raise ValueError(f"max_rows must be positive, got {max_rows}")

        self.path = Path(path)
        self.max_rows = max_rows
        self.logger = logging.getLogger(self.__class__.__name__)

    @log_execution()
    def load(self) -> EventStore:
        """
        Read the file and build an EventStore.

        Returns:
            EventStore: Records in file order, at most max_rows of them

        Raises:
            DataLoadError: If the file cannot be opened or read
            HeaderError: If the header row is missing or malformed
        """
        try:
            handle = open(self.path, 'r', encoding='utf-8-sig', errors='replace', newline='')
        except OSError as e:
            raise DataLoadError(f"Cannot open timeline file: {self.path}", str(self.path), e) from e

        with handle:
            try:
                return self._read(csv.reader(handle))
            except OSError as e:
                raise DataLoadError(f"Cannot read timeline file: {self.path}", str(self.path), e) from e

    def _read(self, reader) -> EventStore:
        try:
            header = next(reader)
        except StopIteration:
            raise HeaderError("Timeline file is empty (no header row)", str(self.path))
        except csv.Error as e:
            raise HeaderError(f"Header row is not valid CSV: {e}", str(self.path))

        positions = self.validate_header(header)

        records: List[TimelineRecord] = []
        rows_read = 0
        skipped = 0
        cap_reached = False

        while True:
            if len(records) >= self.max_rows:
                cap_reached = True
                break

            try:
                row = next(reader)
            except StopIteration:
                break
            except csv.Error as e:
                rows_read += 1
                skipped += 1
                self.logger.debug(f"Skipping undecodable row near line {reader.line_num}: {e}")
                continue

            rows_read += 1
            record = self._build_record(row, positions)
            if record is None:
                skipped += 1
                self.logger.debug(f"Skipping malformed row at line {reader.line_num}")
                continue

            records.append(record)

        store = EventStore(
            records=tuple(records),
            cap=self.max_rows,
            source_path=self.path,
            rows_read=rows_read,
            skipped_rows=skipped,
            cap_reached=cap_reached
        )
        self.logger.info(f"{self.path.name}: {store.summary()}")
        return store

    def validate_header(self, header: Sequence[str]) -> Optional[List[int]]:
        """
        Check the header row against the 66 canonical column names.

        Names match case-insensitively. A reordered header is accepted and
        mapped by name.

        Args:
            header: Header cells as read from the file

        Returns:
            None when the header is in canonical order, otherwise the file
            position of each canonical column

        Raises:
            HeaderError: If a column is unknown, missing or repeated
        """
        if not header or all(not cell.strip() for cell in header):
            raise HeaderError("Timeline file has no header row", str(self.path))

        unknown = []
        seen: Dict[str, int] = {}
        duplicates = []
        for position, cell in enumerate(header):
            canonical = _CANONICAL_BY_KEY.get(_normalize_header_name(cell))
            if canonical is None:
                unknown.append(cell)
            elif canonical in seen:
                duplicates.append(canonical)
            else:
                seen[canonical] = position

        missing = [name for name in COLUMNS if name not in seen]

        if unknown or missing or duplicates or len(header) != COLUMN_COUNT:
            message = (
                f"Timeline header must name exactly {COLUMN_COUNT} recognized columns "
                f"(found {len(header)})"
            )
            if duplicates:
                message += f"; repeated: {', '.join(duplicates)}"
            raise HeaderError(message, str(self.path), unknown, missing)

        positions = [seen[name] for name in COLUMNS]
        if positions == list(range(COLUMN_COUNT)):
            return None

        self.logger.warning("Timeline header columns are reordered; mapping by name")
        return positions

    @staticmethod
    def _build_record(row: Sequence[str], positions: Optional[List[int]]) -> Optional[TimelineRecord]:
        if len(row) != COLUMN_COUNT:
            return None

        values = tuple(row) if positions is None else tuple(row[i] for i in positions)

        timestamp = parse_event_time(values[0])
        if timestamp is None:
            return None

        return TimelineRecord(values, timestamp)


def load_timeline(path: Union[str, Path], max_rows: int = DEFAULT_MAX_ROWS) -> EventStore:
    """
    Load a Defender timeline export.

    Args:
        path: Path to the CSV file
        max_rows: Row cap (default 100,000)

    Returns:
        EventStore: Loaded records plus ingestion statistics
    """
    return TimelineCsvLoader(path, max_rows).load()
