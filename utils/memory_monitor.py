"""
Memory Monitor for the timeline viewer.
Reports process and system memory after a timeline has been loaded.
"""

import psutil
import logging
from typing import Optional, Callable
from dataclasses import dataclass
from datetime import datetime


@dataclass
class MemorySnapshot:
    """Snapshot of memory usage at a point in time."""
    timestamp: datetime
    total_mb: float
    available_mb: float
    used_mb: float
    percent_used: float
    process_mb: float


class MemoryMonitor:
    """
    Monitors system and process memory usage.
    Warns when a large timeline pushes the machine towards its limits.
    """

    # Memory thresholds
    WARNING_THRESHOLD = 80.0  # Warn at 80% memory usage
    CRITICAL_THRESHOLD = 90.0  # Critical at 90% memory usage

    def __init__(self, warning_callback: Optional[Callable[[str], None]] = None):
        """
        Initialize memory monitor.

        Args:
            warning_callback: Optional callback for memory warnings
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self.warning_callback = warning_callback
        self.process = psutil.Process()

    def get_current_usage(self) -> MemorySnapshot:
        """
        Get current memory usage snapshot.

        Returns:
            MemorySnapshot with current memory statistics
        """
        mem = psutil.virtual_memory()
        process_mem = self.process.memory_info()

        snapshot = MemorySnapshot(
            timestamp=datetime.now(),
            total_mb=mem.total / (1024 * 1024),
            available_mb=mem.available / (1024 * 1024),
            used_mb=mem.used / (1024 * 1024),
            percent_used=mem.percent,
            process_mb=process_mem.rss / (1024 * 1024)
        )

        self._check_thresholds(snapshot)

        return snapshot

    def _check_thresholds(self, snapshot: MemorySnapshot) -> None:
        if snapshot.percent_used >= self.CRITICAL_THRESHOLD:
            message = (
                f"CRITICAL: Memory usage at {snapshot.percent_used:.1f}% "
                f"({snapshot.used_mb:.0f} MB / {snapshot.total_mb:.0f} MB). "
                f"Consider lowering --max-rows or closing other applications."
            )
            self.logger.critical(message)
            if self.warning_callback:
                self.warning_callback(message)

        elif snapshot.percent_used >= self.WARNING_THRESHOLD:
            message = (
                f"WARNING: Memory usage at {snapshot.percent_used:.1f}% "
                f"({snapshot.used_mb:.0f} MB / {snapshot.total_mb:.0f} MB). "
                f"Performance may be affected."
            )
            self.logger.warning(message)
            if self.warning_callback:
                self.warning_callback(message)

    def get_status(self, percent_used: float) -> str:
        """
        Get memory status based on usage percentage.

        Returns:
            Status string ('ok', 'warning', 'critical')
        """
        if percent_used >= self.CRITICAL_THRESHOLD:
            return 'critical'
        elif percent_used >= self.WARNING_THRESHOLD:
            return 'warning'
        else:
            return 'ok'

    def log_memory_usage(self, context: str = "", record_count: int = 0) -> MemorySnapshot:
        """
        Log current memory usage with optional context.

        Args:
            context: Optional context string for the log message
            record_count: Number of loaded records, for a per-event estimate

        Returns:
            The snapshot that was logged
        """
        current = self.get_current_usage()

        context_str = f" [{context}]" if context else ""
        per_event = ""
        if record_count > 0:
            per_event = f" (~{current.process_mb * 1024 / record_count:.1f} KB per event)"

        self.logger.info(
            f"Memory Usage{context_str}: "
            f"System: {current.percent_used:.1f}% [{self.get_status(current.percent_used)}] "
            f"({current.used_mb:.0f}/{current.total_mb:.0f} MB), "
            f"Process: {current.process_mb:.0f} MB{per_event}"
        )
        return current
