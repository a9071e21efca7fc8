"""
Utility functions and helpers for the timeline viewer.
Includes logging setup, error logging helpers, configuration and memory monitoring.
"""

from .error_handler import ErrorHandler, setup_logging, log_execution
from .viewer_config import ViewerConfig
from .memory_monitor import MemoryMonitor

__all__ = [
    'ErrorHandler',
    'setup_logging',
    'log_execution',
    'ViewerConfig',
    'MemoryMonitor'
]
