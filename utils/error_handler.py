import logging
import sys
from typing import Optional, Any, Callable, TypeVar
from functools import wraps

T = TypeVar('T')  # Generic type variable for return types

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ErrorHandler:
    """
    Centralized logging setup and error logging helpers.
    Provides a decorator for tracing entry and exit of long operations.
    """

    def __init__(self, logger_name: str = 'TimelineLens'):
        """
        Initialize the error handler with a logger.

        Args:
            logger_name: Name to use for the logger
        """
        self.logger = logging.getLogger(logger_name)

    def setup_logging(self, log_level: int = logging.INFO, log_file: Optional[str] = None):
        """
        Configure the root logger so every module logger shares one format.

        Args:
            log_level: Logging level (e.g., logging.INFO, logging.DEBUG)
            log_file: Optional file to write logs to
        """
        root = logging.getLogger()

        # Clear any existing handlers
        for handler in list(root.handlers):
            root.removeHandler(handler)

        root.setLevel(log_level)

        formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

        if log_file:
            try:
                file_handler = logging.FileHandler(log_file, encoding='utf-8')
                file_handler.setLevel(log_level)
                file_handler.setFormatter(formatter)
                root.addHandler(file_handler)
            except OSError as e:
                self.logger.error(f"Failed to set up file logging: {str(e)}")

    def log_execution(self, level: int = logging.DEBUG):
        """
        Decorator to log function entry and exit.

        Args:
            level: Logging level for the entry/exit messages

        Returns:
            Decorator function
        """
        def decorator(func: Callable[..., T]) -> Callable[..., T]:
            @wraps(func)
            def wrapper(*args, **kwargs) -> T:
                self.logger.log(level, f"Entering {func.__name__}")
                try:
                    result = func(*args, **kwargs)
                    self.logger.log(level, f"Exiting {func.__name__} (success)")
                    return result
                except Exception as e:
                    self.logger.log(level, f"Exiting {func.__name__} (error: {str(e)})")
                    raise
            return wrapper
        return decorator


def parse_log_level(name: Any, default: int = logging.INFO) -> int:
    """Translate 'debug' / 'INFO' / 20 into a logging level."""
    if isinstance(name, int):
        return name
    if not name:
        return default
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else default


# Create a default instance for easy importing
default_handler = ErrorHandler()
setup_logging = default_handler.setup_logging
log_execution = default_handler.log_execution
