"""Function decorator that times a call and logs failures."""

import functools
import time
from typing import Any, Callable, Optional, TypeVar

from .structured_logger import get_logger

F = TypeVar('F', bound=Callable[..., Any])


def log_operation(operation_name: Optional[str] = None):
    """Log a debug line on entry and a performance record on success.

    Exceptions are logged with context and re-raised unchanged.

    Args:
        operation_name: Name used in the records (defaults to the function name)

    Example:
        @log_operation("export_features")
        def export(self, output_path):
            ...
    """
    def decorator(func: F) -> F:
        name = operation_name or func.__name__
        logger = get_logger(func.__module__)

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger.debug(f"Starting {name}", extra={'context': {'operation': name}})
            started = time.time()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.log_error_with_context(e, operation=name,
                                              duration_seconds=round(time.time() - started, 3))
                raise
            logger.log_performance(name, time.time() - started)
            return result

        return wrapper  # type: ignore
    return decorator
