"""Logger subclass that stamps run/stage context onto every record."""

import logging
import sys
import traceback
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

# Set once per CLI invocation and per pipeline stage respectively
run_context: ContextVar[Optional[str]] = ContextVar('run_id', default=None)
stage_context: ContextVar[Optional[str]] = ContextVar('stage', default=None)


def _utc_now() -> str:
    return datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.%fZ')


def _format_traceback(exc_info) -> Optional[str]:
    if isinstance(exc_info, BaseException):
        exc_info = (type(exc_info), exc_info, exc_info.__traceback__)
    elif not isinstance(exc_info, tuple):
        exc_info = sys.exc_info()
    if exc_info[0] is None:
        return None
    return ''.join(traceback.format_exception(*exc_info))


def _split_extra(extra: Optional[Dict[str, Any]]) -> Tuple[Dict[str, Any], Dict[str, Any], Any, Optional[str]]:
    """Separate our reserved keys from whatever else the caller passed."""
    remaining = dict(extra) if isinstance(extra, dict) else {}
    context = remaining.pop('context', None) or {}
    performance = remaining.pop('performance', None)
    tb = remaining.pop('traceback', None)
    return remaining, context, performance, tb


class StructuredLogger(logging.Logger):
    """Logger whose records carry ``context``, ``performance`` and ``traceback``.

    ``context`` always includes the active run id and pipeline stage (when
    set), the logger name, a UTC timestamp, and any fields bound with
    :meth:`bind`. Formatters read these attributes directly.
    """

    def __init__(self, name: str):
        super().__init__(name)
        self._bound: Dict[str, Any] = {}

    def _log(self, level, msg, args, exc_info=None, extra=None, stack_info=False, **kwargs):
        remaining, caller_context, performance, tb = _split_extra(extra)

        context = {
            'run_id': run_context.get(),
            'stage': stage_context.get(),
            'logger_name': self.name,
            'timestamp': _utc_now(),
        }
        context = {key: value for key, value in context.items() if value is not None}
        context.update(self._bound)
        context.update(caller_context)

        if tb is None and exc_info:
            tb = _format_traceback(exc_info)

        remaining.update({'context': context, 'performance': performance, 'traceback': tb})
        super()._log(level, msg, args, exc_info=False, extra=remaining,
                     stack_info=stack_info, **kwargs)

    def bind(self, **fields):
        """Attach fields to every later record from this logger.

        Example:
            logger.bind(input_file='events.csv')
        """
        self._bound.update(fields)

    def unbind(self, *keys):
        """Drop bound fields; with no keys, drop all of them."""
        if not keys:
            self._bound.clear()
        for key in keys:
            self._bound.pop(key, None)

    def log_performance(self, operation: str, duration: float, **metrics):
        """Log timing for an operation.

        ``items_processed`` in ``metrics`` adds an ``items_per_second`` rate.
        Other keys (``open_cells``, ``memory_mb`` ...) are passed through.
        """
        performance = {'operation': operation, 'duration_seconds': round(duration, 3), **metrics}
        if duration > 0 and metrics.get('items_processed'):
            performance['items_per_second'] = round(metrics['items_processed'] / duration, 2)

        self.info(f"Performance: {operation} completed in {duration:.3f}s",
                  extra={'performance': performance})

    def log_error_with_context(self, error: BaseException, operation: Optional[str] = None, **context):
        """Log ``error`` at ERROR with its type, traceback and any extra context."""
        context['error_type'] = type(error).__name__
        if operation:
            context['operation'] = operation
        self.error(f"{type(error).__name__}: {error}", exc_info=error, extra={'context': context})


_loggers: Dict[str, StructuredLogger] = {}


def get_logger(name: str) -> StructuredLogger:
    """Return the StructuredLogger for ``name``, creating it on first use."""
    logger = _loggers.get(name)
    if logger is not None:
        return logger

    previous = logging.getLoggerClass()
    logging.setLoggerClass(StructuredLogger)
    try:
        logger = logging.getLogger(name)
    finally:
        logging.setLoggerClass(previous)

    _loggers[name] = logger
    return logger
