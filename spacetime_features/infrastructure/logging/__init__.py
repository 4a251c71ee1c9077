"""Structured logging for feature runs.

Modules log through :func:`get_logger`; :func:`setup_logging` wires the
console and JSON file handlers once per process.
"""

from .context import stage
from .decorators import log_operation
from .setup import setup_logging
from .structured_logger import StructuredLogger, get_logger, run_context, stage_context

__all__ = [
    'StructuredLogger',
    'get_logger',
    'run_context',
    'stage_context',
    'stage',
    'log_operation',
    'setup_logging'
]
