"""Logging handlers for console and file output."""

from .console_handler import ConsoleHandler, stream_supports_color
from .file_handler import JsonFileHandler

__all__ = ['ConsoleHandler', 'JsonFileHandler', 'stream_supports_color']
