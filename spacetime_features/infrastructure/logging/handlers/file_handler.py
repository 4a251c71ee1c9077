"""Size-rotated JSON log file."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Union

from ..formatters import JsonFormatter


class JsonFileHandler(RotatingFileHandler):
    """Write every record (DEBUG and up) as JSON, rotating by size.

    The parent directory is created if missing.
    """

    def __init__(self, filename: Union[str, Path], max_bytes: int = 100 * 1024 * 1024,
                 backup_count: int = 5):
        path = Path(filename)
        path.parent.mkdir(parents=True, exist_ok=True)
        super().__init__(str(path), maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8')
        self.setFormatter(JsonFormatter())
        self.setLevel(logging.DEBUG)
