"""Root logger configuration for CLI runs."""

import logging
import uuid
from pathlib import Path
from typing import Optional

from .handlers import ConsoleHandler, JsonFileHandler
from .structured_logger import get_logger, run_context


def _resolve_log_path(log_file: str, config) -> Path:
    """Bare file names go under ``paths.logs_dir``; anything else is used as given."""
    path = Path(log_file)
    if path.is_absolute() or path.parent != Path('.'):
        return path
    return Path(config.get('paths.logs_dir', 'logs')) / path


def setup_logging(config,
                  run_id: Optional[str] = None,
                  log_file: Optional[str] = None,
                  console: bool = True,
                  log_level: Optional[str] = None) -> str:
    """Replace the root logger's handlers and start a new run context.

    Args:
        config: Anything with a dot-notation ``get`` (normally :class:`Config`)
        run_id: Attached to every record as ``context.run_id`` (uuid4 if omitted)
        log_file: JSON log file; falls back to ``logging.log_file``, and no
            file is written if both are unset
        console: Attach a :class:`ConsoleHandler` on stderr
        log_level: Console threshold; falls back to ``logging.level``

    Returns:
        The run id
    """
    level_name = (log_level or config.get('logging.level', 'INFO')).upper()
    level = getattr(logging, level_name, logging.INFO)
    log_file = log_file or config.get('logging.log_file')

    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    # A file handler records DEBUG whatever the console threshold is
    root.setLevel(logging.DEBUG if log_file else level)

    if console:
        root.addHandler(ConsoleHandler(level=level))

    log_path = None
    if log_file:
        log_path = _resolve_log_path(log_file, config)
        root.addHandler(JsonFileHandler(
            log_path,
            max_bytes=config.get('logging.max_file_size', 100 * 1024 * 1024),
            backup_count=config.get('logging.backup_count', 5)
        ))

    run_id = run_id or uuid.uuid4().hex
    run_context.set(run_id)

    get_logger(__name__).info(
        "Logging configured",
        extra={'context': {'log_level': level_name, 'console': console,
                           'log_file': str(log_path) if log_path else None}}
    )
    return run_id
