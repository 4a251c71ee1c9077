"""Stage scoping for pipeline logs."""

import time
from contextlib import contextmanager
from typing import Iterator

from .structured_logger import get_logger, stage_context

logger = get_logger(__name__)


@contextmanager
def stage(name: str, **metadata) -> Iterator[None]:
    """Tag every record logged inside the block with ``stage=name``.

    Logs the stage start (with ``metadata`` as context) and its duration on
    success. A failure is logged with its traceback and re-raised.

    Example:
        with stage('quantize', records=120):
            events = list(quantize_records(records, transform))
    """
    token = stage_context.set(name)
    started = time.time()
    logger.info(f"Stage started: {name}", extra={'context': metadata})
    try:
        yield
    except Exception as e:
        logger.log_error_with_context(e, operation=name,
                                      duration_seconds=round(time.time() - started, 3))
        raise
    else:
        logger.log_performance(f"stage_{name}", time.time() - started, **metadata)
    finally:
        stage_context.reset(token)
