"""Stderr handler for interactive runs."""

import logging
import os
import sys
from typing import Optional

from ..formatters import HumanFormatter


def stream_supports_color(stream) -> bool:
    """True for a tty unless NO_COLOR is set or TERM is dumb."""
    if os.environ.get('NO_COLOR') or os.environ.get('TERM') == 'dumb':
        return False
    isatty = getattr(stream, 'isatty', None)
    return bool(isatty and isatty())


class ConsoleHandler(logging.StreamHandler):
    """StreamHandler preconfigured with :class:`HumanFormatter`.

    Args:
        stream: Defaults to ``sys.stderr`` at construction time
        use_colors: ``None`` detects from the stream
        level: Minimum level shown
    """

    def __init__(self, stream=None, use_colors: Optional[bool] = None, level: int = logging.INFO):
        stream = stream or sys.stderr
        super().__init__(stream)
        if use_colors is None:
            use_colors = stream_supports_color(stream)
        self.setFormatter(HumanFormatter(use_colors=use_colors))
        self.setLevel(level)
