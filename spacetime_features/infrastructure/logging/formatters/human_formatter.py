"""Console formatter: one line per record plus optional performance/traceback lines."""

import logging
from datetime import datetime
from typing import Any, Dict, List

_LEVEL_COLORS = {
    'DEBUG': '\033[36m',
    'WARNING': '\033[93m',
    'ERROR': '\033[91m',
    'CRITICAL': '\033[95m',
}
_RESET = '\033[0m'
_DIM = '\033[2m'


def _short_name(name: str, width: int = 24) -> str:
    """Keep the last dotted component of long logger names."""
    if len(name) <= width:
        return name
    tail = name.rsplit('.', 1)[-1]
    return f"...{tail}"[:width]


def _performance_parts(perf: Dict[str, Any]) -> List[str]:
    parts = []
    if 'duration_seconds' in perf:
        parts.append(f"{perf['duration_seconds']:.3f}s")
    if 'items_per_second' in perf:
        parts.append(f"{perf['items_per_second']:,.1f} events/s")
    if 'open_cells' in perf:
        cells = f"{perf['open_cells']:,} open cells"
        if 'peak_open_cells' in perf:
            cells += f" (peak {perf['peak_open_cells']:,})"
        parts.append(cells)
    if 'memory_mb' in perf:
        parts.append(f"{perf['memory_mb']:.1f} MB")
    return parts


class HumanFormatter(logging.Formatter):
    """``<time> <LEVEL> [logger] [run:xxxxxxxx | stage:name] message``

    The run id is cut to eight characters. Performance records get an
    indented summary line; tracebacks are appended verbatim.
    """

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def _paint(self, text: str, color: str) -> str:
        if not self.use_colors or not color:
            return text
        return f"{color}{text}{_RESET}"

    def format(self, record: logging.LogRecord) -> str:
        when = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S')
        color = _LEVEL_COLORS.get(record.levelname, '')

        fields = [
            self._paint(when, _DIM),
            self._paint(f"{record.levelname:8}", color),
            self._paint(f"[{_short_name(record.name)}]", _DIM),
        ]

        context = getattr(record, 'context', None) or {}
        tags = []
        if context.get('run_id'):
            tags.append(f"run:{str(context['run_id'])[:8]}")
        if context.get('stage'):
            tags.append(f"stage:{context['stage']}")
        if tags:
            fields.append(f"[{' | '.join(tags)}]")

        fields.append(record.getMessage())
        lines = [' '.join(fields)]

        perf = getattr(record, 'performance', None)
        if perf:
            parts = _performance_parts(perf)
            if parts:
                lines.append(self._paint(f"  Performance: {' | '.join(parts)}", _DIM))

        tb = getattr(record, 'traceback', None)
        if tb:
            lines.extend(self._paint(f"  {line}", color) for line in tb.rstrip().splitlines())

        return '\n'.join(lines)
