# spacetime_features/exporters/base_exporter.py
"""Exporter interface and per-export settings."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from ..exceptions import ConfigurationError
from ..grid_systems import SpaceTimeCell

ProgressCallback = Callable[[int, int], None]


@dataclass
class ExportConfig:
    """Where and how one feature map is written.

    ``compression`` is ``None`` or ``'gzip'``; rows are written
    ``chunk_size`` at a time so progress can be reported.
    """
    output_path: Path
    chunk_size: int = 10000
    include_metadata: bool = True
    compression: Optional[str] = None

    SUPPORTED_COMPRESSIONS = (None, 'gzip')

    def __post_init__(self):
        if self.compression not in self.SUPPORTED_COMPRESSIONS:
            raise ConfigurationError(f"Unsupported compression: {self.compression!r}")
        if self.chunk_size < 1:
            raise ConfigurationError(f"chunk_size must be positive, got {self.chunk_size}")
        self.output_path = Path(self.output_path)

    @classmethod
    def from_config(cls, output_path: Path, output_config: Dict[str, Any]) -> 'ExportConfig':
        """Build from the ``output`` configuration section."""
        return cls(
            output_path=output_path,
            chunk_size=output_config.get('chunk_size', 10000),
            include_metadata=output_config.get('include_metadata', True),
            compression=output_config.get('compression')
        )


class BaseExporter(ABC):
    """Write a feature map somewhere and keep counters about it."""

    def __init__(self):
        self.export_stats: Dict[str, Any] = {
            'rows_exported': 0,
            'chunks_processed': 0,
            'start_time': None,
            'end_time': None
        }

    @abstractmethod
    def export(self,
               feature_map: Mapping[SpaceTimeCell, int],
               config: ExportConfig,
               metadata: Optional[Dict[str, Any]] = None,
               progress_callback: Optional[ProgressCallback] = None) -> Path:
        """
        Export a feature map.

        Args:
            feature_map: Cell to counter mapping to write
            config: Export configuration
            metadata: Run description written alongside the data
            progress_callback: Called with (rows_written, total_rows)

        Returns:
            Path actually written (may gain a compression suffix)
        """

    @abstractmethod
    def validate_export(self, output_path: Path) -> bool:
        """Re-read the written file and check it against ``export_stats``."""

    def get_export_stats(self) -> Dict[str, Any]:
        """Counters from the last export, with its duration once finished."""
        stats = dict(self.export_stats)
        if stats['start_time'] and stats['end_time']:
            stats['duration_seconds'] = (stats['end_time'] - stats['start_time']).total_seconds()
        return stats

    def _start(self):
        self.export_stats.update(rows_exported=0, chunks_processed=0,
                                 start_time=datetime.now(), end_time=None)

    def _finish(self):
        self.export_stats['end_time'] = datetime.now()
