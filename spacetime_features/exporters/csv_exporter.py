# spacetime_features/exporters/csv_exporter.py
"""CSV exporter for accumulated feature maps."""

import csv
import gzip
import json
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from ..features.frames import FEATURE_COLUMNS
from ..grid_systems import SpaceTimeCell
from ..infrastructure.logging import get_logger
from .base_exporter import BaseExporter, ExportConfig

logger = get_logger(__name__)


class FeatureCSVExporter(BaseExporter):
    """Export feature maps as ``t,y,x,count`` rows in cell order."""

    def export(self,
               feature_map: Mapping[SpaceTimeCell, int],
               config: ExportConfig,
               metadata: Optional[Dict[str, Any]] = None,
               progress_callback: Optional[Callable[[int, int], None]] = None) -> Path:
        self._start()

        try:
            config.output_path.parent.mkdir(parents=True, exist_ok=True)
            output_file = self._get_output_path(config)

            if config.compression == 'gzip':
                with gzip.open(output_file, 'wt', newline='', encoding='utf-8') as f:
                    self._export_to_file(f, feature_map, config, progress_callback)
            else:
                with open(output_file, 'w', newline='', encoding='utf-8') as f:
                    self._export_to_file(f, feature_map, config, progress_callback)

            self._finish()

            if config.include_metadata:
                self._create_metadata_file(output_file, config, metadata or {})

            logger.info(f"Export completed: {output_file}")
            logger.info(f"Exported {self.export_stats['rows_exported']:,} rows")

            return output_file

        except Exception as e:
            logger.error(f"Export failed: {e}")
            raise

    def _export_to_file(self,
                        file_handle,
                        feature_map: Mapping[SpaceTimeCell, int],
                        config: ExportConfig,
                        progress_callback: Optional[Callable[[int, int], None]] = None):
        writer = csv.writer(file_handle)
        writer.writerow(FEATURE_COLUMNS)

        cells = sorted(feature_map)
        total_rows = len(cells)

        for chunk_num, offset in enumerate(range(0, total_rows, config.chunk_size)):
            chunk = cells[offset:offset + config.chunk_size]
            writer.writerows((cell.t, cell.y, cell.x, feature_map[cell]) for cell in chunk)

            self.export_stats['rows_exported'] = offset + len(chunk)
            self.export_stats['chunks_processed'] = chunk_num + 1

            if progress_callback:
                progress_callback(self.export_stats['rows_exported'], total_rows)

    def _get_output_path(self, config: ExportConfig) -> Path:
        output_path = config.output_path
        if config.compression == 'gzip' and output_path.suffix != '.gz':
            output_path = output_path.with_name(output_path.name + '.gz')
        return output_path

    def _create_metadata_file(self, output_file: Path, config: ExportConfig, metadata: Dict[str, Any]):
        stats = self.get_export_stats()
        meta = {
            'output_file': output_file.name,
            'columns': FEATURE_COLUMNS,
            'rows_exported': stats['rows_exported'],
            'compression': config.compression,
            'exported_at': stats['end_time'].isoformat() if stats['end_time'] else None,
            **metadata
        }

        meta_file = output_file.with_name(output_file.name + '.meta.json')
        with open(meta_file, 'w', encoding='utf-8') as f:
            json.dump(meta, f, indent=2, default=str)

        logger.debug(f"Wrote export metadata to {meta_file}")

    def validate_export(self, output_path: Path) -> bool:
        """Check the file has the expected header and row count."""
        output_path = Path(output_path)
        if not output_path.exists():
            logger.error(f"Export file missing: {output_path}")
            return False

        opener = gzip.open if output_path.suffix == '.gz' else open
        with opener(output_path, 'rt', newline='', encoding='utf-8') as f:
            reader = csv.reader(f)
            header = next(reader, None)
            if header != FEATURE_COLUMNS:
                logger.error(f"Unexpected header in {output_path}: {header}")
                return False
            rows = sum(1 for _ in reader)

        if rows != self.export_stats['rows_exported']:
            logger.error(f"Row count mismatch in {output_path}: "
                         f"{rows} != {self.export_stats['rows_exported']}")
            return False

        return True
