# spacetime_features/pipelines/feature_pipeline.py
"""End-to-end run: load events, quantize, sort, accumulate, export."""

import os
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

import psutil

from ..config import Config
from ..events import GridTransform, QuantizedEvent, quantize_records, read_event_records
from ..exporters import ExportConfig, FeatureCSVExporter
from ..features import FeatureAccumulator
from ..grid_systems import SpatialBoundary
from ..infrastructure.logging import get_logger, log_operation, stage

logger = get_logger(__name__)


def _memory_mb() -> float:
    return psutil.Process(os.getpid()).memory_info().rss / (1024 * 1024)


def sort_events(events: Iterable[QuantizedEvent]) -> List[QuantizedEvent]:
    """Sort events by ``(t, y, x)``; ties keep their input order."""
    return sorted(events, key=lambda event: event.location)


@dataclass
class PipelineResult:
    """Summary of one feature run."""
    success: bool
    events_read: int = 0
    events_accumulated: int = 0
    events_skipped: int = 0
    open_cells: int = 0
    max_open_cells: int = 0
    output_path: Optional[Path] = None
    stage_times: Dict[str, float] = field(default_factory=dict)
    accumulator_stats: Dict[str, Any] = field(default_factory=dict)


class FeaturePipeline:
    """Drive an event CSV through the accumulator and write the open cells.

    Stages run in order: load, quantize, sort, accumulate, export. The
    accumulator's residual map after the last event is what gets exported;
    flushing it is the caller's decision, so nothing is closed at the end
    of the stream.
    """

    def __init__(self, config: Config):
        self.config = config
        self.bounds = SpatialBoundary.from_config(config.grid)
        self.transform = GridTransform.from_config(config.ingestion)
        self.span_hours = config.get('features.span_hours')
        self.on_out_of_order = config.get('features.on_out_of_order', 'ignore')
        # Rejects bad span or ordering settings before any input is read
        self._new_accumulator()
        self.accumulator: Optional[FeatureAccumulator] = None

    def _new_accumulator(self) -> FeatureAccumulator:
        return FeatureAccumulator(bounds=self.bounds, span_hours=self.span_hours,
                                  on_out_of_order=self.on_out_of_order)

    def run(self, input_path: Union[str, Path], output_path: Union[str, Path, None] = None) -> PipelineResult:
        """
        Run every stage.

        Args:
            input_path: Event CSV
            output_path: Feature CSV (``<output_dir>/<input stem>_features.csv``
                if not provided)

        Returns:
            PipelineResult; stage errors propagate after being logged
        """
        input_path = Path(input_path)
        if output_path is None:
            output_path = Path(self.config.get('paths.output_dir', 'outputs')) / f"{input_path.stem}_features.csv"
        result = PipelineResult(success=False)

        logger.info(f"Starting feature run: {input_path} -> {output_path}",
                    extra={'context': {'span_hours': self.config.get('features.span_hours'),
                                       'grid': self.config.grid}})

        with self._timed('load', result):
            records = list(read_event_records(
                input_path, delimiter=self.config.get('ingestion.delimiter', ',')
            ))
            result.events_read = len(records)

        with self._timed('quantize', result, records=len(records)):
            bounds = self.bounds if self.config.get('ingestion.drop_out_of_bounds', True) else None
            events = list(quantize_records(records, self.transform, bounds))

        with self._timed('sort', result, events=len(events)):
            events = sort_events(events)

        with self._timed('accumulate', result, events=len(events)):
            self.accumulator = self.accumulate(events)

        with self._timed('export', result, open_cells=self.accumulator.open_cell_count):
            result.output_path = self.export(output_path)

        stats = self.accumulator.stats
        result.success = True
        result.events_accumulated = stats.events_processed
        result.events_skipped = stats.events_skipped
        result.open_cells = self.accumulator.open_cell_count
        result.max_open_cells = self.accumulator.max_open_cells
        result.accumulator_stats = stats.to_dict()

        logger.info(f"Feature run complete: {result.events_accumulated:,} events, "
                    f"{result.open_cells:,} open cells written to {result.output_path}")
        return result

    def accumulate(self, events: Iterable[QuantizedEvent]) -> FeatureAccumulator:
        """Feed sorted events through a fresh accumulator."""
        accumulator = self._new_accumulator()
        log_every = self.config.get('features.log_every', 0)
        start_time = time.time()

        for index, event in enumerate(events, start=1):
            accumulator.process(event)
            if log_every and index % log_every == 0:
                logger.info(f"Processed {index:,} events, {accumulator.open_cell_count:,} open cells")

        logger.log_performance(
            'accumulate',
            time.time() - start_time,
            items_processed=accumulator.stats.events_processed,
            open_cells=accumulator.open_cell_count,
            peak_open_cells=accumulator.stats.peak_open_cells,
            max_open_cells=accumulator.max_open_cells,
            memory_mb=round(_memory_mb(), 1)
        )
        if accumulator.stats.peak_open_cells > accumulator.max_open_cells:
            logger.warning(
                f"Peak open cells {accumulator.stats.peak_open_cells:,} exceeded the "
                f"grid bound {accumulator.max_open_cells:,}; cells at earlier event locations are never closed"
            )
        return accumulator

    @log_operation("export_features")
    def export(self, output_path: Union[str, Path]) -> Path:
        """Write the accumulator's open cells to CSV."""
        if self.accumulator is None:
            raise RuntimeError("Nothing to export: accumulate() has not run")

        export_config = ExportConfig.from_config(Path(output_path), self.config.output)
        exporter = FeatureCSVExporter()
        metadata = {
            'span_hours': self.accumulator.span_hours,
            'x_range': list(self.bounds.x_range),
            'y_range': list(self.bounds.y_range),
            'accumulator_stats': self.accumulator.stats.to_dict()
        }
        return exporter.export(self.accumulator.feature_map, export_config, metadata=metadata)

    @contextmanager
    def _timed(self, name: str, result: PipelineResult, **metadata) -> Iterator[None]:
        start_time = time.time()
        try:
            with stage(name, **metadata):
                yield
        finally:
            result.stage_times[name] = round(time.time() - start_time, 3)
