"""Future-span feature accumulator.

Each event broadcasts itself into the future: the cells at its position for
the next ``span_hours`` chronons are incremented. Between consecutive events
the accumulator closes (drops) the cells lying between the previous event's
cell and the current one in raster order, so the map only ever holds cells
whose window is still open.
"""

import logging
from dataclasses import dataclass, asdict
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from ..exceptions import ConfigurationError, EventOrderError
from ..events.quantize import QuantizedEvent
from ..grid_systems import (
    SpaceTimeCell,
    SpatialBoundary,
    SpatialCellGenerator,
    TemporalCellGenerator
)
from ..infrastructure.logging import get_logger

logger = get_logger(__name__)

ORDERING_POLICIES = ('ignore', 'skip', 'raise')


@dataclass
class AccumulatorStats:
    """Running totals for one accumulator."""
    events_processed: int = 0
    events_skipped: int = 0
    increments: int = 0
    close_attempts: int = 0
    cells_closed: int = 0
    counts_closed: int = 0
    peak_open_cells: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class FeatureAccumulator:
    """Maintain per-cell counters of events whose forward window is open.

    Events must be fed in non-decreasing ``(t, y, x)`` order. What happens to
    an event that arrives before its predecessor depends on
    ``on_out_of_order``:

    - ``'ignore'``: no check; the event is processed as-is
    - ``'skip'``: the event is logged and dropped, state is unchanged
    - ``'raise'``: EventOrderError is raised, state is unchanged
    """

    def __init__(self,
                 bounds: SpatialBoundary,
                 span_hours: int,
                 on_out_of_order: str = 'ignore'):
        """
        Args:
            bounds: Spatial bounds used when closing cells between events
            span_hours: Number of chronons an event keeps its cell open
            on_out_of_order: Ordering policy, one of ORDERING_POLICIES
        """
        if isinstance(span_hours, bool) or not isinstance(span_hours, int) or span_hours < 1:
            raise ConfigurationError(f"span_hours must be a positive integer, got {span_hours!r}")
        if on_out_of_order not in ORDERING_POLICIES:
            raise ConfigurationError(
                f"on_out_of_order must be one of {ORDERING_POLICIES}, got {on_out_of_order!r}"
            )

        self.bounds = bounds
        self.span_hours = span_hours
        self.on_out_of_order = on_out_of_order
        self.stats = AccumulatorStats()
        self._feature_map: Dict[SpaceTimeCell, int] = {}
        self._previous_event: Optional[QuantizedEvent] = None

    @classmethod
    def from_config(cls, config=None) -> 'FeatureAccumulator':
        """Build an accumulator from the ``grid`` and ``features`` sections."""
        if config is None:
            from ..config import config

        return cls(
            bounds=SpatialBoundary.from_config(config.grid),
            span_hours=config.get('features.span_hours'),
            on_out_of_order=config.get('features.on_out_of_order', 'ignore')
        )

    @property
    def feature_map(self) -> Mapping[SpaceTimeCell, int]:
        """Read-only view of the open cells and their counters."""
        return MappingProxyType(self._feature_map)

    @property
    def previous_event(self) -> Optional[QuantizedEvent]:
        return self._previous_event

    @property
    def open_cell_count(self) -> int:
        return len(self._feature_map)

    @property
    def max_open_cells(self) -> int:
        """Spatial cells times span: the open-cell ceiling for in-bounds events.

        Cells sitting exactly on an earlier event's location are excluded from
        every close span, so a stream that revisits a cell within the span can
        exceed this ceiling.
        """
        return self.bounds.cell_count * self.span_hours

    def process(self, event: QuantizedEvent) -> bool:
        """
        Accumulate one event and close the cells that aged out before it.

        Args:
            event: Next event in ``(t, y, x)`` order

        Returns:
            True if the event was applied, False if it was skipped

        Raises:
            EventOrderError: If the event is out of order and the policy is 'raise'
        """
        if not self._check_order(event):
            self.stats.events_skipped += 1
            return False

        location = event.location
        span_end = location.shifted(self.span_hours)
        prev = self._previous_event if self._previous_event is not None else event

        # At most span_hours - 1 cells
        increments: List[SpaceTimeCell] = list(TemporalCellGenerator(location, span_end))

        feature_map = self._feature_map
        for cell in increments:
            feature_map[cell] = feature_map.get(cell, 0) + 1

        # cell_count cells per hour of gap; never materialized
        attempts = 0
        closed = 0
        closed_counts = 0
        for cell in SpatialCellGenerator(prev.location, location, self.bounds):
            attempts += 1
            value = feature_map.pop(cell, None)
            if value is not None:
                closed += 1
                closed_counts += value

        self._previous_event = event

        stats = self.stats
        stats.events_processed += 1
        stats.increments += len(increments)
        stats.close_attempts += attempts
        stats.cells_closed += closed
        stats.counts_closed += closed_counts
        if len(feature_map) > stats.peak_open_cells:
            stats.peak_open_cells = len(feature_map)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"Event at {location}: {len(increments)} increments, "
                f"{closed}/{attempts} closes, {len(feature_map)} open cells"
            )
        return True

    def _check_order(self, event: QuantizedEvent) -> bool:
        prev = self._previous_event
        if self.on_out_of_order == 'ignore' or prev is None:
            return True
        if not event.location < prev.location:
            return True

        message = (f"Event {event.event_id or ''} at {event.location} arrived after "
                   f"{prev.location}; events must be sorted by (t, y, x)")
        if self.on_out_of_order == 'raise':
            raise EventOrderError(message)

        logger.warning(f"Skipping out-of-order event: {message}")
        return False
