"""Quantization of raw events into space-time cells."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, Optional

from ..exceptions import ConfigurationError, MalformedRecordError
from ..grid_systems import SpaceTimeCell, SpatialBoundary
from ..infrastructure.logging import get_logger
from .records import EventRecord

logger = get_logger(__name__)


def hour_of_era(dt: datetime) -> int:
    """Hour number of ``dt`` counting 0001-01-01 as day 1 (proleptic Gregorian)."""
    return dt.toordinal() * 24 + dt.hour


@dataclass(frozen=True)
class QuantizedEvent:
    """An event that has been quantized to occur in a space-time cell."""
    location: SpaceTimeCell
    event_id: Optional[str] = field(default=None, compare=False)


@dataclass(frozen=True)
class GridTransform:
    """Per-axis linear map from raw coordinates to grid indices.

    ``cell_x = int(x_scale * x + x_offset)``, likewise for y; the
    fractional part is truncated toward zero.
    """
    x_scale: float
    x_offset: float
    y_scale: float
    y_offset: float
    time_field: str = 'end'

    def __post_init__(self):
        if self.time_field not in ('start', 'end'):
            raise ConfigurationError(f"time_field must be 'start' or 'end', got {self.time_field!r}")
        if self.x_scale == 0 or self.y_scale == 0:
            raise ConfigurationError("Quantization scale must be non-zero")

    @classmethod
    def from_config(cls, ingestion_config: Optional[Dict[str, Any]] = None) -> 'GridTransform':
        """Build a transform from the ``ingestion`` configuration section."""
        if ingestion_config is None:
            from ..config import config
            ingestion_config = config.ingestion

        try:
            return cls(
                x_scale=float(ingestion_config['x_scale']),
                x_offset=float(ingestion_config['x_offset']),
                y_scale=float(ingestion_config['y_scale']),
                y_offset=float(ingestion_config['y_offset']),
                time_field=ingestion_config.get('time_field', 'end')
            )
        except KeyError as e:
            raise ConfigurationError(f"Ingestion configuration missing {e}", e)

    def quantize(self, record: EventRecord) -> QuantizedEvent:
        """
        Quantize a record into its grid cell.

        Raises:
            MalformedRecordError: If the record lands on a negative index
        """
        cell_x = int(self.x_scale * record.x + self.x_offset)
        cell_y = int(self.y_scale * record.y + self.y_offset)
        if cell_x < 0 or cell_y < 0:
            raise MalformedRecordError(
                f"Event {record.id} quantizes outside the grid origin: x={cell_x}, y={cell_y}"
            )

        timestamp = record.end if self.time_field == 'end' else record.start
        return QuantizedEvent(
            location=SpaceTimeCell(t=hour_of_era(timestamp), y=cell_y, x=cell_x),
            event_id=record.id
        )


def quantize_records(records: Iterable[EventRecord],
                     transform: GridTransform,
                     bounds: Optional[SpatialBoundary] = None) -> Iterator[QuantizedEvent]:
    """
    Quantize records, dropping those that cannot be placed on the grid.

    Args:
        records: Parsed event records
        transform: Coordinate quantization
        bounds: If given, events outside these bounds are dropped

    Yields:
        QuantizedEvents in input order
    """
    dropped_malformed = 0
    dropped_outside = 0

    for record in records:
        try:
            event = transform.quantize(record)
        except MalformedRecordError as e:
            dropped_malformed += 1
            logger.warning(str(e))
            continue

        if bounds is not None and not bounds.contains(event.location):
            dropped_outside += 1
            logger.debug(f"Event {record.id} at {event.location} is outside {bounds}")
            continue

        yield event

    if dropped_malformed or dropped_outside:
        logger.info(
            f"Dropped {dropped_malformed:,} unplaceable and {dropped_outside:,} out-of-bounds events",
            extra={'context': {'dropped_malformed': dropped_malformed,
                               'dropped_outside': dropped_outside}}
        )
