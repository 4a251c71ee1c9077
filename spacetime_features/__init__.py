"""Space-time event features: per-cell activity counts on a discretized grid."""

__version__ = '0.1.0'

from .grid_systems import (
    SpatialBoundary,
    SpaceTimeCell,
    SpatialCellGenerator,
    TemporalCellGenerator,
    next_spatial,
    next_temporal
)
from .events import QuantizedEvent
from .features import FeatureAccumulator

__all__ = [
    'SpatialBoundary',
    'SpaceTimeCell',
    'SpatialCellGenerator',
    'TemporalCellGenerator',
    'next_spatial',
    'next_temporal',
    'QuantizedEvent',
    'FeatureAccumulator'
]
