# spacetime_features/grid_systems/__init__.py
"""Space-time grid model."""

from .bounds import SpatialBoundary
from .cell import SpaceTimeCell, next_spatial, next_temporal
from .generators import SpatialCellGenerator, TemporalCellGenerator

__all__ = [
    'SpatialBoundary',
    'SpaceTimeCell',
    'next_spatial',
    'next_temporal',
    'SpatialCellGenerator',
    'TemporalCellGenerator'
]
