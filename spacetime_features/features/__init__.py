# spacetime_features/features/__init__.py
"""Windowed feature accumulation over the space-time grid."""

from .accumulator import FeatureAccumulator, AccumulatorStats, ORDERING_POLICIES
from .frames import feature_map_to_frame, feature_map_to_array

__all__ = [
    'FeatureAccumulator',
    'AccumulatorStats',
    'ORDERING_POLICIES',
    'feature_map_to_frame',
    'feature_map_to_array'
]
