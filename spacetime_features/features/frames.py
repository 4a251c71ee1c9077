"""Conversion of feature maps into tabular and dense array form."""

from typing import Mapping, Tuple

import numpy as np
import pandas as pd

from ..exceptions import ConfigurationError
from ..grid_systems import SpaceTimeCell, SpatialBoundary

FEATURE_COLUMNS = ['t', 'y', 'x', 'count']


def feature_map_to_frame(feature_map: Mapping[SpaceTimeCell, int]) -> pd.DataFrame:
    """
    Flatten a feature map into a DataFrame sorted by cell.

    Args:
        feature_map: Cell to counter mapping

    Returns:
        DataFrame with int64 columns t, y, x, count
    """
    if not feature_map:
        return pd.DataFrame({name: pd.Series(dtype='int64') for name in FEATURE_COLUMNS})

    cells = sorted(feature_map)
    data = np.array(
        [(cell.t, cell.y, cell.x, feature_map[cell]) for cell in cells],
        dtype=np.int64
    )
    return pd.DataFrame(data, columns=FEATURE_COLUMNS)


def feature_map_to_array(feature_map: Mapping[SpaceTimeCell, int],
                         bounds: SpatialBoundary,
                         t_range: Tuple[int, int]) -> np.ndarray:
    """
    Rasterize a feature map into a dense ``(time, row, column)`` cube.

    Cells outside ``bounds`` or ``t_range`` are left out.

    Args:
        feature_map: Cell to counter mapping
        bounds: Spatial extent of the cube
        t_range: Half-open ``(t_min, t_max)`` chronon range

    Returns:
        Array of shape ``(t_max - t_min, bounds.height, bounds.width)``
    """
    t_min, t_max = t_range
    if t_max <= t_min:
        raise ConfigurationError(f"t_range is empty: {t_range!r}")

    cube = np.zeros((t_max - t_min, bounds.height, bounds.width), dtype=np.int64)
    for cell, count in feature_map.items():
        if t_min <= cell.t < t_max and bounds.contains(cell):
            cube[cell.t - t_min, cell.y - bounds.y_min, cell.x - bounds.x_min] = count
    return cube
