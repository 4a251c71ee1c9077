"""Spatial limits of the space-time grid."""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from ..exceptions import ConfigurationError


@dataclass(frozen=True)
class SpatialBoundary:
    """Half-open column and row ranges bounding the grid.

    ``x_range`` is ``(x_min, x_max)`` and ``y_range`` is ``(y_min, y_max)``;
    a coordinate is inside when ``min <= value < max``.
    """
    x_range: Tuple[int, int]
    y_range: Tuple[int, int]

    def __post_init__(self):
        for axis, value in (('x', self.x_range), ('y', self.y_range)):
            try:
                low, high = value
                as_ints = (int(low), int(high))
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"{axis}_range must be two integers, got {value!r}", e)
            if as_ints != (low, high):
                raise ConfigurationError(f"{axis}_range must be integers, got {value!r}")
            low, high = as_ints
            if low < 0:
                raise ConfigurationError(f"{axis}_range must start at or above 0, got {value!r}")
            if high <= low:
                raise ConfigurationError(f"{axis}_range is empty: {value!r}")
            # Normalise lists coming from YAML into int tuples
            object.__setattr__(self, f'{axis}_range', as_ints)

    @property
    def x_min(self) -> int:
        return self.x_range[0]

    @property
    def x_max(self) -> int:
        return self.x_range[1]

    @property
    def y_min(self) -> int:
        return self.y_range[0]

    @property
    def y_max(self) -> int:
        return self.y_range[1]

    @property
    def width(self) -> int:
        """Number of columns."""
        return self.x_max - self.x_min

    @property
    def height(self) -> int:
        """Number of rows."""
        return self.y_max - self.y_min

    @property
    def cell_count(self) -> int:
        """Number of spatial cells in one time slice."""
        return self.width * self.height

    def contains_x(self, x: int) -> bool:
        """Check if a column lies within bounds."""
        return self.x_min <= x < self.x_max

    def contains_y(self, y: int) -> bool:
        """Check if a row lies within bounds."""
        return self.y_min <= y < self.y_max

    def contains(self, cell) -> bool:
        """Check if a cell's row and column both lie within bounds."""
        return self.contains_x(cell.x) and self.contains_y(cell.y)

    @classmethod
    def from_config(cls, grid_config: Optional[Dict[str, Any]] = None) -> 'SpatialBoundary':
        """
        Build bounds from the ``grid`` configuration section.

        Args:
            grid_config: Dict with ``x_range`` and ``y_range`` entries;
                the global configuration is used if not provided

        Returns:
            SpatialBoundary instance
        """
        if grid_config is None:
            from ..config import config
            grid_config = config.grid

        try:
            x_range: Sequence[int] = grid_config['x_range']
            y_range: Sequence[int] = grid_config['y_range']
        except KeyError as e:
            raise ConfigurationError(f"Grid configuration missing {e}", e)

        return cls(tuple(x_range), tuple(y_range))
