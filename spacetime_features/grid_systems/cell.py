"""Space-time cell coordinates and cell advancement."""

from dataclasses import dataclass
from typing import Tuple

from .bounds import SpatialBoundary


@dataclass(frozen=True, order=True)
class SpaceTimeCell:
    """Quantized cell of space-time.

    Ordering is first by time, then by row, then by column. The derived
    ordering follows field declaration order, so ``t`` must stay first
    and ``y`` must precede ``x``.
    """
    t: int  # Time slice (chronon): proleptic Gregorian hour
    y: int  # Raster row
    x: int  # Raster column

    def as_tuple(self) -> Tuple[int, int, int]:
        """Return ``(t, y, x)``."""
        return (self.t, self.y, self.x)

    def shifted(self, hours: int) -> 'SpaceTimeCell':
        """Return the cell at the same position ``hours`` later."""
        return SpaceTimeCell(self.t + hours, self.y, self.x)


def next_spatial(cell: SpaceTimeCell, bounds: SpatialBoundary) -> SpaceTimeCell:
    """
    Return the next cell in raster order, wrapping at the spatial bounds.

    Counts like an odometer: ``x`` is the least-significant digit, then
    ``y``, then ``t``. Time never wraps.

    Args:
        cell: Cell to advance from
        bounds: Spatial bounds at which x and y wrap

    Returns:
        The following cell
    """
    if bounds.contains_x(cell.x + 1):
        return SpaceTimeCell(cell.t, cell.y, cell.x + 1)

    if bounds.contains_y(cell.y + 1):
        return SpaceTimeCell(cell.t, cell.y + 1, bounds.x_min)

    return SpaceTimeCell(cell.t + 1, bounds.y_min, bounds.x_min)


def next_temporal(cell: SpaceTimeCell) -> SpaceTimeCell:
    """Return the same position one chronon later."""
    return SpaceTimeCell(cell.t + 1, cell.y, cell.x)
