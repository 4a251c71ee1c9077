"""Lazy sequences of cells lying strictly between two cells."""

from typing import Iterator

from .bounds import SpatialBoundary
from .cell import SpaceTimeCell, next_spatial, next_temporal


class SpatialCellGenerator:
    """Yield cells after ``start`` and before ``end`` in raster order.

    Advances with x/y wraparound at ``bounds``. ``end`` is never yielded
    and iteration stops the first time the advanced cell is not strictly
    before it; once exhausted the generator stays exhausted. When
    ``start == end`` the single advance already passes ``end``, so
    nothing is produced.
    """

    def __init__(self, start: SpaceTimeCell, end: SpaceTimeCell, bounds: SpatialBoundary):
        self.current = start
        self.end = end
        self.bounds = bounds
        self._exhausted = False

    def __iter__(self) -> Iterator[SpaceTimeCell]:
        return self

    def __next__(self) -> SpaceTimeCell:
        if self._exhausted:
            raise StopIteration
        self.current = next_spatial(self.current, self.bounds)
        if self.current < self.end:
            return self.current
        self._exhausted = True
        raise StopIteration


class TemporalCellGenerator:
    """Yield the cells at ``start``'s position with ``start.t < t < end.t``."""

    def __init__(self, start: SpaceTimeCell, end: SpaceTimeCell):
        self.current = start
        self.end = end
        self._exhausted = False

    def __iter__(self) -> Iterator[SpaceTimeCell]:
        return self

    def __next__(self) -> SpaceTimeCell:
        if self._exhausted:
            raise StopIteration
        self.current = next_temporal(self.current)
        if self.current < self.end:
            return self.current
        self._exhausted = True
        raise StopIteration
