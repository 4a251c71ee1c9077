"""Tests for the future-span feature accumulator."""

import random
import tracemalloc

import pytest

from spacetime_features.config import Config
from spacetime_features.exceptions import ConfigurationError, EventOrderError
from spacetime_features.features import FeatureAccumulator
from spacetime_features.grid_systems import SpaceTimeCell, SpatialBoundary, SpatialCellGenerator


def cell(t, y, x):
    return SpaceTimeCell(t, y, x)


def random_stream(make_event, bounds, count, seed, t_span=200):
    rng = random.Random(seed)
    events = [
        make_event(rng.randrange(t_span), rng.randrange(bounds.y_min, bounds.y_max),
                   rng.randrange(bounds.x_min, bounds.x_max))
        for _ in range(count)
    ]
    return sorted(events, key=lambda event: event.location)


class TestConstruction:
    """Test fail-fast configuration checks."""

    @pytest.mark.parametrize('span', [0, -1, True, 2.0, '3', None])
    def test_rejects_bad_span(self, small_bounds, span):
        with pytest.raises(ConfigurationError):
            FeatureAccumulator(small_bounds, span)

    def test_rejects_unknown_policy(self, small_bounds):
        with pytest.raises(ConfigurationError, match='on_out_of_order'):
            FeatureAccumulator(small_bounds, 2, on_out_of_order='reorder')

    def test_starts_empty(self, small_bounds):
        accumulator = FeatureAccumulator(small_bounds, 2)

        assert dict(accumulator.feature_map) == {}
        assert accumulator.previous_event is None
        assert accumulator.open_cell_count == 0
        assert accumulator.max_open_cells == 8

    def test_from_config(self, identity_config_file):
        accumulator = FeatureAccumulator.from_config(Config(identity_config_file))

        assert accumulator.bounds == SpatialBoundary((0, 4), (0, 4))
        assert accumulator.span_hours == 3
        assert accumulator.on_out_of_order == 'raise'


class TestProcess:
    """Test increment and close steps."""

    def test_first_event(self, small_bounds, make_event):
        """Increments the hours strictly inside the span; the degenerate close is a no-op."""
        accumulator = FeatureAccumulator(small_bounds, span_hours=2)

        assert accumulator.process(make_event(10, 0, 0)) is True

        assert dict(accumulator.feature_map) == {cell(11, 0, 0): 1}
        assert accumulator.stats.increments == 1
        assert accumulator.stats.close_attempts == 0

    def test_second_event_next_cell(self, small_bounds, make_event):
        """Adjacent cells have nothing between them to close."""
        accumulator = FeatureAccumulator(small_bounds, span_hours=2)
        accumulator.process(make_event(10, 0, 0))

        b = make_event(10, 0, 1)
        accumulator.process(b)

        closed = list(SpatialCellGenerator(cell(10, 0, 0), cell(10, 0, 1), small_bounds))
        assert closed == []
        assert dict(accumulator.feature_map) == {cell(11, 0, 0): 1, cell(11, 0, 1): 1}
        assert accumulator.previous_event == b

    def test_closes_cells_between_events(self, small_bounds, make_event):
        accumulator = FeatureAccumulator(small_bounds, span_hours=2)
        accumulator.process(make_event(10, 0, 0))
        accumulator.process(make_event(10, 0, 1))

        accumulator.process(make_event(11, 1, 0))

        # (10,1,0) (10,1,1) (11,0,0) (11,0,1) lie between; the last two were open
        assert dict(accumulator.feature_map) == {cell(12, 1, 0): 1}
        assert accumulator.stats.close_attempts == 4
        assert accumulator.stats.cells_closed == 2
        assert accumulator.stats.counts_closed == 2

    def test_closed_keys_absent_afterwards(self, small_bounds, make_event):
        accumulator = FeatureAccumulator(small_bounds, span_hours=4)
        first = make_event(10, 0, 0)
        second = make_event(13, 1, 1)
        accumulator.process(first)
        accumulator.process(second)

        for closed in SpatialCellGenerator(first.location, second.location, small_bounds):
            assert closed not in accumulator.feature_map
        # (13,0,0) precedes (13,1,1) in raster order, so it is closed too
        assert dict(accumulator.feature_map) == {
            cell(14, 1, 1): 1,
            cell(15, 1, 1): 1,
            cell(16, 1, 1): 1,
        }

    def test_overlapping_spans_stack(self, make_event):
        bounds = SpatialBoundary((0, 1), (0, 1))
        accumulator = FeatureAccumulator(bounds, span_hours=4)

        accumulator.process(make_event(10, 0, 0))
        accumulator.process(make_event(10, 0, 0))

        assert dict(accumulator.feature_map) == {cell(11, 0, 0): 2, cell(12, 0, 0): 2, cell(13, 0, 0): 2}

    def test_event_location_cells_are_not_closed(self, small_bounds, make_event):
        """The close span excludes the current event's own cell, so it stays open."""
        accumulator = FeatureAccumulator(small_bounds, span_hours=3)
        accumulator.process(make_event(10, 0, 0))

        accumulator.process(make_event(11, 0, 0))

        assert dict(accumulator.feature_map) == {
            cell(11, 0, 0): 1,
            cell(12, 0, 0): 2,
            cell(13, 0, 0): 1,
        }

    def test_span_of_one_opens_nothing(self, small_bounds, make_event):
        accumulator = FeatureAccumulator(small_bounds, span_hours=1)

        accumulator.process(make_event(10, 0, 0))

        assert dict(accumulator.feature_map) == {}

    def test_feature_map_is_read_only(self, small_bounds, make_event):
        accumulator = FeatureAccumulator(small_bounds, span_hours=2)
        accumulator.process(make_event(10, 0, 0))

        with pytest.raises(TypeError):
            accumulator.feature_map[cell(11, 0, 0)] = 5

    def test_events_outside_bounds_are_accumulated(self, small_bounds, make_event):
        """Bounds only shape the close span; filtering is the caller's job."""
        accumulator = FeatureAccumulator(small_bounds, span_hours=2)

        accumulator.process(make_event(10, 5, 5))

        assert dict(accumulator.feature_map) == {cell(11, 5, 5): 1}


class TestOrdering:
    """Test out-of-order handling policies."""

    def test_ignore_processes_anyway(self, small_bounds, make_event):
        accumulator = FeatureAccumulator(small_bounds, span_hours=2, on_out_of_order='ignore')
        accumulator.process(make_event(10, 1, 1))

        assert accumulator.process(make_event(10, 0, 0)) is True
        assert cell(11, 0, 0) in accumulator.feature_map

    def test_raise_leaves_state_intact(self, small_bounds, make_event):
        accumulator = FeatureAccumulator(small_bounds, span_hours=2, on_out_of_order='raise')
        first = make_event(10, 1, 1)
        accumulator.process(first)
        before = dict(accumulator.feature_map)

        with pytest.raises(EventOrderError):
            accumulator.process(make_event(10, 0, 0, event_id='late'))

        assert dict(accumulator.feature_map) == before
        assert accumulator.previous_event == first

    def test_skip_logs_and_drops(self, small_bounds, make_event, caplog):
        accumulator = FeatureAccumulator(small_bounds, span_hours=2, on_out_of_order='skip')
        first = make_event(10, 1, 1)
        accumulator.process(first)
        before = dict(accumulator.feature_map)

        with caplog.at_level('WARNING'):
            assert accumulator.process(make_event(9, 0, 0)) is False

        assert dict(accumulator.feature_map) == before
        assert accumulator.previous_event == first
        assert accumulator.stats.events_skipped == 1
        assert accumulator.stats.events_processed == 1
        assert 'out-of-order' in caplog.text

    def test_equal_locations_are_in_order(self, small_bounds, make_event):
        accumulator = FeatureAccumulator(small_bounds, span_hours=2, on_out_of_order='raise')
        accumulator.process(make_event(10, 1, 1))

        assert accumulator.process(make_event(10, 1, 1)) is True
        assert accumulator.feature_map[cell(11, 1, 1)] == 2


class TestInvariants:
    """Test properties that hold over whole event streams."""

    @pytest.mark.parametrize('seed', [0, 1, 2])
    def test_counters_positive_and_mass_conserved(self, make_event, seed):
        bounds = SpatialBoundary((0, 3), (0, 3))
        accumulator = FeatureAccumulator(bounds, span_hours=5)

        for event in random_stream(make_event, bounds, 150, seed):
            accumulator.process(event)
            assert all(count >= 1 for count in accumulator.feature_map.values())

        stats = accumulator.stats
        assert stats.increments - stats.counts_closed == sum(accumulator.feature_map.values())

    def test_deterministic(self, make_event):
        bounds = SpatialBoundary((0, 4), (0, 3))
        events = random_stream(make_event, bounds, 200, seed=42)

        first = FeatureAccumulator(bounds, span_hours=6)
        second = FeatureAccumulator(bounds, span_hours=6)
        for event in events:
            first.process(event)
        for event in events:
            second.process(event)

        assert dict(first.feature_map) == dict(second.feature_map)
        assert first.stats == second.stats

    def test_open_cells_within_grid_bound(self, make_event):
        """Without revisiting a cell inside its span, open cells stay under cell_count * span."""
        bounds = SpatialBoundary((0, 3), (0, 2))
        span = 4
        accumulator = FeatureAccumulator(bounds, span_hours=span)

        # Every cell once per slice, slices spaced a full span apart
        for t in range(0, 40, span):
            for y in range(2):
                for x in range(3):
                    accumulator.process(make_event(t, y, x))
                    assert accumulator.open_cell_count <= accumulator.max_open_cells

        assert accumulator.stats.peak_open_cells <= accumulator.max_open_cells
        assert accumulator.max_open_cells == 6 * span

    def test_long_gap_closes_without_buffering(self, make_event):
        """Memory for a close step doesn't grow with the time between events."""
        bounds = SpatialBoundary((0, 100), (0, 100))
        accumulator = FeatureAccumulator(bounds, span_hours=2)
        accumulator.process(make_event(0, 0, 0))

        tracemalloc.start()
        try:
            accumulator.process(make_event(50, 0, 0))
            _, peak = tracemalloc.get_traced_memory()
        finally:
            tracemalloc.stop()

        # Every cell strictly between (0, 0, 0) and (50, 0, 0) was visited
        assert accumulator.stats.close_attempts == 50 * bounds.cell_count - 1
        assert accumulator.stats.cells_closed == 1
        assert dict(accumulator.feature_map) == {cell(51, 0, 0): 1}
        assert peak < 2 * 1024 * 1024
