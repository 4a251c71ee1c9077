"""Shared fixtures for feature tests."""

import logging
import textwrap
from pathlib import Path

import pytest
import yaml

from spacetime_features.events import QuantizedEvent
from spacetime_features.grid_systems import SpaceTimeCell, SpatialBoundary
from spacetime_features.infrastructure.logging import run_context, stage_context


@pytest.fixture(autouse=True)
def restore_logging():
    """Keep root handlers, level and context vars from leaking between tests."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    run_token = run_context.set(None)
    stage_token = stage_context.set(None)

    yield

    for handler in root_logger.handlers[:]:
        if handler not in handlers:
            root_logger.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root_logger.handlers:
            root_logger.addHandler(handler)
    root_logger.setLevel(level)
    run_context.reset(run_token)
    stage_context.reset(stage_token)


@pytest.fixture
def small_bounds():
    """2x2 grid: x in [0, 2), y in [0, 2)."""
    return SpatialBoundary((0, 2), (0, 2))


@pytest.fixture
def make_event():
    """Factory for quantized events at (t, y, x)."""
    def _make(t, y, x, event_id=None):
        return QuantizedEvent(SpaceTimeCell(t, y, x), event_id)
    return _make


@pytest.fixture
def identity_config_file(tmp_path):
    """Config file with an identity quantization on a 4x4 grid."""
    config_data = {
        'grid': {'x_range': [0, 4], 'y_range': [0, 4]},
        'features': {'span_hours': 3, 'on_out_of_order': 'raise', 'log_every': 0},
        'ingestion': {
            'x_scale': 1.0,
            'x_offset': 0.0,
            'y_scale': 1.0,
            'y_offset': 0.0,
            'time_field': 'end',
            'drop_out_of_bounds': True
        },
        'paths': {'output_dir': str(tmp_path / 'outputs'), 'logs_dir': str(tmp_path / 'logs')}
    }

    config_path = tmp_path / "test_config.yml"
    with open(config_path, 'w') as f:
        yaml.dump(config_data, f)

    return config_path


@pytest.fixture
def events_csv(tmp_path) -> Path:
    """Event CSV with two good rows, one unparseable, one outside and one below the grid."""
    content = textwrap.dedent("""\
        id,start,end,category,x,y
        e1,2020-01-01T09:00:00,2020-01-01T10:30:00,theft,1.5,0.2
        e2,2020-01-01 08:00:00,2020-01-01 10:00:00,burglary,0.1,0.1
        e3,2020-01-01T08:00:00,2020-01-01T10:00:00,theft,abc,0.1
        e4,2020-01-01T08:00:00,2020-01-01T11:00:00,theft,50.0,1.0
        e5,2020-01-01T08:00:00,2020-01-01T11:00:00,,-3.0,1.0
        """)
    path = tmp_path / "events.csv"
    path.write_text(content)
    return path
