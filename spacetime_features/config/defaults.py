# spacetime_features/config/defaults.py
"""Default configuration values."""

from pathlib import Path

# Project path
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

PATHS = {
    'project_root': str(PROJECT_ROOT),
    'logs_dir': str(PROJECT_ROOT / 'logs'),
    'output_dir': str(PROJECT_ROOT / 'outputs')
}

# Spatial extent of the grid in quantized cells, half-open [min, max)
# New Orleans at 250m resolution: 230 columns x 171 rows
GRID = {
    'x_range': [0, 230],
    'y_range': [0, 171]
}

FEATURES = {
    'span_hours': 8760,  # 365 days
    'on_out_of_order': 'skip',  # ignore, skip, raise
    'log_every': 10000  # progress log interval in events, 0 disables
}

# Linear quantization of raw coordinates into grid indices:
#   cell = scale * coordinate + offset
# Defaults map EPSG:3857 metres onto the 250m New Orleans grid
INGESTION = {
    'x_scale': 0.004,
    'x_offset': 40137.388552,
    'y_scale': 0.004,
    'y_offset': -13945.687388,
    'time_field': 'end',  # start or end timestamp picks the chronon
    'drop_out_of_bounds': True,
    'delimiter': ','
}

OUTPUT = {
    'compression': None,  # None or 'gzip'
    'chunk_size': 10000,
    'include_metadata': True
}

LOGGING = {
    'level': 'INFO',
    'log_file': None,
    'max_file_size': 100 * 1024 * 1024,  # 100MB
    'backup_count': 5
}
