# spacetime_features/events/__init__.py
"""Raw event ingestion and quantization onto the grid."""

from .records import EventRecord, parse_event_row, read_event_records, EVENT_FIELDS
from .quantize import GridTransform, QuantizedEvent, hour_of_era, quantize_records

__all__ = [
    'EventRecord',
    'parse_event_row',
    'read_event_records',
    'EVENT_FIELDS',
    'GridTransform',
    'QuantizedEvent',
    'hour_of_era',
    'quantize_records'
]
