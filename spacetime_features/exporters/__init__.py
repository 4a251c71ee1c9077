"""Feature map exporters."""

from .base_exporter import BaseExporter, ExportConfig
from .csv_exporter import FeatureCSVExporter

__all__ = ['BaseExporter', 'ExportConfig', 'FeatureCSVExporter']
