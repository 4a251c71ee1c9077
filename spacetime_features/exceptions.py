"""Feature-generation exceptions for consistent error handling."""

from typing import Optional


class FeatureError(Exception):
    """Base feature-generation error."""
    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        super().__init__(message)
        self.original_exception = original_exception


class ConfigurationError(FeatureError):
    """Raised when grid, span or ingestion settings are unusable."""
    pass


class MalformedRecordError(FeatureError):
    """Raised when a raw event row cannot be parsed or quantized."""
    pass


class EventOrderError(FeatureError):
    """Raised when an event arrives before the previously processed one."""
    pass
