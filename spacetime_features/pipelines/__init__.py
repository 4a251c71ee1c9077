"""Feature generation pipeline."""

from .feature_pipeline import FeaturePipeline, PipelineResult, sort_events

__all__ = ['FeaturePipeline', 'PipelineResult', 'sort_events']
