"""Customer volume segmentation toolkit for beverage distributors."""

from .pipeline import PipelineConfig, SegmentationResult, run_segmentation

__all__ = ["PipelineConfig", "SegmentationResult", "run_segmentation"]
