"""Huedini: legend color detection for infographics.

This package finds small, regularly shaped, single-colored regions (legend
swatches) in raster images and reports their colors and locations.
"""

__version__ = "0.1.0"
__author__ = "Huedini Team"

# Pipeline stages
from .color_space import ColorSpace, convert, convert_color
from .denoise import DenoiseStrategy, denoise
from .quantize import QuantizationResult, quantize, count_distinct_colors
from .segmentation import (
    Region,
    SegmentationStrategy,
    WatershedStrategy,
    ConnectedComponentsStrategy,
    AdaptiveThresholdStrategy,
    create_strategy,
)
from .candidate_filter import CandidateFilter, filter_candidates
from .sampler import sample_color
from .detector import (
    LegendDetector,
    PipelineState,
    detect_legend_colors,
    initialize,
)
from .config import DetectorConfig, load_config
from .legend_info import LegendColorEntry, LegendInfo
from .errors import (
    LegendDetectionError,
    ImageLoadError,
    InvalidParameter,
    UnsupportedConversion,
    InvalidRegion,
)
from .utils import BBox, DebugImageWriter, load_image, save_image, setup_logger

# CLI entry point
from .cli import main

__all__ = [
    "ColorSpace",
    "convert",
    "convert_color",
    "DenoiseStrategy",
    "denoise",
    "QuantizationResult",
    "quantize",
    "count_distinct_colors",
    "Region",
    "SegmentationStrategy",
    "WatershedStrategy",
    "ConnectedComponentsStrategy",
    "AdaptiveThresholdStrategy",
    "create_strategy",
    "CandidateFilter",
    "filter_candidates",
    "sample_color",
    "LegendDetector",
    "PipelineState",
    "detect_legend_colors",
    "initialize",
    "DetectorConfig",
    "load_config",
    "LegendColorEntry",
    "LegendInfo",
    "LegendDetectionError",
    "ImageLoadError",
    "InvalidParameter",
    "UnsupportedConversion",
    "InvalidRegion",
    "BBox",
    "DebugImageWriter",
    "load_image",
    "save_image",
    "setup_logger",
    "main",
]
