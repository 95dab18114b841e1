"""Legend color detection pipeline.

This module wires the individual stages into one strictly sequential run:

    ingest (to BGR) -> HSV conversion -> denoise -> quantize
        -> segment (every configured strategy) -> filter -> sample -> done

Every call to ``LegendDetector.detect`` tracks its own progress through
``PipelineState``; the detector instance holds nothing but configuration,
so one detector can serve several threads at once. A failure at any stage
moves the run to ``FAILED`` and the error propagates to the caller without
partial output.

An optional observer is called after each transition with the stage's
output image (``None`` for stages without one). ``DebugImageWriter`` in
``utils`` is an observer that writes those images to disk.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Callable, List, Optional, Sequence

import cv2
import numpy as np

from .candidate_filter import CandidateFilter
from .color_space import ColorSpace, convert, convert_color
from .config import DetectorConfig
from .denoise import denoise
from .errors import InvalidParameter, UnsupportedConversion
from .legend_info import LegendInfo
from .quantize import count_distinct_colors, quantize
from .sampler import sample_color
from .segmentation import Region, SegmentationStrategy, create_strategy
from .utils import ImageArray, setup_logger

logger = setup_logger(__name__)


class PipelineState(str, Enum):
    INGESTED = "ingested"
    COLOR_CONVERTED = "color_converted"
    DENOISED = "denoised"
    QUANTIZED = "quantized"
    SEGMENTED = "segmented"
    FILTERED = "filtered"
    SAMPLED = "sampled"
    DONE = "done"
    FAILED = "failed"


_STATE_SEQUENCE = [
    PipelineState.INGESTED,
    PipelineState.COLOR_CONVERTED,
    PipelineState.DENOISED,
    PipelineState.QUANTIZED,
    PipelineState.SEGMENTED,
    PipelineState.FILTERED,
    PipelineState.SAMPLED,
    PipelineState.DONE,
]

# Observer signature: (state, stage output image or None)
Observer = Callable[[PipelineState, Optional[ImageArray]], None]
# Hook for checking that candidates line up like a legend (row/column)
ArrangementCheck = Callable[[List[Region]], Sequence[Region]]

_init_lock = threading.Lock()
_initialized = False

def initialize() -> None:
    """One-time process-wide OpenCV setup. Safe to call repeatedly."""
    global _initialized

    with _init_lock:
        if _initialized:
            return
        cv2.setUseOptimized(True)
        logger.info(
            f"OpenCV {cv2.__version__} ready (optimized={cv2.useOptimized()}, "
            f"threads={cv2.getNumThreads()})"
        )
        _initialized = True

def is_initialized() -> bool:
    return _initialized


class _PipelineRun:
    """State tracking for a single detect() call."""

    def __init__(self, observer: Optional[Observer] = None) -> None:
        self.observer = observer
        self.state: Optional[PipelineState] = None
        self.history: List[PipelineState] = []

    def advance(self, state: PipelineState, image: Optional[ImageArray] = None) -> None:
        if self.state is None:
            expected = _STATE_SEQUENCE[0]
        elif self.state in (PipelineState.DONE, PipelineState.FAILED):
            raise RuntimeError(f"Pipeline already finished in state {self.state.value}")
        else:
            expected = _STATE_SEQUENCE[_STATE_SEQUENCE.index(self.state) + 1]

        if state != expected:
            current = self.state.value if self.state else "start"
            raise RuntimeError(f"Illegal pipeline transition {current} -> {state.value}")

        self.state = state
        self.history.append(state)
        logger.debug(f"Pipeline state: {state.value}")
        if self.observer is not None:
            self.observer(state, image)

    def fail(self) -> None:
        self.state = PipelineState.FAILED
        self.history.append(PipelineState.FAILED)
        if self.observer is not None:
            try:
                self.observer(PipelineState.FAILED, None)
            except Exception:
                logger.exception("Observer raised while reporting a pipeline failure")


def _draw_regions(image: ImageArray, regions: Sequence[Region]) -> ImageArray:
    overlay = image.copy()
    if regions:
        cv2.drawContours(overlay, [r.contour for r in regions], -1, (0, 255, 0), 1)
    return overlay


class LegendDetector:
    """Detects candidate legend swatches and their colors in an image.

    Attributes:
        config: Pipeline configuration
        observer: Optional per-stage callback
        arrangement_check: Optional callable that receives the filtered
            regions and returns the ones arranged like a legend
        strategies: Segmentation strategies, in the order their results are merged
    """

    def __init__(
        self,
        config: Optional[DetectorConfig] = None,
        observer: Optional[Observer] = None,
        arrangement_check: Optional[ArrangementCheck] = None,
    ) -> None:
        self.config = config if config is not None else DetectorConfig()
        self.observer = observer
        self.arrangement_check = arrangement_check
        self.candidate_filter = CandidateFilter.from_config(self.config)
        self.strategies: List[SegmentationStrategy] = [
            create_strategy(
                name,
                seed_fraction=self.config.watershed_seed_fraction,
                close_kernel_size=self.config.close_kernel_size,
            )
            for name in self.config.segmentation_strategies
        ]

        logger.debug(f"Initialized LegendDetector with strategies {[s.name for s in self.strategies]}")

    def detect(self, grid: ImageArray, color_space: ColorSpace = ColorSpace.RGB) -> LegendInfo:
        """Run the full pipeline on one pixel grid.

        Args:
            grid: H×W×3 uint8 pixel grid
            color_space: Channel order of ``grid`` (RGB, BGR or HSV)

        Returns:
            LegendInfo with one entry per accepted region, colors in RGB.
            Empty when the image has no structure.

        Raises:
            InvalidParameter: If the grid or configuration is invalid
            UnsupportedConversion: If ``color_space`` cannot be ingested
            InvalidRegion: If a zero-area region reaches the sampler
        """
        run = _PipelineRun(self.observer)
        start_time = time.time()
        try:
            info = self._run(run, grid, color_space)
        except Exception as e:
            last_state = run.state.value if run.state else "start"
            run.fail()
            logger.error(f"Legend detection failed after state '{last_state}': {e}")
            raise

        logger.info(f"Detected {len(info)} legend colors in {time.time() - start_time:.2f}s")
        return info

    def _ingest(self, grid: ImageArray, color_space: ColorSpace) -> ImageArray:
        try:
            color_space = ColorSpace(color_space)
        except ValueError as e:
            raise InvalidParameter(f"Unknown color space: {color_space}") from e
        if color_space == ColorSpace.GRAY:
            raise UnsupportedConversion("Grayscale input cannot be ingested; a three-channel grid is required")

        if not isinstance(grid, np.ndarray):
            raise InvalidParameter("Pixel grid must be a numpy array")
        if grid.dtype != np.uint8:
            raise InvalidParameter(f"Pixel grid must be uint8, got {grid.dtype}")
        if grid.ndim != 3 or grid.shape[2] != 3:
            raise InvalidParameter(f"Pixel grid must be H×W×3, got shape {grid.shape}")
        if grid.shape[0] == 0 or grid.shape[1] == 0:
            raise InvalidParameter("Pixel grid is empty")

        return convert(grid, color_space, ColorSpace.BGR)

    def _effective_clusters(self, grid: ImageArray) -> int:
        k = self.config.quantization_clusters
        distinct = count_distinct_colors(grid)
        if distinct < k:
            logger.warning(f"Image has only {distinct} distinct colors; quantizing to k={distinct} instead of {k}")
            return distinct
        return k

    def _segment(self, grid: ImageArray) -> List[Region]:
        if self.config.parallel_segmentation and len(self.strategies) > 1:
            with ThreadPoolExecutor(max_workers=len(self.strategies)) as pool:
                futures = [pool.submit(s.find_regions, grid) for s in self.strategies]
                # Collect in strategy order, not completion order
                batches = [f.result() for f in futures]
        else:
            batches = [s.find_regions(grid) for s in self.strategies]

        for strategy, batch in zip(self.strategies, batches):
            logger.debug(f"{strategy.name} produced {len(batch)} regions")

        return [region for batch in batches for region in batch]

    def _run(self, run: _PipelineRun, grid: ImageArray, color_space: ColorSpace) -> LegendInfo:
        config = self.config

        bgr = self._ingest(grid, color_space)
        run.advance(PipelineState.INGESTED, bgr)

        hsv = convert(bgr, ColorSpace.BGR, ColorSpace.HSV)
        run.advance(PipelineState.COLOR_CONVERTED, hsv)

        denoised = denoise(
            hsv,
            strategy=config.denoise_strategy,
            diameter=config.denoise_diameter,
            sigma_color=config.denoise_color_radius,
            sigma_space=config.denoise_spatial_radius,
            kernel_size=config.denoise_kernel_size,
        )
        del hsv
        run.advance(PipelineState.DENOISED, denoised)

        k = self._effective_clusters(denoised)
        quantized = quantize(
            denoised,
            k,
            epsilon=config.quantization_epsilon,
            max_iterations=config.quantization_max_iterations,
            attempts=config.quantization_attempts,
            seed=config.random_seed,
        ).grid
        del denoised
        segmentation_grid = convert(quantized, ColorSpace.HSV, ColorSpace.BGR)
        del quantized
        run.advance(PipelineState.QUANTIZED, segmentation_grid)

        regions = self._segment(segmentation_grid)
        del segmentation_grid
        run.advance(
            PipelineState.SEGMENTED,
            _draw_regions(bgr, regions) if self.observer is not None else None,
        )

        candidates = self.candidate_filter(regions)
        if self.arrangement_check is not None:
            candidates = list(self.arrangement_check(candidates))
        run.advance(
            PipelineState.FILTERED,
            _draw_regions(bgr, candidates) if self.observer is not None else None,
        )
        logger.debug(f"{len(candidates)}/{len(regions)} regions survived filtering")

        info = LegendInfo()
        for region in candidates:
            mean_bgr = sample_color(bgr, region)
            info.add_legend_color(convert_color(mean_bgr, ColorSpace.BGR, ColorSpace.RGB), region.bounding_box)
        del bgr
        run.advance(PipelineState.SAMPLED)

        run.advance(PipelineState.DONE)
        return info


def detect_legend_colors(
    grid: ImageArray,
    config: Optional[DetectorConfig] = None,
    color_space: ColorSpace = ColorSpace.RGB,
    observer: Optional[Observer] = None,
) -> LegendInfo:
    """Convenience wrapper: build a LegendDetector and run it once."""
    return LegendDetector(config, observer=observer).detect(grid, color_space)
