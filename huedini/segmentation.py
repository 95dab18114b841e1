"""Region segmentation strategies for legend swatch candidates.

Each strategy turns a quantized BGR pixel grid into a list of Regions
(closed contours). Strategies never modify their input and share no state,
so the orchestrator may run them side by side on the same grid.

Available strategies:
- ``watershed``: Otsu binarization, morphological cleanup and marker-based
  watershed flooding from distance-transform seeds. One region per basin,
  outer boundary only.
- ``components``: Otsu binarization, close/open cleanup and flat contour
  tracing. Nested contours are all reported.
- ``adaptive``: Gaussian blur, adaptive Gaussian threshold and full contour
  tree. No quantization assumptions; kept for comparison runs.
"""

from dataclasses import dataclass, field
from functools import cached_property
from typing import Dict, List, Tuple, Type

import cv2
import numpy as np

from .color_space import ColorSpace, convert
from .errors import InvalidParameter
from .utils import BBox, ImageArray, MaskArray, setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True, eq=False)
class Region:
    """A candidate region described by its boundary polygon.

    Attributes:
        contour: N×1×2 int32 array of boundary points (read-only)
        strategy: Name of the strategy that produced the region
    """
    contour: np.ndarray
    strategy: str = field(default="")

    def __post_init__(self) -> None:
        contour = np.array(self.contour, dtype=np.int32).reshape(-1, 1, 2)
        if len(contour) == 0:
            raise InvalidParameter("Region contour must contain at least one point")
        contour.setflags(write=False)
        object.__setattr__(self, "contour", contour)

    @cached_property
    def bounding_box(self) -> BBox:
        return BBox(*(int(v) for v in cv2.boundingRect(self.contour)))

    @cached_property
    def area(self) -> float:
        """Polygon area, independent of the bounding box."""
        return float(cv2.contourArea(self.contour))

    @property
    def aspect_ratio(self) -> float:
        _, _, w, h = self.bounding_box
        return w / h

    def __repr__(self) -> str:
        return f"Region(strategy={self.strategy!r}, bbox={tuple(self.bounding_box)}, area={self.area:.1f})"


def _to_gray(grid: ImageArray) -> np.ndarray:
    if grid.ndim == 2:
        return grid.copy()
    return convert(grid, ColorSpace.BGR, ColorSpace.GRAY)


def _is_flat(gray: np.ndarray) -> bool:
    return int(gray.min()) == int(gray.max())


def _otsu_threshold(gray: np.ndarray) -> Tuple[float, MaskArray, MaskArray]:
    """Return the Otsu threshold and the bright/dark class masks (0/255)."""
    threshold, bright = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    dark = cv2.bitwise_not(bright)
    return threshold, bright, dark


def _morph_close(mask: MaskArray, kernel: np.ndarray) -> MaskArray:
    # Mirrored anchors keep even-sized kernels from shifting the mask
    k_h, k_w = kernel.shape
    dilated = cv2.dilate(mask, kernel, anchor=(0, 0))
    return cv2.erode(dilated, kernel, anchor=(k_w - 1, k_h - 1))


def _morph_open(mask: MaskArray, kernel: np.ndarray) -> MaskArray:
    k_h, k_w = kernel.shape
    eroded = cv2.erode(mask, kernel, anchor=(0, 0))
    return cv2.dilate(eroded, kernel, anchor=(k_w - 1, k_h - 1))


def _count_components(mask: MaskArray) -> int:
    if not np.any(mask):
        return 0
    num_labels, _ = cv2.connectedComponents(mask, connectivity=8)
    return num_labels - 1


class SegmentationStrategy:
    """Base class for strategies producing candidate regions from a grid."""

    name: str = ""

    def find_regions(self, grid: ImageArray) -> List[Region]:
        """Return candidate regions for a quantized BGR grid (or H×W grayscale)."""
        raise NotImplementedError

    def _regions_from_contours(self, contours) -> List[Region]:
        return [Region(c, self.name) for c in contours if len(c) > 0]

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class WatershedStrategy(SegmentationStrategy):
    """Marker-based watershed segmentation.

    The foreground polarity is the one that leaves the background in the
    fewest connected pieces; on a tie the smaller foreground wins.
    """

    name = "watershed"

    def __init__(
        self,
        seed_fraction: float = 0.4,
        open_iterations: int = 2,
        dilate_iterations: int = 3,
    ) -> None:
        if not 0 < seed_fraction < 1:
            raise InvalidParameter("seed_fraction must be between 0 and 1 (exclusive)")
        if open_iterations <= 0 or dilate_iterations <= 0:
            raise InvalidParameter("Morphology iteration counts must be positive")

        self.seed_fraction = seed_fraction
        self.open_iterations = open_iterations
        self.dilate_iterations = dilate_iterations
        self.kernel = np.ones((3, 3), np.uint8)

    def _choose_foreground(self, bright: MaskArray, dark: MaskArray) -> MaskArray:
        # Background of the bright polarity is the dark mask and vice versa
        bright_fragments = _count_components(dark)
        dark_fragments = _count_components(bright)

        if bright_fragments != dark_fragments:
            chosen = bright if bright_fragments < dark_fragments else dark
        else:
            chosen = bright if np.count_nonzero(bright) <= np.count_nonzero(dark) else dark

        logger.debug(
            f"Watershed polarity: {'bright' if chosen is bright else 'dark'} foreground "
            f"(background fragments bright={bright_fragments}, dark={dark_fragments})"
        )
        return chosen

    def find_regions(self, grid: ImageArray) -> List[Region]:
        gray = _to_gray(grid)
        if _is_flat(gray):
            logger.debug("Watershed: flat image, no regions")
            return []

        _, bright, dark = _otsu_threshold(gray)
        foreground = self._choose_foreground(bright, dark)

        # Remove speckle, then grow to get a conservative background boundary
        opening = cv2.morphologyEx(foreground, cv2.MORPH_OPEN, self.kernel, iterations=self.open_iterations)
        sure_bg = cv2.dilate(opening, self.kernel, iterations=self.dilate_iterations)

        dist_transform = cv2.distanceTransform(opening, cv2.DIST_L2, 5)
        max_dist = float(dist_transform.max())
        if max_dist <= 0:
            logger.debug("Watershed: foreground vanished after opening")
            return []

        sure_fg = (dist_transform > self.seed_fraction * max_dist).astype(np.uint8) * 255
        unknown = cv2.subtract(sure_bg, sure_fg)

        num_seeds, markers = cv2.connectedComponents(sure_fg)
        # Background becomes label 1 so that 0 can mark the unknown zone
        markers = markers + 1
        markers[unknown == 255] = 0

        if grid.ndim == 2:
            flood_image = cv2.cvtColor(grid, cv2.COLOR_GRAY2BGR)
        else:
            flood_image = np.ascontiguousarray(grid)
        markers = cv2.watershed(flood_image, markers)

        regions: List[Region] = []
        for label in range(2, num_seeds + 1):
            basin = (markers == label).astype(np.uint8)
            if not np.any(basin):
                continue
            contours, _ = cv2.findContours(basin, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
            regions.extend(self._regions_from_contours(contours))

        logger.debug(f"Watershed: {num_seeds - 1} seeds, {len(regions)} regions")
        return regions

    def __repr__(self) -> str:
        return f"WatershedStrategy(seed_fraction={self.seed_fraction})"


class ConnectedComponentsStrategy(SegmentationStrategy):
    """Global-threshold connected-component extraction.

    Foreground is the Otsu class with the higher intensity variance, with the
    smaller class winning ties.
    """

    name = "components"

    def __init__(self, close_kernel_size: int = 2) -> None:
        if close_kernel_size <= 0:
            raise InvalidParameter("close_kernel_size must be positive")
        self.close_kernel_size = close_kernel_size
        self.kernel = np.ones((close_kernel_size, close_kernel_size), np.uint8)

    @staticmethod
    def _choose_foreground(gray: np.ndarray, bright: MaskArray, dark: MaskArray) -> MaskArray:
        bright_pixels = gray[bright > 0]
        dark_pixels = gray[dark > 0]
        bright_var = float(bright_pixels.var()) if bright_pixels.size else 0.0
        dark_var = float(dark_pixels.var()) if dark_pixels.size else 0.0

        if bright_var != dark_var:
            return bright if bright_var > dark_var else dark
        return bright if bright_pixels.size <= dark_pixels.size else dark

    def find_regions(self, grid: ImageArray) -> List[Region]:
        gray = _to_gray(grid)
        if _is_flat(gray):
            logger.debug("Components: flat image, no regions")
            return []

        _, bright, dark = _otsu_threshold(gray)
        foreground = self._choose_foreground(gray, bright, dark)

        # Bridge 1-2 pixel gaps, then drop isolated pixels
        mask = _morph_close(foreground, self.kernel)
        mask = _morph_open(mask, self.kernel)

        contours, _ = cv2.findContours(mask, cv2.RETR_LIST, cv2.CHAIN_APPROX_SIMPLE)
        regions = self._regions_from_contours(contours)

        logger.debug(f"Components: {len(regions)} regions")
        return regions

    def __repr__(self) -> str:
        return f"ConnectedComponentsStrategy(close_kernel_size={self.close_kernel_size})"


class AdaptiveThresholdStrategy(SegmentationStrategy):
    """Adaptive-threshold contour extraction over the whole contour tree."""

    name = "adaptive"

    def __init__(self, block_size: int = 11, offset: float = 2.0, blur_size: int = 5) -> None:
        if block_size < 3 or block_size % 2 == 0:
            raise InvalidParameter("block_size must be an odd integer >= 3")
        if blur_size <= 0 or blur_size % 2 == 0:
            raise InvalidParameter("blur_size must be a positive odd integer")
        self.block_size = block_size
        self.offset = offset
        self.blur_size = blur_size

    def find_regions(self, grid: ImageArray) -> List[Region]:
        gray = _to_gray(grid)
        if _is_flat(gray):
            logger.debug("Adaptive: flat image, no regions")
            return []

        blurred = cv2.GaussianBlur(gray, (self.blur_size, self.blur_size), 0)
        binary = cv2.adaptiveThreshold(
            blurred, 255, cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
            cv2.THRESH_BINARY_INV, self.block_size, self.offset
        )

        contours, _ = cv2.findContours(binary, cv2.RETR_TREE, cv2.CHAIN_APPROX_SIMPLE)
        regions = self._regions_from_contours(contours)

        logger.debug(f"Adaptive: {len(regions)} regions")
        return regions


STRATEGIES: Dict[str, Type[SegmentationStrategy]] = {
    WatershedStrategy.name: WatershedStrategy,
    ConnectedComponentsStrategy.name: ConnectedComponentsStrategy,
    AdaptiveThresholdStrategy.name: AdaptiveThresholdStrategy,
}


def create_strategy(name: str, seed_fraction: float = 0.4, close_kernel_size: int = 2) -> SegmentationStrategy:
    """Build a strategy by name with the tunables that apply to it.

    Raises:
        InvalidParameter: If the name is not a known strategy
    """
    if name == WatershedStrategy.name:
        return WatershedStrategy(seed_fraction=seed_fraction)
    if name == ConnectedComponentsStrategy.name:
        return ConnectedComponentsStrategy(close_kernel_size=close_kernel_size)
    if name == AdaptiveThresholdStrategy.name:
        return AdaptiveThresholdStrategy()
    raise InvalidParameter(
        f"Unknown segmentation strategy: {name} (expected one of {', '.join(STRATEGIES)})"
    )
