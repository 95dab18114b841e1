"""Color quantization by k-means clustering.

Every pixel is treated as a point in 3-D color space. Clusters are refined
with Lloyd iterations (``cv2.kmeans``) from k-means++ seeds, restarting a
few times and keeping the most compact result, and each pixel is then
replaced with its cluster centroid.
"""

from typing import NamedTuple, Optional

import cv2
import numpy as np

from .errors import InvalidParameter
from .utils import ImageArray, setup_logger

logger = setup_logger(__name__)


class QuantizationResult(NamedTuple):
    grid: ImageArray          # H×W×3 uint8, every pixel set to its centroid
    labels: np.ndarray        # H×W int32 cluster assignment
    centers: np.ndarray       # k×3 uint8 centroid colors


def count_distinct_colors(grid: ImageArray) -> int:
    """Return the number of distinct pixel values in an H×W×3 grid."""
    pixels = grid.reshape(-1, grid.shape[-1])
    # Pack channels into one integer per pixel so np.unique stays one-dimensional
    packed = (pixels[:, 0].astype(np.uint32) << 16) | (pixels[:, 1].astype(np.uint32) << 8) | pixels[:, 2]
    return int(np.unique(packed).size)


def quantize(
    grid: ImageArray,
    k: int,
    epsilon: float = 1.0,
    max_iterations: int = 20,
    attempts: int = 3,
    seed: Optional[int] = None,
) -> QuantizationResult:
    """Collapse a grid's palette to ``k`` dominant colors.

    Args:
        grid: H×W×3 uint8 pixel grid
        k: Number of clusters, at least 1 and at most the number of distinct colors
        epsilon: Stop once centroids move less than this many intensity units
        max_iterations: Upper bound on Lloyd iterations per attempt
        attempts: Independent restarts; the lowest-distortion one is kept
        seed: Optional seed for OpenCV's random generator

    Returns:
        QuantizationResult with the quantized grid, labels and centroids

    Raises:
        InvalidParameter: On k <= 0, k above the distinct color count, or
            non-positive termination settings
    """
    if not isinstance(grid, np.ndarray) or grid.ndim != 3 or grid.shape[2] != 3:
        raise InvalidParameter("Quantization expects an H×W×3 pixel grid")
    if not isinstance(k, (int, np.integer)) or k <= 0:
        raise InvalidParameter(f"k must be a positive integer, got {k}")
    if epsilon <= 0:
        raise InvalidParameter("epsilon must be positive")
    if max_iterations <= 0:
        raise InvalidParameter("max_iterations must be positive")
    if attempts <= 0:
        raise InvalidParameter("attempts must be positive")

    distinct = count_distinct_colors(grid)
    if k > distinct:
        raise InvalidParameter(f"k={k} exceeds the {distinct} distinct colors in the image")

    if seed is not None:
        cv2.setRNGSeed(int(seed))

    h, w = grid.shape[:2]
    pixels = grid.reshape(-1, 3).astype(np.float32)

    if k == 1:
        # One cluster is the mean; cv2.kmeans also misreads a single 1×3 sample
        centers = pixels.mean(axis=0, keepdims=True)
        labels = np.zeros((pixels.shape[0], 1), dtype=np.int32)
        compactness = float(((pixels - centers) ** 2).sum())
    else:
        criteria = (cv2.TERM_CRITERIA_EPS + cv2.TERM_CRITERIA_MAX_ITER, max_iterations, epsilon)
        compactness, labels, centers = cv2.kmeans(
            pixels, int(k), None, criteria, attempts, cv2.KMEANS_PP_CENTERS
        )

    centers = np.clip(np.rint(centers), 0, 255).astype(np.uint8)
    labels = labels.flatten()
    quantized = centers[labels].reshape(h, w, 3)

    logger.debug(f"Quantized {distinct} colors to k={k} (compactness {compactness:.1f})")
    return QuantizationResult(quantized, labels.reshape(h, w).astype(np.int32), centers)
