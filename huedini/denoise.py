"""Noise suppression applied before color quantization.

Two interchangeable strategies are provided:
- Bilateral filtering, which smooths compression noise while keeping swatch
  edges sharp. This is the default.
- Gaussian blur with a fixed kernel. Faster, but it blurs edges, so it is
  only meant as a fallback.
"""

from enum import Enum

import cv2
import numpy as np

from .errors import InvalidParameter
from .utils import ImageArray, setup_logger

logger = setup_logger(__name__)


class DenoiseStrategy(str, Enum):
    GAUSSIAN = "gaussian"
    BILATERAL = "bilateral"


def denoise(
    grid: ImageArray,
    strategy: DenoiseStrategy = DenoiseStrategy.BILATERAL,
    diameter: int = 9,
    sigma_color: float = 75.0,
    sigma_space: float = 75.0,
    kernel_size: int = 5,
) -> ImageArray:
    """Smooth a pixel grid with the chosen strategy.

    Args:
        grid: H×W×3 (or H×W) uint8 pixel grid in any color space
        strategy: Which smoothing to apply
        diameter: Pixel neighbourhood diameter for bilateral filtering
        sigma_color: Color-similarity radius for bilateral filtering
        sigma_space: Spatial radius for bilateral filtering
        kernel_size: Odd kernel size for Gaussian blur

    Returns:
        New smoothed grid with the same shape and dtype

    Raises:
        InvalidParameter: If a radius is non-positive or the kernel size is even
    """
    try:
        strategy = DenoiseStrategy(strategy)
    except ValueError as e:
        raise InvalidParameter(f"Unknown denoise strategy: {strategy}") from e

    if not isinstance(grid, np.ndarray) or grid.dtype != np.uint8:
        raise InvalidParameter("Pixel grid must be a uint8 numpy array")

    if strategy == DenoiseStrategy.BILATERAL:
        if diameter <= 0:
            raise InvalidParameter("diameter must be positive")
        if sigma_color <= 0 or sigma_space <= 0:
            raise InvalidParameter("sigma_color and sigma_space must be positive")

        logger.debug(f"Bilateral filter d={diameter}, sigmaColor={sigma_color}, sigmaSpace={sigma_space}")
        return cv2.bilateralFilter(grid, d=diameter, sigmaColor=sigma_color, sigmaSpace=sigma_space)

    if kernel_size <= 0 or kernel_size % 2 == 0:
        raise InvalidParameter("kernel_size must be a positive odd integer")

    logger.debug(f"Gaussian blur {kernel_size}x{kernel_size}")
    return cv2.GaussianBlur(grid, (kernel_size, kernel_size), 0)
