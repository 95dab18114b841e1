"""Pixel-format conversions between RGB, BGR, HSV and grayscale.

HSV follows the OpenCV 8-bit convention (H in [0, 180), S and V in
[0, 255]). Grayscale is lossy and only ever a conversion target.
"""

from enum import Enum
from typing import Dict, Tuple

import cv2
import numpy as np

from .errors import InvalidParameter, UnsupportedConversion
from .utils import ImageArray


class ColorSpace(str, Enum):
    RGB = "rgb"
    BGR = "bgr"
    HSV = "hsv"
    GRAY = "gray"


# Direct OpenCV conversion codes
_CONVERSION_CODES: Dict[Tuple[ColorSpace, ColorSpace], int] = {
    (ColorSpace.RGB, ColorSpace.BGR): cv2.COLOR_RGB2BGR,
    (ColorSpace.BGR, ColorSpace.RGB): cv2.COLOR_BGR2RGB,
    (ColorSpace.BGR, ColorSpace.HSV): cv2.COLOR_BGR2HSV,
    (ColorSpace.HSV, ColorSpace.BGR): cv2.COLOR_HSV2BGR,
    (ColorSpace.RGB, ColorSpace.HSV): cv2.COLOR_RGB2HSV,
    (ColorSpace.HSV, ColorSpace.RGB): cv2.COLOR_HSV2RGB,
    (ColorSpace.BGR, ColorSpace.GRAY): cv2.COLOR_BGR2GRAY,
    (ColorSpace.RGB, ColorSpace.GRAY): cv2.COLOR_RGB2GRAY,
}


def _check_shape(grid: ImageArray, space: ColorSpace) -> None:
    if not isinstance(grid, np.ndarray):
        raise InvalidParameter("Pixel grid must be a numpy array")
    if space == ColorSpace.GRAY:
        if grid.ndim != 2:
            raise InvalidParameter(f"Grayscale grid must be H×W, got shape {grid.shape}")
    elif grid.ndim != 3 or grid.shape[2] != 3:
        raise InvalidParameter(
            f"{space.name} grid must be H×W×3, got shape {grid.shape}"
        )


def convert(grid: ImageArray, from_space: ColorSpace, to_space: ColorSpace) -> ImageArray:
    """Convert a pixel grid between color spaces.

    The input grid is never modified; a new array is always returned, even
    when ``from_space`` equals ``to_space``.

    Args:
        grid: Pixel grid (H×W×3, or H×W for grayscale) of uint8
        from_space: Color space of ``grid``
        to_space: Desired color space

    Returns:
        Converted pixel grid

    Raises:
        UnsupportedConversion: If no transform exists between the two spaces
        InvalidParameter: If the grid shape does not match ``from_space``
    """
    from_space = ColorSpace(from_space)
    to_space = ColorSpace(to_space)
    _check_shape(grid, from_space)

    if from_space == to_space:
        return grid.copy()

    if from_space == ColorSpace.GRAY:
        raise UnsupportedConversion(
            f"Grayscale cannot be converted back to {to_space.name}"
        )

    if (from_space, to_space) == (ColorSpace.HSV, ColorSpace.GRAY):
        bgr = cv2.cvtColor(grid, cv2.COLOR_HSV2BGR)
        return cv2.cvtColor(bgr, cv2.COLOR_BGR2GRAY)

    code = _CONVERSION_CODES.get((from_space, to_space))
    if code is None:
        raise UnsupportedConversion(
            f"No conversion defined from {from_space.name} to {to_space.name}"
        )

    return cv2.cvtColor(grid, code)


def convert_color(color: Tuple[int, int, int], from_space: ColorSpace, to_space: ColorSpace) -> Tuple[int, int, int]:
    """Convert a single color tuple, using the same transforms as ``convert``."""
    if ColorSpace(to_space) == ColorSpace.GRAY:
        raise UnsupportedConversion("convert_color only produces three-channel colors")
    pixel = np.array([[color]], dtype=np.uint8)
    converted = convert(pixel, from_space, to_space)
    return tuple(int(c) for c in converted[0, 0])
