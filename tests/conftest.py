"""Common test fixtures."""

from typing import Iterable, Tuple

import numpy as np
import pytest

RED = (255, 0, 0)
BLUE = (0, 0, 255)
WHITE = (255, 255, 255)

# (x, y, width, height) of the two swatches in the reference image
RED_BOX = (10, 10, 30, 30)
BLUE_BOX = (60, 10, 30, 30)


def make_swatch_image(
    size: Tuple[int, int] = (200, 200),
    swatches: Iterable[Tuple[Tuple[int, int, int, int], Tuple[int, int, int]]] = (),
    background: Tuple[int, int, int] = WHITE,
) -> np.ndarray:
    """Create an RGB image with filled rectangles.

    Args:
        size: Image size (height, width)
        swatches: Pairs of ((x, y, width, height), rgb color)
        background: Background RGB color

    Returns:
        H×W×3 uint8 RGB array
    """
    image = np.empty((*size, 3), dtype=np.uint8)
    image[:] = background
    for (x, y, w, h), color in swatches:
        image[y:y + h, x:x + w] = color
    return image


def boxes_close(actual, expected, tolerance: int = 2) -> bool:
    return all(abs(a - e) <= tolerance for a, e in zip(actual, expected))


def colors_close(actual, expected, tolerance: int = 3) -> bool:
    return all(abs(a - e) <= tolerance for a, e in zip(actual, expected))


@pytest.fixture
def two_swatch_rgb() -> np.ndarray:
    """200×200 white image with a red and a blue 30×30 square."""
    return make_swatch_image(swatches=[(RED_BOX, RED), (BLUE_BOX, BLUE)])


@pytest.fixture
def two_swatch_bgr(two_swatch_rgb) -> np.ndarray:
    return np.ascontiguousarray(two_swatch_rgb[:, :, ::-1])


@pytest.fixture
def uniform_rgb() -> np.ndarray:
    return make_swatch_image(background=(90, 140, 200))


@pytest.fixture
def random_rgb() -> np.ndarray:
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(40, 50, 3), dtype=np.uint8)
