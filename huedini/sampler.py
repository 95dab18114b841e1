"""Mean-color sampling for candidate regions.

The sampled area is the region's full bounding rectangle, not just the
pixels inside its polygon. Rectangles reaching past the grid edge are
clamped to the grid.
"""

from typing import Union

import numpy as np

from .errors import InvalidRegion
from .segmentation import Region
from .utils import BBox, Color, ImageArray, clamp_bbox_to_image


def sample_color(grid: ImageArray, region: Union[Region, BBox]) -> Color:
    """Return the per-channel mean color over a region's bounding rectangle.

    The mean is computed in the grid's own color space and rounded to the
    nearest integer.

    Args:
        grid: H×W×3 uint8 pixel grid
        region: Region, or a bounding box as (x, y, width, height)

    Returns:
        Mean color as a 3-tuple of ints in the grid's channel order

    Raises:
        InvalidRegion: If the rectangle has zero area, before or after clamping
    """
    bbox = region.bounding_box if isinstance(region, Region) else BBox(*region)
    if bbox.width <= 0 or bbox.height <= 0:
        raise InvalidRegion(f"Bounding rectangle {tuple(bbox)} has zero area")

    x, y, w, h = clamp_bbox_to_image(bbox, grid.shape[:2])
    if w == 0 or h == 0:
        raise InvalidRegion(f"Bounding rectangle {tuple(bbox)} lies outside the {grid.shape[1]}×{grid.shape[0]} grid")

    patch = grid[y:y + h, x:x + w].reshape(-1, grid.shape[2])
    mean = patch.mean(axis=0, dtype=np.float64)
    return tuple(int(round(c)) for c in mean)
