"""Geometric filtering of candidate regions.

Legend swatches are small and roughly square or round, so a candidate is
kept only when its polygon area and bounding-box aspect ratio both fall in
configured ranges.
"""

from typing import Iterable, List

from .errors import InvalidParameter
from .segmentation import Region
from .utils import setup_logger

logger = setup_logger(__name__)


def validate_bounds(min_area: float, max_area: float, min_aspect: float, max_aspect: float) -> None:
    """Raise InvalidParameter unless the bounds describe non-empty ranges."""
    if min_area < 0 or max_area < 0:
        raise InvalidParameter("Region area bounds must be non-negative")
    if min_area > max_area:
        raise InvalidParameter(f"min_region_area ({min_area}) exceeds max_region_area ({max_area})")
    if min_aspect <= 0 or max_aspect <= 0:
        raise InvalidParameter("Aspect ratio bounds must be positive")
    if min_aspect > max_aspect:
        raise InvalidParameter(f"min_aspect_ratio ({min_aspect}) exceeds max_aspect_ratio ({max_aspect})")


def filter_candidates(
    regions: Iterable[Region],
    min_area: float = 100,
    max_area: float = 2000,
    min_aspect: float = 0.7,
    max_aspect: float = 1.3,
) -> List[Region]:
    """Keep the regions whose size and shape could be a legend swatch.

    Args:
        regions: Candidate regions, in order
        min_area: Smallest accepted polygon area (inclusive)
        max_area: Largest accepted polygon area (inclusive)
        min_aspect: Smallest accepted bounding-box width/height (inclusive)
        max_aspect: Largest accepted bounding-box width/height (inclusive)

    Returns:
        The accepted regions, in input order
    """
    validate_bounds(min_area, max_area, min_aspect, max_aspect)

    kept = []
    total = 0
    for region in regions:
        total += 1
        if not min_area <= region.area <= max_area:
            continue
        if min_aspect <= region.aspect_ratio <= max_aspect:
            kept.append(region)

    logger.debug(f"Candidate filter kept {len(kept)}/{total} regions")
    return kept


class CandidateFilter:
    """Candidate filter with its bounds bound from configuration."""

    def __init__(
        self,
        min_area: float = 100,
        max_area: float = 2000,
        min_aspect: float = 0.7,
        max_aspect: float = 1.3,
    ) -> None:
        validate_bounds(min_area, max_area, min_aspect, max_aspect)
        self.min_area = min_area
        self.max_area = max_area
        self.min_aspect = min_aspect
        self.max_aspect = max_aspect

    @classmethod
    def from_config(cls, config) -> "CandidateFilter":
        return cls(
            min_area=config.min_region_area,
            max_area=config.max_region_area,
            min_aspect=config.min_aspect_ratio,
            max_aspect=config.max_aspect_ratio,
        )

    def __call__(self, regions: Iterable[Region]) -> List[Region]:
        return filter_candidates(regions, self.min_area, self.max_area, self.min_aspect, self.max_aspect)
