"""Pipeline configuration.

``DetectorConfig`` carries every tunable of the detection pipeline with
defaults that make it runnable unconfigured. Values are validated when the
config is built. ``load_config`` layers a YAML file and ``key=value``
overrides on top of the defaults using OmegaConf structured configs.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Union

from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException

from .candidate_filter import validate_bounds
from .denoise import DenoiseStrategy
from .errors import InvalidParameter
from .segmentation import STRATEGIES


@dataclass
class DetectorConfig:
    # Color quantization
    quantization_clusters: int = 3
    quantization_epsilon: float = 1.0
    quantization_max_iterations: int = 20
    quantization_attempts: int = 3
    random_seed: Optional[int] = None

    # Denoising
    denoise_strategy: str = "bilateral"
    denoise_diameter: int = 9
    denoise_spatial_radius: float = 75.0
    denoise_color_radius: float = 75.0
    denoise_kernel_size: int = 5

    # Candidate filter
    min_region_area: float = 100
    max_region_area: float = 2000
    min_aspect_ratio: float = 0.7
    max_aspect_ratio: float = 1.3

    # Segmentation
    watershed_seed_fraction: float = 0.4
    close_kernel_size: int = 2
    segmentation_strategies: List[str] = field(default_factory=lambda: ["watershed", "components"])
    parallel_segmentation: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.quantization_clusters, bool) or not isinstance(self.quantization_clusters, int):
            raise InvalidParameter("quantization_clusters must be an integer")
        if self.quantization_clusters < 1:
            raise InvalidParameter("quantization_clusters must be at least 1")
        if self.quantization_epsilon <= 0:
            raise InvalidParameter("quantization_epsilon must be positive")
        if self.quantization_max_iterations <= 0:
            raise InvalidParameter("quantization_max_iterations must be positive")
        if self.quantization_attempts <= 0:
            raise InvalidParameter("quantization_attempts must be positive")

        try:
            DenoiseStrategy(self.denoise_strategy)
        except ValueError as e:
            raise InvalidParameter(f"Unknown denoise_strategy: {self.denoise_strategy}") from e
        if self.denoise_diameter <= 0:
            raise InvalidParameter("denoise_diameter must be positive")
        if self.denoise_spatial_radius <= 0 or self.denoise_color_radius <= 0:
            raise InvalidParameter("Denoise radii must be positive")
        if self.denoise_kernel_size <= 0 or self.denoise_kernel_size % 2 == 0:
            raise InvalidParameter("denoise_kernel_size must be a positive odd integer")

        validate_bounds(self.min_region_area, self.max_region_area,
                        self.min_aspect_ratio, self.max_aspect_ratio)

        if not 0 < self.watershed_seed_fraction < 1:
            raise InvalidParameter("watershed_seed_fraction must be between 0 and 1 (exclusive)")
        if self.close_kernel_size <= 0:
            raise InvalidParameter("close_kernel_size must be positive")

        self.segmentation_strategies = list(self.segmentation_strategies)
        if not self.segmentation_strategies:
            raise InvalidParameter("At least one segmentation strategy is required")
        unknown = [s for s in self.segmentation_strategies if s not in STRATEGIES]
        if unknown:
            raise InvalidParameter(f"Unknown segmentation strategies: {', '.join(unknown)}")


def load_config(
    path: Optional[Union[str, Path]] = None,
    overrides: Sequence[str] = (),
) -> DetectorConfig:
    """Build a DetectorConfig from defaults, an optional YAML file and overrides.

    Args:
        path: Optional YAML file whose keys are DetectorConfig fields
        overrides: ``key=value`` strings applied last (e.g. ``min_region_area=50``)

    Returns:
        Validated DetectorConfig

    Raises:
        InvalidParameter: On unknown keys, ill-typed values, a missing file
            or values failing validation
    """
    try:
        layers = [OmegaConf.structured(DetectorConfig)]
        if path is not None:
            layers.append(OmegaConf.load(str(path)))
        if overrides:
            layers.append(OmegaConf.from_dotlist(list(overrides)))
        merged = OmegaConf.merge(*layers)
        return OmegaConf.to_object(merged)
    except FileNotFoundError as e:
        raise InvalidParameter(f"Config file not found: {path}") from e
    except OmegaConfBaseException as e:
        raise InvalidParameter(f"Invalid configuration: {e}") from e
