"""Tests for pipeline configuration loading and validation."""

import pytest

from huedini.config import DetectorConfig, load_config
from huedini.errors import InvalidParameter


def test_defaults():
    config = DetectorConfig()

    assert config.quantization_clusters == 3
    assert config.denoise_strategy == "bilateral"
    assert config.denoise_diameter == 9
    assert config.min_region_area == 100
    assert config.max_region_area == 2000
    assert config.min_aspect_ratio == pytest.approx(0.7)
    assert config.max_aspect_ratio == pytest.approx(1.3)
    assert config.segmentation_strategies == ["watershed", "components"]
    assert config.parallel_segmentation is False
    assert config.random_seed is None


def test_default_strategy_lists_are_independent():
    first = DetectorConfig()
    first.segmentation_strategies.append("adaptive")
    assert DetectorConfig().segmentation_strategies == ["watershed", "components"]


@pytest.mark.parametrize("kwargs, message", [
    ({"quantization_clusters": 0}, "at least 1"),
    ({"quantization_clusters": 2.5}, "must be an integer"),
    ({"quantization_epsilon": 0}, "quantization_epsilon"),
    ({"quantization_attempts": 0}, "quantization_attempts"),
    ({"denoise_strategy": "median"}, "Unknown denoise_strategy"),
    ({"denoise_diameter": 0}, "denoise_diameter"),
    ({"denoise_color_radius": -1.0}, "radii"),
    ({"denoise_kernel_size": 4}, "denoise_kernel_size"),
    ({"min_region_area": 3000}, "exceeds max_region_area"),
    ({"min_aspect_ratio": 0}, "positive"),
    ({"min_aspect_ratio": 1.5, "max_aspect_ratio": 1.2}, "exceeds max_aspect_ratio"),
    ({"watershed_seed_fraction": 1.0}, "watershed_seed_fraction"),
    ({"close_kernel_size": 0}, "close_kernel_size"),
    ({"segmentation_strategies": []}, "At least one"),
    ({"segmentation_strategies": ["watershed", "grabcut"]}, "grabcut"),
])
def test_invalid_values(kwargs, message):
    with pytest.raises(InvalidParameter, match=message):
        DetectorConfig(**kwargs)


def test_load_config_without_sources():
    assert load_config() == DetectorConfig()


def test_load_config_from_yaml(tmp_path):
    path = tmp_path / "legend.yaml"
    path.write_text(
        "quantization_clusters: 5\n"
        "min_region_area: 50\n"
        "segmentation_strategies:\n"
        "  - components\n"
        "  - adaptive\n"
    )

    config = load_config(path)

    assert isinstance(config, DetectorConfig)
    assert config.quantization_clusters == 5
    assert config.min_region_area == 50
    assert config.segmentation_strategies == ["components", "adaptive"]
    # Untouched keys keep their defaults
    assert config.max_region_area == 2000


def test_overrides_win_over_file(tmp_path):
    """Test layering: defaults, then the YAML file, then key=value overrides."""
    path = tmp_path / "legend.yaml"
    path.write_text("quantization_clusters: 5\nrandom_seed: 3\n")

    config = load_config(path, ["quantization_clusters=4", "segmentation_strategies=[components]"])

    assert config.quantization_clusters == 4
    assert config.random_seed == 3
    assert config.segmentation_strategies == ["components"]


def test_override_booleans_and_floats():
    config = load_config(overrides=["parallel_segmentation=true", "max_aspect_ratio=1.5"])

    assert config.parallel_segmentation is True
    assert config.max_aspect_ratio == pytest.approx(1.5)


@pytest.mark.parametrize("overrides", [
    ["no_such_setting=1"],
    ["quantization_clusters=many"],
    ["parallel_segmentation=sometimes"],
])
def test_bad_overrides(overrides):
    with pytest.raises(InvalidParameter):
        load_config(overrides=overrides)


def test_validation_runs_on_loaded_values():
    with pytest.raises(InvalidParameter, match="exceeds max_region_area"):
        load_config(overrides=["min_region_area=5000"])


def test_missing_config_file(tmp_path):
    with pytest.raises(InvalidParameter, match="not found"):
        load_config(tmp_path / "missing.yaml")
