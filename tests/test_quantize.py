"""Tests for k-means color quantization."""

import numpy as np
import pytest

from huedini.errors import InvalidParameter
from huedini.quantize import count_distinct_colors, quantize

from conftest import make_swatch_image


def _distinct(grid):
    return {tuple(p) for p in grid.reshape(-1, 3)}


def test_k1_gives_mean_color(random_rgb):
    result = quantize(random_rgb, 1, seed=0)

    expected = np.rint(random_rgb.reshape(-1, 3).astype(np.float64).mean(axis=0))
    colors = _distinct(result.grid)

    assert len(colors) == 1
    assert np.all(np.abs(np.array(colors.pop()) - expected) <= 1)
    assert np.all(result.labels == 0)


def test_single_pixel_grid():
    """Test that a 1×1 grid quantizes to itself with k=1."""
    grid = np.array([[[10, 20, 30]]], dtype=np.uint8)

    result = quantize(grid, 1)

    assert np.array_equal(result.grid, grid)
    assert result.labels.shape == (1, 1)
    assert result.labels[0, 0] == 0
    assert result.centers.tolist() == [[10, 20, 30]]


def test_single_row_grid_with_several_clusters():
    grid = np.array([[[0, 0, 0], [0, 0, 0], [250, 250, 250]]], dtype=np.uint8)

    result = quantize(grid, 2, seed=0)

    assert np.array_equal(result.grid, grid)
    assert result.labels.shape == (1, 3)


@pytest.mark.parametrize("k", [2, 3, 5])
def test_at_most_k_colors(random_rgb, k):
    result = quantize(random_rgb, k, seed=3)

    assert result.grid.shape == random_rgb.shape
    assert result.grid.dtype == np.uint8
    assert len(_distinct(result.grid)) <= k
    assert result.labels.shape == random_rgb.shape[:2]
    assert result.centers.shape == (k, 3)


def test_three_color_image_is_reproduced_exactly(two_swatch_rgb):
    result = quantize(two_swatch_rgb, 3, seed=0)

    assert np.array_equal(result.grid, two_swatch_rgb)
    # Each swatch is a single cluster
    assert len(np.unique(result.labels[10:40, 10:40])) == 1
    assert len(np.unique(result.labels)) == 3


def test_pixels_map_to_their_cluster_center(random_rgb):
    result = quantize(random_rgb, 4, seed=5)
    assert np.array_equal(result.grid, result.centers[result.labels])


def test_seed_makes_runs_reproducible(random_rgb):
    first = quantize(random_rgb, 3, seed=42)
    second = quantize(random_rgb, 3, seed=42)
    assert np.array_equal(first.grid, second.grid)


def test_input_is_not_modified(random_rgb):
    original = random_rgb.copy()
    quantize(random_rgb, 3, seed=1)
    assert np.array_equal(random_rgb, original)


def test_count_distinct_colors(two_swatch_rgb, uniform_rgb):
    assert count_distinct_colors(two_swatch_rgb) == 3
    assert count_distinct_colors(uniform_rgb) == 1


def test_invalid_k(two_swatch_rgb):
    with pytest.raises(InvalidParameter, match="positive integer"):
        quantize(two_swatch_rgb, 0)
    with pytest.raises(InvalidParameter, match="positive integer"):
        quantize(two_swatch_rgb, -2)
    with pytest.raises(InvalidParameter, match="exceeds the 3 distinct colors"):
        quantize(two_swatch_rgb, 4)

    two_colors = make_swatch_image(size=(20, 20), swatches=[((0, 0, 10, 20), (0, 0, 0))])
    with pytest.raises(InvalidParameter, match="exceeds the 2 distinct colors"):
        quantize(two_colors, 3)


def test_invalid_termination_settings(random_rgb):
    with pytest.raises(InvalidParameter, match="epsilon"):
        quantize(random_rgb, 2, epsilon=0)
    with pytest.raises(InvalidParameter, match="max_iterations"):
        quantize(random_rgb, 2, max_iterations=0)
    with pytest.raises(InvalidParameter, match="attempts"):
        quantize(random_rgb, 2, attempts=0)
    with pytest.raises(InvalidParameter, match="H×W×3"):
        quantize(random_rgb[:, :, 0], 2)
