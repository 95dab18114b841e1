"""Tests for the denoising strategies."""

import numpy as np
import pytest
from skimage.metrics import peak_signal_noise_ratio

from huedini.denoise import DenoiseStrategy, denoise
from huedini.errors import InvalidParameter

from conftest import make_swatch_image


@pytest.fixture
def block_image():
    """High-contrast blocks: the bilateral filter should leave them alone."""
    return make_swatch_image(
        size=(80, 120),
        swatches=[
            ((10, 10, 30, 30), (255, 0, 0)),
            ((60, 10, 30, 30), (0, 0, 255)),
            ((10, 50, 100, 20), (0, 160, 0)),
        ],
    )


def test_bilateral_preserves_uniform_blocks(block_image):
    result = denoise(block_image, DenoiseStrategy.BILATERAL)

    assert result.shape == block_image.shape
    assert result.dtype == np.uint8
    # Block interiors are untouched
    assert np.array_equal(result[20:30, 20:30], block_image[20:30, 20:30])
    assert np.array_equal(result[0:5, :], block_image[0:5, :])


def test_bilateral_is_idempotent_on_denoised_image(block_image):
    once = denoise(block_image, DenoiseStrategy.BILATERAL, diameter=9, sigma_color=75, sigma_space=75)
    twice = denoise(once, DenoiseStrategy.BILATERAL, diameter=9, sigma_color=75, sigma_space=75)

    diff = np.abs(once.astype(np.int16) - twice.astype(np.int16))
    assert diff.max() <= 2


def test_bilateral_reduces_noise(block_image):
    """Test that bilateral filtering raises PSNR on a noisy block image."""
    rng = np.random.default_rng(7)
    noise = rng.normal(0, 10, size=block_image.shape)
    noisy = np.clip(block_image.astype(np.float64) + noise, 0, 255).astype(np.uint8)

    result = denoise(noisy, DenoiseStrategy.BILATERAL)

    psnr_noisy = peak_signal_noise_ratio(block_image, noisy, data_range=255)
    psnr_denoised = peak_signal_noise_ratio(block_image, result, data_range=255)
    assert psnr_denoised > psnr_noisy


def test_gaussian_fallback_blurs_edges(block_image):
    result = denoise(block_image, DenoiseStrategy.GAUSSIAN, kernel_size=5)

    assert result.shape == block_image.shape
    # Edge pixels get mixed with the white background
    assert not np.array_equal(result[10, 10:40], block_image[10, 10:40])


def test_denoise_leaves_input_unchanged(block_image):
    original = block_image.copy()
    denoise(block_image, "bilateral")
    denoise(block_image, "gaussian")
    assert np.array_equal(block_image, original)


def test_invalid_parameters(block_image):
    with pytest.raises(InvalidParameter, match="diameter must be positive"):
        denoise(block_image, DenoiseStrategy.BILATERAL, diameter=0)
    with pytest.raises(InvalidParameter, match="sigma_color and sigma_space must be positive"):
        denoise(block_image, DenoiseStrategy.BILATERAL, sigma_color=-1)
    with pytest.raises(InvalidParameter, match="sigma_color and sigma_space must be positive"):
        denoise(block_image, DenoiseStrategy.BILATERAL, sigma_space=0)
    with pytest.raises(InvalidParameter, match="positive odd integer"):
        denoise(block_image, DenoiseStrategy.GAUSSIAN, kernel_size=4)
    with pytest.raises(InvalidParameter, match="Unknown denoise strategy"):
        denoise(block_image, "median")
    with pytest.raises(InvalidParameter, match="uint8"):
        denoise(block_image.astype(np.float32), DenoiseStrategy.BILATERAL)
