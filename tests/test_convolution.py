"""Test fixed-kernel convolution.

Tests for wb2svg.data_pipeline.convolution:
    - Gaussian blur keeps dimensions and forces alpha to 255
    - Black border fill darkens edges of a white image
    - Uniform black stays black
    - Kernel tables are read-only
    - Hand-computed scalar results with fill values
    - Sobel magnitude normalization

Run:
    pytest tests/test_convolution.py -v
"""

import numpy as np
import pytest

from wb2svg.data_pipeline import convolution
from wb2svg.data_pipeline.buffers import (
    RGBA,
    DimensionMismatchError,
    PixelBuffer,
    ScalarField,
)


WHITE = RGBA(255, 255, 255)
BLACK = RGBA(0, 0, 0)


# ============================================================================
# KERNEL TABLES
# ============================================================================

def test_gaussian_weights_sum_to_normalization():
    assert convolution.GAUSSIAN_5X5.shape == (5, 5)
    assert float(convolution.GAUSSIAN_5X5.sum()) == convolution.GAUSSIAN_NORMALIZATION


def test_kernels_are_read_only():
    for kernel in (convolution.GAUSSIAN_5X5, convolution.SOBEL_X, convolution.SOBEL_Y):
        with pytest.raises(ValueError):
            kernel[0, 0] = 99.0


def test_rejects_even_kernel():
    with pytest.raises(ValueError):
        convolution.convolve_array(np.zeros((3, 3)), np.ones((2, 2)), 1.0, 0.0)


# ============================================================================
# GAUSSIAN BLUR
# ============================================================================

class TestGaussianBlur:
    """5×5 smoothing with opaque black outside the image."""

    def test_preserves_dimensions(self):
        img = PixelBuffer.filled(7, 4, WHITE)
        out = convolution.gaussian_blur(img)
        assert (out.width, out.height) == (7, 4)

    def test_source_untouched(self):
        img = PixelBuffer.filled(6, 6, WHITE)
        convolution.gaussian_blur(img)
        assert (img.pixels == 255).all()

    def test_uniform_black_stays_black(self):
        img = PixelBuffer.filled(3, 3, BLACK)
        out = convolution.gaussian_blur(img)
        assert not out.pixels[..., :3].any()
        assert (out.pixels[..., 3] == 255).all()

    def test_white_interior_stays_white(self):
        img = PixelBuffer.filled(9, 9, WHITE)
        out = convolution.gaussian_blur(img)
        # At least 2 px from every border the full kernel sees white
        assert (out.pixels[2:-2, 2:-2, :3] == 255).all()

    def test_black_fill_darkens_corner(self):
        img = PixelBuffer.filled(9, 9, WHITE)
        out = convolution.gaussian_blur(img)
        # Corner sees the lower-right 3x3 of the kernel: 15+12+5+12+9+4+5+4+2 = 68
        expected = int(np.floor(np.float32(68 * 255) / np.float32(159)))
        assert out.at(0, 0) == RGBA(expected, expected, expected, 255)

    def test_alpha_forced_opaque(self):
        pixels = np.zeros((3, 3, 4), dtype=np.uint8)
        out = convolution.gaussian_blur(PixelBuffer(pixels))
        assert (out.pixels[..., 3] == 255).all()

    def test_in_place_output(self):
        img = PixelBuffer.filled(5, 5, WHITE)
        expected = convolution.gaussian_blur(img).pixels.copy()
        result = convolution.gaussian_blur(img, out=img)
        assert result is img
        np.testing.assert_array_equal(img.pixels, expected)

    def test_out_dimension_mismatch(self):
        img = PixelBuffer.alloc(4, 4)
        with pytest.raises(DimensionMismatchError):
            convolution.gaussian_blur(img, out=PixelBuffer.alloc(4, 5))


# ============================================================================
# SCALAR FIELDS
# ============================================================================

def test_scalar_field_uses_fill():
    field = ScalarField(np.zeros((1, 1)))
    kernel = np.ones((3, 3), dtype=np.float32)
    out = convolution.convolve(field, kernel, 1.0, 2.0)
    # Eight out-of-bounds neighbors at 2.0, center 0
    assert out.at(0, 0) == pytest.approx(16.0)


def test_scalar_field_normalization():
    field = ScalarField(np.full((3, 3), 3.0))
    kernel = np.ones((3, 3), dtype=np.float32)
    out = convolution.convolve(field, kernel, 9.0, 3.0)
    np.testing.assert_allclose(out.values, 3.0)


def test_convolve_rejects_unknown_source():
    with pytest.raises(TypeError):
        convolution.convolve(np.zeros((3, 3)), convolution.SOBEL_X, 1.0, 0.0)


def test_sobel_magnitude_range():
    values = np.zeros((8, 8), dtype=np.float32)
    values[:, 4:] = 1.0
    grad = convolution.sobel_magnitude(ScalarField(values))
    assert grad.values.shape == (8, 8)
    assert grad.values.min() >= 0.0
    assert grad.values.max() == pytest.approx(1.0)
    # Vertical step edge between columns 3 and 4
    assert grad.at(4, 3) > 0.0
    assert grad.at(4, 1) == 0.0


def test_sobel_magnitude_of_zero_field():
    grad = convolution.sobel_magnitude(ScalarField.alloc(4, 4))
    assert not grad.values.any()
