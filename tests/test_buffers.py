"""Test PixelBuffer / ScalarField containers.

Tests for wb2svg.data_pipeline.buffers:
    - Allocation is zero-filled with the requested dimensions
    - Bounds predicate
    - Release semantics (use after release raises, double release is a no-op)
    - Dimension checks between buffers
    - ScalarField → grayscale rendering

Run:
    pytest tests/test_buffers.py -v
"""

import numpy as np
import pytest

from wb2svg.data_pipeline.buffers import (
    RGBA,
    BufferReleasedError,
    DimensionMismatchError,
    PixelBuffer,
    ScalarField,
    check_dimensions,
)


class TestPixelBuffer:
    """Allocation, access and ownership of RGBA buffers."""

    def test_alloc_zero_filled(self):
        buf = PixelBuffer.alloc(5, 3)
        assert buf.width == 5
        assert buf.height == 3
        assert buf.pixels.shape == (3, 5, 4)
        assert buf.pixels.dtype == np.uint8
        assert not buf.pixels.any()

    def test_alloc_rejects_empty(self):
        with pytest.raises(ValueError):
            PixelBuffer.alloc(0, 4)

    def test_rejects_wrong_shape_and_dtype(self):
        with pytest.raises(ValueError):
            PixelBuffer(np.zeros((2, 2, 3), dtype=np.uint8))
        with pytest.raises(ValueError):
            PixelBuffer(np.zeros((2, 2, 4), dtype=np.float32))

    def test_at_and_set_use_row_col(self):
        buf = PixelBuffer.filled(4, 2, RGBA(255, 255, 255))
        buf.set(1, 3, RGBA(1, 2, 3, 4))
        assert buf.at(1, 3) == RGBA(1, 2, 3, 4)
        assert buf.at(0, 0) == RGBA(255, 255, 255, 255)
        assert tuple(buf.pixels[1, 3]) == (1, 2, 3, 4)

    def test_within(self):
        buf = PixelBuffer.alloc(4, 2)
        assert buf.within(0, 0)
        assert buf.within(1, 3)
        assert not buf.within(2, 0)
        assert not buf.within(0, 4)
        assert not buf.within(-1, 0)
        assert not buf.within(0, -1)

    def test_copy_is_independent(self):
        buf = PixelBuffer.alloc(2, 2)
        dup = buf.copy()
        dup.set(0, 0, RGBA(9, 9, 9))
        assert buf.at(0, 0) == RGBA(0, 0, 0, 0)


class TestRelease:
    """Single-owner release semantics."""

    def test_access_after_release_raises(self):
        buf = PixelBuffer.alloc(2, 2)
        buf.release()
        assert buf.released
        with pytest.raises(BufferReleasedError):
            _ = buf.pixels
        with pytest.raises(BufferReleasedError):
            buf.at(0, 0)

    def test_double_release_is_noop(self):
        field = ScalarField.alloc(2, 2)
        field.release()
        field.release()
        assert field.released
        assert "released" in repr(field)


class TestScalarField:
    """Float fields used as thinning markers and gradient maps."""

    def test_alloc_zero_initialized(self):
        field = ScalarField.alloc(3, 2)
        assert field.values.shape == (2, 3)
        assert field.values.dtype == np.float32
        assert field.at(1, 2) == 0.0

    def test_clear(self):
        field = ScalarField(np.ones((2, 2)))
        field.clear()
        assert not field.values.any()

    def test_to_pixel_buffer_grayscale(self):
        field = ScalarField(np.array([[0.0, 1.0], [0.5, 2.0]]))
        img = field.to_pixel_buffer()
        assert img.at(0, 0) == RGBA(0, 0, 0, 255)
        assert img.at(0, 1) == RGBA(255, 255, 255, 255)
        assert img.at(1, 0) == RGBA(127, 127, 127, 255)
        # Clipped to 1.0
        assert img.at(1, 1) == RGBA(255, 255, 255, 255)


def test_check_dimensions():
    check_dimensions(PixelBuffer.alloc(3, 2), ScalarField.alloc(3, 2))
    with pytest.raises(DimensionMismatchError):
        check_dimensions(PixelBuffer.alloc(3, 2), PixelBuffer.alloc(2, 3))


def test_dimension_mismatch_is_runtime_error():
    assert issubclass(DimensionMismatchError, RuntimeError)
    assert issubclass(BufferReleasedError, RuntimeError)
