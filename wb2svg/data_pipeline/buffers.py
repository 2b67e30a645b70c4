"""Dense 2-D containers shared by every pipeline stage.

Types:
    - RGBA: one 8-bit pixel
    - PixelBuffer: (H, W, 4) uint8 RGBA image, row-major
    - ScalarField: (H, W) float32 field, zero-initialized

Both containers address cells as (row, col) and expose ``within`` for bounds
checks. Each buffer has a single owner; ``release()`` drops the storage and
any later access raises BufferReleasedError.
"""

from typing import NamedTuple, Optional

import numpy as np


class DimensionMismatchError(RuntimeError):
    """Two buffers used together do not share width and height."""


class BufferReleasedError(RuntimeError):
    """A buffer was accessed after release()."""


class RGBA(NamedTuple):
    r: int
    g: int
    b: int
    a: int = 255


class _Grid:
    """Storage ownership and bounds logic common to both containers."""

    def __init__(self, data: np.ndarray):
        self._data: Optional[np.ndarray] = data

    @property
    def data(self) -> np.ndarray:
        if self._data is None:
            raise BufferReleasedError(f"{type(self).__name__} was already released")
        return self._data

    @property
    def height(self) -> int:
        return self.data.shape[0]

    @property
    def width(self) -> int:
        return self.data.shape[1]

    @property
    def released(self) -> bool:
        return self._data is None

    def within(self, row: int, col: int) -> bool:
        return 0 <= col < self.width and 0 <= row < self.height

    def release(self) -> None:
        self._data = None

    def __repr__(self) -> str:
        if self.released:
            return f"{type(self).__name__}(released)"
        return f"{type(self).__name__}(width={self.width}, height={self.height})"


class PixelBuffer(_Grid):
    """RGBA image buffer, shape (height, width, 4), dtype uint8."""

    def __init__(self, pixels: np.ndarray):
        pixels = np.asarray(pixels)
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"PixelBuffer expects shape (H, W, 4), got {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise ValueError(f"PixelBuffer expects dtype uint8, got {pixels.dtype}")
        super().__init__(pixels)

    @classmethod
    def alloc(cls, width: int, height: int) -> "PixelBuffer":
        if width <= 0 or height <= 0:
            raise ValueError(f"Buffer dimensions must be positive, got {width}x{height}")
        return cls(np.zeros((height, width, 4), dtype=np.uint8))

    @classmethod
    def filled(cls, width: int, height: int, color: RGBA) -> "PixelBuffer":
        buf = cls.alloc(width, height)
        buf.pixels[...] = tuple(color)
        return buf

    @property
    def pixels(self) -> np.ndarray:
        return self.data

    def at(self, row: int, col: int) -> RGBA:
        r, g, b, a = (int(c) for c in self.pixels[row, col])
        return RGBA(r, g, b, a)

    def set(self, row: int, col: int, color: RGBA) -> None:
        self.pixels[row, col] = tuple(color)

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.pixels.copy())


class ScalarField(_Grid):
    """Single-channel float32 field, shape (height, width)."""

    def __init__(self, values: np.ndarray):
        values = np.asarray(values, dtype=np.float32)
        if values.ndim != 2:
            raise ValueError(f"ScalarField expects shape (H, W), got {values.shape}")
        super().__init__(values)

    @classmethod
    def alloc(cls, width: int, height: int) -> "ScalarField":
        if width <= 0 or height <= 0:
            raise ValueError(f"Field dimensions must be positive, got {width}x{height}")
        return cls(np.zeros((height, width), dtype=np.float32))

    @property
    def values(self) -> np.ndarray:
        return self.data

    def at(self, row: int, col: int) -> float:
        return float(self.values[row, col])

    def clear(self) -> None:
        self.values.fill(0.0)

    def to_pixel_buffer(self) -> PixelBuffer:
        """Render as opaque grayscale; values are expected in [0, 1]."""
        item = (255.0 * np.clip(self.values, 0.0, 1.0)).astype(np.uint8)
        pixels = np.empty((self.height, self.width, 4), dtype=np.uint8)
        pixels[..., 0] = item
        pixels[..., 1] = item
        pixels[..., 2] = item
        pixels[..., 3] = 255
        return PixelBuffer(pixels)


def check_dimensions(a: _Grid, b: _Grid) -> None:
    """Raise DimensionMismatchError unless a and b share width and height."""
    if a.width != b.width or a.height != b.height:
        raise DimensionMismatchError(
            f"Dimension mismatch: {a.width}x{a.height} vs {b.width}x{b.height}"
        )
