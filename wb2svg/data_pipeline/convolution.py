"""Fixed-kernel 2-D convolution with configurable out-of-bounds fill.

This is the only place raw pixel arithmetic with boundary handling happens.

For every output cell (cx, cy):
    out = Σ kernel[ky][kx] * value(cx + kx - c, cy + ky - c) / normalization
where c = kernel_size // 2 and ``fill`` replaces samples outside the grid.

PixelBuffer sources: r, g, b are convolved independently, floored to integers
and clipped to [0, 255]; alpha is fixed at 255. ScalarField sources keep the
float32 result.

Kernel tables are read-only module constants. Sums are accumulated in float32;
with integer weights and 8-bit inputs every partial sum is an exact integer,
so the floored result does not depend on summation order.
"""

from typing import Optional, Union

import numpy as np

from .buffers import RGBA, PixelBuffer, ScalarField, check_dimensions


def _frozen(rows) -> np.ndarray:
    arr = np.array(rows, dtype=np.float32)
    arr.setflags(write=False)
    return arr


GAUSSIAN_5X5 = _frozen([
    [2.0,  4.0,  5.0,  4.0,  2.0],
    [4.0,  9.0,  12.0, 9.0,  4.0],
    [5.0,  12.0, 15.0, 12.0, 5.0],
    [4.0,  9.0,  12.0, 9.0,  4.0],
    [2.0,  4.0,  5.0,  4.0,  2.0],
])
GAUSSIAN_NORMALIZATION = 159.0

SOBEL_X = _frozen([
    [-1.0, 0.0, 1.0],
    [-2.0, 0.0, 2.0],
    [-1.0, 0.0, 1.0],
])
SOBEL_Y = _frozen([
    [-1.0, -2.0, -1.0],
    [0.0,  0.0,  0.0],
    [1.0,  2.0,  1.0],
])

OPAQUE_BLACK = RGBA(0, 0, 0, 255)


def convolve_array(
    values: np.ndarray,
    kernel: np.ndarray,
    normalization: float,
    fill: float,
) -> np.ndarray:
    """Convolve one (H, W) channel.

    Parameters
    ----------
    values : np.ndarray
        Input channel, shape (H, W)
    kernel : np.ndarray
        Square kernel with odd side length N
    normalization : float
        Divisor applied to every weighted sum
    fill : float
        Value sampled outside [0, W) x [0, H)

    Returns
    -------
    np.ndarray
        float32 array, shape (H, W)
    """
    kernel = np.asarray(kernel, dtype=np.float32)
    if kernel.ndim != 2 or kernel.shape[0] != kernel.shape[1] or kernel.shape[0] % 2 == 0:
        raise ValueError(f"Kernel must be square with odd size, got shape {kernel.shape}")
    if normalization == 0:
        raise ValueError("Normalization must be non-zero")

    H, W = values.shape
    n = kernel.shape[0]
    center = n // 2

    padded = np.pad(
        values.astype(np.float32),
        center,
        mode="constant",
        constant_values=np.float32(fill),
    )

    acc = np.zeros((H, W), dtype=np.float32)
    for ky in range(n):
        for kx in range(n):
            weight = kernel[ky, kx]
            if weight == 0:
                continue
            acc += weight * padded[ky:ky + H, kx:kx + W]

    return acc / np.float32(normalization)


def convolve(
    source: Union[PixelBuffer, ScalarField],
    kernel: np.ndarray,
    normalization: float,
    fill: Union[RGBA, float],
    out: Optional[Union[PixelBuffer, ScalarField]] = None,
) -> Union[PixelBuffer, ScalarField]:
    """Convolve a PixelBuffer or ScalarField with a fixed kernel.

    Parameters
    ----------
    source : PixelBuffer or ScalarField
        Input buffer (left untouched)
    kernel : np.ndarray
        Square kernel with odd side length
    normalization : float
        Divisor applied to every weighted sum
    fill : RGBA or float
        Out-of-bounds sample; RGBA for PixelBuffer sources, float for fields
    out : PixelBuffer or ScalarField, optional
        Destination with the same dimensions as ``source``; allocated when None

    Returns
    -------
    PixelBuffer or ScalarField
        ``out`` (or the newly allocated result)

    Raises
    ------
    DimensionMismatchError
        If ``out`` does not match ``source``
    """
    if isinstance(source, PixelBuffer):
        if out is None:
            out = PixelBuffer.alloc(source.width, source.height)
        check_dimensions(source, out)
        fill_rgba = RGBA(*fill) if not isinstance(fill, RGBA) else fill

        src = source.pixels
        channels = []
        for ch in range(3):
            conv = convolve_array(src[..., ch], kernel, normalization, fill_rgba[ch])
            channels.append(np.clip(np.floor(conv), 0, 255).astype(np.uint8))

        # Write only after every channel is computed so out may alias source
        for ch, conv in enumerate(channels):
            out.pixels[..., ch] = conv
        out.pixels[..., 3] = 255
        return out

    if isinstance(source, ScalarField):
        if out is None:
            out = ScalarField.alloc(source.width, source.height)
        check_dimensions(source, out)
        out.values[...] = convolve_array(source.values, kernel, normalization, float(fill))
        return out

    raise TypeError(f"Cannot convolve {type(source).__name__}")


def gaussian_blur(img: PixelBuffer, out: Optional[PixelBuffer] = None) -> PixelBuffer:
    """5×5 Gaussian smoothing with opaque-black fill (normalization 159)."""
    return convolve(img, GAUSSIAN_5X5, GAUSSIAN_NORMALIZATION, OPAQUE_BLACK, out=out)


def sobel_magnitude(field: ScalarField) -> ScalarField:
    """Gradient magnitude of a field, rescaled to [0, 1].

    Out-of-bounds samples read as 0, so image borders show an edge unless
    the field is zero there.
    """
    gx = convolve(field, SOBEL_X, 1.0, 0.0)
    gy = convolve(field, SOBEL_Y, 1.0, 0.0)
    try:
        magnitude = np.hypot(gx.values, gy.values)
    finally:
        gx.release()
        gy.release()

    peak = float(magnitude.max()) if magnitude.size else 0.0
    if peak > 0:
        magnitude = magnitude / peak
    return ScalarField(magnitude)
