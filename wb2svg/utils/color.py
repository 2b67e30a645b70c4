"""Color space conversions for the classifier and debug maps.

Provides:
    - RGB → HSV (hue in degrees, saturation/value in [0, 1])
    - Luminance from 8-bit RGB (Rec. 709 weights)

Used by:
    - Quantization: HSV bucketing into the five color classes
    - Debug snapshots: luminance input for the gradient map

All conversions operate on numpy arrays whose last axis holds at least the
r, g, b channels as uint8 (alpha, if present, is ignored).

Invariants:
    - Arithmetic is float32 end to end (classifier thresholds are float32 too)
    - Hue is 0 when the color is achromatic (max == min)
    - Hue is never negative: results lie in [0, 360)
"""

from typing import Tuple

import numpy as np


_F32 = np.float32


def rgb_to_hsv(rgb: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Convert 8-bit RGB(A) to HSV.

    Parameters
    ----------
    rgb : np.ndarray
        Array of shape (..., C) with C >= 3, dtype uint8

    Returns
    -------
    h : np.ndarray
        Hue in degrees, shape (...), float32, range [0, 360)
    s : np.ndarray
        Saturation, shape (...), float32, range [0, 1]
    v : np.ndarray
        Value, shape (...), float32, range [0, 1]

    Notes
    -----
    Hue is taken from whichever channel holds the maximum, checked in
    r, g, b order:
        - r: 60 * fmod((g - b) / delta, 6)
        - g: 60 * ((b - r) / delta + 2)
        - b: 60 * ((r - g) / delta + 4)
    A negative hue (max == r, g < b) is shifted by +360.
    """
    rgb = np.asarray(rgb)
    if rgb.shape[-1] < 3:
        raise ValueError(f"Expected at least 3 channels, got shape {rgb.shape}")

    r = rgb[..., 0].astype(_F32) / _F32(255.0)
    g = rgb[..., 1].astype(_F32) / _F32(255.0)
    b = rgb[..., 2].astype(_F32) / _F32(255.0)

    mx = np.maximum(r, np.maximum(g, b))
    mn = np.minimum(r, np.minimum(g, b))
    delta = mx - mn

    chromatic = delta != 0
    safe_delta = np.where(chromatic, delta, _F32(1.0))

    h_r = _F32(60.0) * np.fmod((g - b) / safe_delta, _F32(6.0))
    h_g = _F32(60.0) * ((b - r) / safe_delta + _F32(2.0))
    h_b = _F32(60.0) * ((r - g) / safe_delta + _F32(4.0))

    h = np.where(mx == r, h_r, np.where(mx == g, h_g, h_b))
    h = np.where(chromatic, h, _F32(0.0)).astype(_F32)
    h = np.where(h < 0, h + _F32(360.0), h).astype(_F32)

    safe_max = np.where(mx == 0, _F32(1.0), mx)
    s = np.where(mx == 0, _F32(0.0), delta / safe_max).astype(_F32)
    v = mx.astype(_F32)

    return h, s, v


def luminance(rgb: np.ndarray) -> np.ndarray:
    """Relative luminance of 8-bit RGB(A), shape (...), float32 in [0, 1].

    Uses Rec. 709 weights directly on the encoded values; good enough for
    gradient visualisation, not for colorimetry.
    """
    rgb = np.asarray(rgb)
    r = rgb[..., 0].astype(_F32)
    g = rgb[..., 1].astype(_F32)
    b = rgb[..., 2].astype(_F32)
    return ((_F32(0.2126) * r + _F32(0.7152) * g + _F32(0.0722) * b) / _F32(255.0)).astype(_F32)
