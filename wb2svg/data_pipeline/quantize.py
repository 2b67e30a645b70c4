"""Five-way color classification of smoothed pixels.

Every pixel is bucketed by its HSV coordinates into one of
BLACK / WHITE / RED / GREEN / BLUE, first match wins:
    1. v <= value_low                         → BLACK
    2. v >= value_high and s <= saturation    → WHITE
    3. s > saturation, by hue:
         [0, 60)    → RED
         [60, 180)  → GREEN
         [180, 300) → BLUE
         otherwise  → RED   (hue outside the named bands, i.e. [300, 360))
    4. otherwise                              → WHITE

quantize() rewrites the buffer in place with the canonical RGBA constant of
each class; no other RGBA value survives it. WHITE is the background for the
later thinning and tracing stages.
"""

import enum
import logging
from typing import Dict, NamedTuple, Optional

import numpy as np

from ..utils.color import rgb_to_hsv as rgb_to_hsv_array
from ..utils.validators import ClassificationConfig
from .buffers import RGBA, PixelBuffer

logger = logging.getLogger(__name__)


class ColorClass(enum.Enum):
    BLACK = RGBA(0, 0, 0, 255)
    WHITE = RGBA(255, 255, 255, 255)
    RED = RGBA(255, 0, 0, 255)
    GREEN = RGBA(0, 255, 0, 255)
    BLUE = RGBA(0, 0, 255, 255)

    @property
    def rgba(self) -> RGBA:
        return self.value


# Index order used by classify_array(); position i ↔ _CLASSES[i]
_CLASSES = (ColorClass.BLACK, ColorClass.WHITE, ColorClass.RED, ColorClass.GREEN, ColorClass.BLUE)
_PALETTE = np.array([c.value for c in _CLASSES], dtype=np.uint8)
_BLACK, _WHITE, _RED, _GREEN, _BLUE = range(5)

_DEFAULT_THRESHOLDS = ClassificationConfig()


class HSV(NamedTuple):
    """Hue in degrees [0, 360), saturation and value in [0, 1]."""
    h: float
    s: float
    v: float


def rgb_to_hsv(pixel: RGBA) -> HSV:
    """HSV of a single pixel (same float32 arithmetic as the array path)."""
    h, s, v = rgb_to_hsv_array(np.array([tuple(pixel)[:3]], dtype=np.uint8))
    return HSV(float(h[0]), float(s[0]), float(v[0]))


def classify_array(
    rgba: np.ndarray,
    thresholds: Optional[ClassificationConfig] = None,
) -> np.ndarray:
    """Class index per pixel for an (..., 4) or (..., 3) uint8 array.

    Indices follow ColorClass declaration order
    (0=BLACK, 1=WHITE, 2=RED, 3=GREEN, 4=BLUE).
    """
    t = thresholds or _DEFAULT_THRESHOLDS
    value_low = np.float32(t.value_low)
    value_high = np.float32(t.value_high)
    sat = np.float32(t.saturation)

    h, s, v = rgb_to_hsv_array(rgba)

    by_hue = np.select(
        [
            (h >= 0) & (h < 60),
            (h >= 60) & (h < 180),
            (h >= 180) & (h < 300),
        ],
        [_RED, _GREEN, _BLUE],
        default=_RED,
    )

    return np.select(
        [
            v <= value_low,
            (v >= value_high) & (s <= sat),
            s > sat,
        ],
        [_BLACK, _WHITE, by_hue],
        default=_WHITE,
    ).astype(np.uint8)


def classify(pixel: RGBA, thresholds: Optional[ClassificationConfig] = None) -> ColorClass:
    """Color class of a single pixel."""
    idx = classify_array(np.array([tuple(pixel)[:3]], dtype=np.uint8), thresholds)
    return _CLASSES[int(idx[0])]


def quantize(
    img: PixelBuffer,
    thresholds: Optional[ClassificationConfig] = None,
) -> Dict[ColorClass, int]:
    """Replace every pixel with its class constant, in place.

    Returns
    -------
    Dict[ColorClass, int]
        Pixel count per class (all five keys present)
    """
    idx = classify_array(img.pixels, thresholds)
    img.pixels[...] = _PALETTE[idx]

    counts = np.bincount(idx.ravel(), minlength=len(_CLASSES))
    result = {cls: int(counts[i]) for i, cls in enumerate(_CLASSES)}
    summary = ", ".join(f"{c.name.lower()}={n}" for c, n in result.items())
    logger.debug(f"Quantized {img.width}x{img.height}: {summary}")
    return result


def is_white(pixels: np.ndarray) -> np.ndarray:
    """Background mask: r == g == b == 255 (alpha ignored)."""
    return (pixels[..., 0] == 255) & (pixels[..., 1] == 255) & (pixels[..., 2] == 255)
