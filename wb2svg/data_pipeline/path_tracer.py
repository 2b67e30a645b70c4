"""Greedy 8-connected tracing of a thinned image into polylines.

The tracer takes ownership of the thinned buffer: every visited pixel is
painted White as it is consumed, and the buffer is released before
trace_paths() returns.

Scan order:
    - Rows top to bottom, columns left to right, resuming at the first row
      that still holds foreground (rows above it are already all White)
    - From a start pixel, follow the first foreground neighbor in
      NEIGHBOR_ORDER until no neighbor is left
    - An isolated pixel yields a single-point path

Coordinates in TracedPath.points are (x, y) = (col, row).
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from .buffers import RGBA, PixelBuffer
from .quantize import ColorClass, is_white

logger = logging.getLogger(__name__)

# (dy, dx), row-major over the 3x3 neighborhood, center excluded
NEIGHBOR_ORDER: Tuple[Tuple[int, int], ...] = tuple(
    (dy, dx) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dy, dx) != (0, 0)
)

_WHITE = tuple(ColorClass.WHITE.value)


@dataclass(frozen=True)
class TracedPath:
    """Ordered pixel chain of one color (points are stored as a tuple)."""
    points: Tuple[Tuple[int, int], ...]
    color: RGBA

    def __post_init__(self):
        object.__setattr__(self, "points", tuple(tuple(p) for p in self.points))

    def __len__(self) -> int:
        return len(self.points)

    def segments(self) -> List[Tuple[Tuple[int, int], Tuple[int, int]]]:
        """Consecutive point pairs ((x1, y1), (x2, y2))."""
        return list(zip(self.points[:-1], self.points[1:]))


def _first_foreground(pixels: np.ndarray, start_row: int) -> Optional[Tuple[int, int]]:
    """(row, col) of the first non-White pixel at or after ``start_row``."""
    for row in range(start_row, pixels.shape[0]):
        cols = np.flatnonzero(~is_white(pixels[row]))
        if cols.size:
            return row, int(cols[0])
    return None


def _follow(img: PixelBuffer, row: int, col: int) -> List[Tuple[int, int]]:
    pixels = img.pixels
    points = [(col, row)]
    while True:
        pixels[row, col] = _WHITE

        nxt = None
        for dy, dx in NEIGHBOR_ORDER:
            y, x = row + dy, col + dx
            if img.within(y, x) and not is_white(pixels[y, x]):
                nxt = (y, x)
                break
        if nxt is None:
            return points

        row, col = nxt
        points.append((col, row))


def trace_paths(img: PixelBuffer) -> List[TracedPath]:
    """Extract every foreground pixel chain, consuming ``img``.

    Parameters
    ----------
    img : PixelBuffer
        Thinned, quantized image. Ownership transfers to this function; the
        buffer is released on return and must not be used afterwards.

    Returns
    -------
    List[TracedPath]
        Paths in discovery order. Every foreground pixel of the input belongs
        to exactly one path.
    """
    paths: List[TracedPath] = []
    try:
        passed_y = 0
        while True:
            start = _first_foreground(img.pixels, passed_y)
            if start is None:
                break
            passed_y, col = start

            color = img.at(passed_y, col)
            points = _follow(img, passed_y, col)
            paths.append(TracedPath(points=tuple(points), color=color))
    finally:
        img.release()

    logger.debug(f"Traced {len(paths)} paths, {sum(len(p) for p in paths)} points")
    return paths
