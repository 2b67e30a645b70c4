"""Guo-Hall skeletonization of the quantized image, in place.

Foreground is every non-White pixel (r == g == b == 255 is background; alpha
is ignored). Each sub-iteration runs in two phases:
    1. Mark: evaluate every pixel with row >= 1 and col >= 1 against the
       Guo-Hall deletion test and record hits in a marker field
    2. Apply: paint every marked pixel White

Neighbor labels (clockwise from north):
    p9 p2 p3
    p8 p1 p4
    p7 p6 p5

    C  = (!p2 & (p3|p4)) + (!p4 & (p5|p6)) + (!p6 & (p7|p8)) + (!p8 & (p9|p2))
    N1 = (p9|p2) + (p3|p4) + (p5|p6) + (p7|p8)
    N2 = (p2|p3) + (p4|p5) + (p6|p7) + (p8|p9)
    N  = min(N1, N2)
    m  = (p6|p7|!p9) & p8   (iteration 0)
         (p2|p3|!p5) & p4   (iteration 1)

A pixel is removed iff C == 1, 2 <= N <= 3 and m == 0. Row 0 and column 0
are never evaluated. Neighbors outside the image read as background.

The reference schedule is a fixed 3 rounds of (iteration 0, iteration 1);
thin_until_stable() iterates to a fixed point instead.
"""

import logging

import numpy as np

from .buffers import PixelBuffer, ScalarField, check_dimensions
from .quantize import ColorClass, is_white

logger = logging.getLogger(__name__)

_WHITE = tuple(ColorClass.WHITE.value)


def foreground_mask(img: PixelBuffer) -> np.ndarray:
    """Boolean (H, W) mask of non-White pixels."""
    return ~is_white(img.pixels)


def guo_hall_iteration(img: PixelBuffer, marker: ScalarField, iteration: int) -> int:
    """One Guo-Hall sub-iteration (mark, then apply).

    Parameters
    ----------
    img : PixelBuffer
        Quantized image, modified in place
    marker : ScalarField
        Scratch field with the same dimensions as ``img``; cleared on entry,
        holds 1.0 at every removed pixel on return
    iteration : int
        0 or 1, selects the directional condition ``m``

    Returns
    -------
    int
        Number of foreground pixels painted White
    """
    if iteration not in (0, 1):
        raise ValueError(f"iteration must be 0 or 1, got {iteration}")
    check_dimensions(img, marker)
    marker.clear()

    fg = foreground_mask(img)
    padded = np.pad(fg, 1, mode="constant", constant_values=False)

    p2 = padded[:-2, 1:-1]
    p3 = padded[:-2, 2:]
    p4 = padded[1:-1, 2:]
    p5 = padded[2:, 2:]
    p6 = padded[2:, 1:-1]
    p7 = padded[2:, :-2]
    p8 = padded[1:-1, :-2]
    p9 = padded[:-2, :-2]

    def _n(a: np.ndarray) -> np.ndarray:
        return a.astype(np.uint8)

    C = (_n(~p2 & (p3 | p4)) + _n(~p4 & (p5 | p6))
         + _n(~p6 & (p7 | p8)) + _n(~p8 & (p9 | p2)))
    N1 = _n(p9 | p2) + _n(p3 | p4) + _n(p5 | p6) + _n(p7 | p8)
    N2 = _n(p2 | p3) + _n(p4 | p5) + _n(p6 | p7) + _n(p8 | p9)
    N = np.minimum(N1, N2)

    if iteration == 0:
        m = (p6 | p7 | ~p9) & p8
    else:
        m = (p2 | p3 | ~p5) & p4

    to_delete = fg & (C == 1) & (N >= 2) & (N <= 3) & ~m
    to_delete[0, :] = False
    to_delete[:, 0] = False

    marker.values[to_delete] = 1.0
    img.pixels[marker.values == 1.0] = _WHITE
    return int(np.count_nonzero(to_delete))


def _run_round(img: PixelBuffer, marker: ScalarField) -> int:
    return guo_hall_iteration(img, marker, 0) + guo_hall_iteration(img, marker, 1)


def guo_hall_thinning(img: PixelBuffer, rounds: int = 3) -> int:
    """Thin ``img`` in place with a fixed number of rounds.

    Each round is iteration 0 followed by iteration 1; there is no
    convergence check.

    Returns
    -------
    int
        Total number of pixels removed
    """
    if rounds < 0:
        raise ValueError(f"rounds must be non-negative, got {rounds}")

    marker = ScalarField.alloc(img.width, img.height)
    try:
        removed = 0
        for _ in range(rounds):
            removed += _run_round(img, marker)
    finally:
        marker.release()

    logger.debug(f"Guo-Hall thinning: {rounds} rounds, {removed} pixels removed")
    return removed


def thin_until_stable(img: PixelBuffer, max_rounds: int = 100) -> int:
    """Thin ``img`` in place until a full round removes nothing.

    Stops early at ``max_rounds`` with a warning.

    Returns
    -------
    int
        Total number of pixels removed
    """
    if max_rounds < 1:
        raise ValueError(f"max_rounds must be >= 1, got {max_rounds}")

    marker = ScalarField.alloc(img.width, img.height)
    try:
        removed = 0
        for n in range(1, max_rounds + 1):
            changed = _run_round(img, marker)
            removed += changed
            if changed == 0:
                logger.debug(f"Guo-Hall thinning converged after {n} rounds, {removed} pixels removed")
                break
        else:
            logger.warning(f"Guo-Hall thinning did not converge within {max_rounds} rounds")
    finally:
        marker.release()

    return removed
