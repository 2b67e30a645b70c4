"""Test greedy 8-connected path tracing.

Tests for wb2svg.data_pipeline.path_tracer:
    - L-shaped skeleton from the 3×3 reference image
    - Neighbor search order (row-major, center excluded)
    - Every foreground pixel appears in exactly one path
    - Isolated pixels yield single-point paths
    - Path color is the start pixel's color
    - Consuming ownership (buffer released, even for empty images)

Run:
    pytest tests/test_path_tracer.py -v
"""

import dataclasses

import numpy as np
import pytest

from wb2svg.data_pipeline import path_tracer
from wb2svg.data_pipeline.buffers import BufferReleasedError, PixelBuffer
from wb2svg.data_pipeline.quantize import ColorClass


def _image(width: int, height: int, pixels) -> PixelBuffer:
    """White image with the given {(row, col): ColorClass} pixels."""
    img = PixelBuffer.filled(width, height, ColorClass.WHITE.value)
    for (row, col), cls in pixels.items():
        img.set(row, col, cls.value)
    return img


def test_neighbor_order():
    assert path_tracer.NEIGHBOR_ORDER == (
        (-1, -1), (-1, 0), (-1, 1),
        (0, -1), (0, 1),
        (1, -1), (1, 0), (1, 1),
    )


def test_l_shape_reference_paths():
    black = ColorClass.BLACK
    img = _image(3, 3, {
        (0, 0): black, (0, 1): black, (0, 2): black,
        (1, 0): black,
        (2, 0): black,
    })
    paths = path_tracer.trace_paths(img)

    assert [p.points for p in paths] == [
        ((0, 0), (1, 0), (2, 0)),
        ((0, 1), (0, 2)),
    ]
    assert all(p.color == ColorClass.BLACK.value for p in paths)


def test_all_white_yields_no_paths():
    img = PixelBuffer.filled(4, 4, ColorClass.WHITE.value)
    assert path_tracer.trace_paths(img) == []
    assert img.released


def test_isolated_pixel_single_point():
    img = _image(5, 5, {(2, 3): ColorClass.GREEN})
    paths = path_tracer.trace_paths(img)
    assert len(paths) == 1
    assert paths[0].points == ((3, 2),)
    assert paths[0].color == ColorClass.GREEN.value
    assert paths[0].segments() == []


def test_diagonal_followed():
    img = _image(4, 4, {
        (0, 3): ColorClass.RED,
        (1, 2): ColorClass.RED,
        (2, 1): ColorClass.RED,
    })
    paths = path_tracer.trace_paths(img)
    assert [p.points for p in paths] == [((3, 0), (2, 1), (1, 2))]


def test_path_color_from_start_pixel():
    img = _image(3, 1, {(0, 0): ColorClass.BLUE, (0, 1): ColorClass.RED})
    paths = path_tracer.trace_paths(img)
    assert len(paths) == 1
    assert paths[0].points == ((0, 0), (1, 0))
    assert paths[0].color == ColorClass.BLUE.value


def test_path_turns_back_upward():
    # Start (1, 0) steps down to (2, 1), whose first remaining neighbor is (1, 2)
    img = _image(3, 3, {
        (1, 0): ColorClass.BLACK,
        (1, 2): ColorClass.BLACK,
        (2, 1): ColorClass.BLACK,
    })
    paths = path_tracer.trace_paths(img)
    assert [p.points for p in paths] == [
        ((0, 1), (1, 2), (2, 1)),
    ]


def test_every_pixel_traced_exactly_once():
    rng = np.random.default_rng(7)
    mask = rng.random((12, 15)) < 0.3
    img = PixelBuffer.filled(15, 12, ColorClass.WHITE.value)
    img.pixels[mask] = tuple(ColorClass.BLACK.value)

    paths = path_tracer.trace_paths(img)
    points = [pt for p in paths for pt in p.points]

    assert len(points) == len(set(points))
    expected = {(int(x), int(y)) for y, x in zip(*np.nonzero(mask))}
    assert set(points) == expected


def test_consecutive_points_are_neighbors():
    rng = np.random.default_rng(11)
    mask = rng.random((10, 10)) < 0.4
    img = PixelBuffer.filled(10, 10, ColorClass.WHITE.value)
    img.pixels[mask] = tuple(ColorClass.RED.value)

    for path in path_tracer.trace_paths(img):
        for (x1, y1), (x2, y2) in path.segments():
            assert max(abs(x2 - x1), abs(y2 - y1)) == 1


def test_buffer_consumed():
    img = _image(3, 3, {(1, 1): ColorClass.BLACK})
    path_tracer.trace_paths(img)
    with pytest.raises(BufferReleasedError):
        _ = img.pixels


def test_traced_path_is_immutable():
    path = path_tracer.TracedPath(points=[(0, 0), [1, 0]], color=ColorClass.RED.value)
    assert path.points == ((0, 0), (1, 0))
    assert isinstance(path.points, tuple)
    with pytest.raises(AttributeError):
        path.points.append((2, 0))
    with pytest.raises(dataclasses.FrozenInstanceError):
        path.points = ()
