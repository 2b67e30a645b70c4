"""Bounded SVG serialization into a caller-owned byte buffer.

SvgWriter appends ASCII text into a fixed-capacity ``bytearray``. Each
successful append also writes one NUL byte after the text, so a document of
length L needs capacity >= L + 1. On the first append that does not fit the
cursor becomes OVERFLOW (-1) and stays there; nothing is ever truncated.

Document grammar (element="path"):
    <svg width="W" height="H" xmlns="http://www.w3.org/2000/svg">
    <path fill="none" stroke="rgb(r,g,b)" d="M x y L x y ..."/>   (one per path)
    </svg>

element="line" emits one
    <line x1="X1" y1="Y1" x2="X2" y2="Y2" stroke="rgb(r,g,b)" stroke-width="N" />
per consecutive point pair instead; single-point paths emit nothing there.
"""

import logging
from typing import Iterable, Optional

from .path_tracer import TracedPath

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"


class SvgOverflowError(RuntimeError):
    """The SVG document did not fit in the output capacity."""


class SvgWriter:
    """Append-only text cursor over a bounded bytearray.

    Parameters
    ----------
    buffer : bytearray
        Destination, owned by the caller
    capacity : int, optional
        Usable bytes at the start of ``buffer``; defaults to ``len(buffer)``
    """

    OVERFLOW = -1

    def __init__(self, buffer: bytearray, capacity: Optional[int] = None):
        if capacity is None:
            capacity = len(buffer)
        if capacity > len(buffer):
            raise ValueError(f"capacity {capacity} exceeds buffer length {len(buffer)}")
        self._view = memoryview(buffer)
        self.capacity = capacity
        self.cursor = 0 if capacity > 0 else self.OVERFLOW

    @property
    def overflowed(self) -> bool:
        return self.cursor == self.OVERFLOW

    def append(self, text: str) -> int:
        """Append ``text``; returns the new cursor (OVERFLOW once it does not fit)."""
        if self.overflowed:
            return self.cursor

        remaining = self.capacity - self.cursor
        if remaining <= 0:
            self.cursor = self.OVERFLOW
            return self.cursor

        data = text.encode("ascii")
        n = len(data)
        if n >= remaining:
            logger.debug(f"SVG overflow: {n} bytes requested, {remaining} remaining")
            self.cursor = self.OVERFLOW
            return self.cursor

        start = self.cursor
        self._view[start:start + n] = data
        self._view[start + n] = 0
        self.cursor = start + n
        return self.cursor

    def getvalue(self) -> str:
        """Text written so far (empty after overflow)."""
        if self.overflowed:
            return ""
        return self._view[:self.cursor].tobytes().decode("ascii")


def _stroke(path: TracedPath) -> str:
    r, g, b = path.color[:3]
    return f"rgb({r},{g},{b})"


def path_element(path: TracedPath) -> str:
    """``<path .../>`` for one traced path."""
    (x0, y0), rest = path.points[0], path.points[1:]
    d = " ".join([f"M {x0} {y0}"] + [f"L {x} {y}" for x, y in rest])
    return f'<path fill="none" stroke="{_stroke(path)}" d="{d}"/>'


def line_elements(path: TracedPath, stroke_width: int = 2) -> Iterable[str]:
    """One ``<line .../>`` per consecutive point pair of ``path``."""
    stroke = _stroke(path)
    for (x1, y1), (x2, y2) in path.segments():
        yield (
            f'<line x1="{x1}" y1="{y1}" x2="{x2}" y2="{y2}" '
            f'stroke="{stroke}" stroke-width="{stroke_width}" />'
        )


def render_svg(
    writer: SvgWriter,
    width: int,
    height: int,
    paths: Iterable[TracedPath],
    element: str = "path",
    stroke_width: int = 2,
) -> int:
    """Serialize ``paths`` into ``writer``.

    Returns
    -------
    int
        Final cursor: bytes written, or SvgWriter.OVERFLOW
    """
    if element not in ("path", "line"):
        raise ValueError(f"element must be 'path' or 'line', got '{element}'")

    writer.append(f'<svg width="{width}" height="{height}" xmlns="{SVG_NS}">')
    for path in paths:
        if writer.overflowed:
            break
        if element == "path":
            writer.append(path_element(path))
        else:
            for text in line_elements(path, stroke_width):
                if writer.append(text) == SvgWriter.OVERFLOW:
                    break
    writer.append("</svg>")
    return writer.cursor
