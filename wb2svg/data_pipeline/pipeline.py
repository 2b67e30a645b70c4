"""Raster → SVG vectorization entry points.

Stages (each one consumes the previous stage's buffer):
    1. Gaussian smoothing into a working buffer (the input is left untouched)
    2. Five-class color quantization, in place
    3. Guo-Hall thinning, in place
    4. Greedy tracing (consumes and releases the working buffer)
    5. Bounded SVG serialization into the caller's byte buffer

Public API:
    transform(img, buffer, capacity=None, cfg=None, snapshot=None) → int
        Bytes written, or -1 when there is no buffer, no capacity, or the
        document does not fit
    vectorize(img, cfg=None) → str
        Convenience wrapper allocating cfg.svg.capacity_bytes
    run_pipeline(input_path, output_path, cfg=None) → dict
        Decode a file, vectorize, write the SVG atomically, optionally dump
        debug snapshots

The optional ``snapshot(name, buffer)`` hook is called with "gauss",
"quantized" and "thin" after the matching stage; the buffer is only valid
for the duration of the call.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from ..utils import color, fs, profiler
from ..utils.validators import Wb2SvgV1
from .buffers import PixelBuffer, ScalarField, check_dimensions
from .convolution import gaussian_blur, sobel_magnitude
from .path_tracer import trace_paths
from .quantize import ColorClass, quantize
from .svg_writer import SvgOverflowError, SvgWriter, render_svg
from .thinning import guo_hall_thinning, thin_until_stable

logger = logging.getLogger(__name__)

SnapshotHook = Callable[[str, PixelBuffer], None]

OVERFLOW = SvgWriter.OVERFLOW


def preprocess(
    img: PixelBuffer,
    processed: PixelBuffer,
    cfg: Optional[Wb2SvgV1] = None,
    snapshot: Optional[SnapshotHook] = None,
) -> Dict[str, Any]:
    """Smooth, quantize and thin ``img`` into ``processed``.

    Parameters
    ----------
    img : PixelBuffer
        Source image (read only)
    processed : PixelBuffer
        Working buffer with the same dimensions as ``img``
    cfg : Wb2SvgV1, optional
        Configuration; defaults reproduce the reference pipeline
    snapshot : callable, optional
        Called as snapshot(name, processed) after each stage

    Returns
    -------
    Dict[str, Any]
        'class_counts' (Dict[ColorClass, int]) and 'removed' (thinned pixels)
    """
    cfg = cfg or Wb2SvgV1()
    check_dimensions(img, processed)

    with profiler.timer("smoothing"):
        if cfg.smoothing.enabled:
            gaussian_blur(img, out=processed)
        else:
            processed.pixels[...] = img.pixels
    if snapshot is not None:
        snapshot("gauss", processed)

    with profiler.timer("quantization"):
        class_counts = quantize(processed, cfg.classification)
    if snapshot is not None:
        snapshot("quantized", processed)

    with profiler.timer("thinning"):
        if cfg.thinning.until_stable:
            removed = thin_until_stable(processed, cfg.thinning.max_rounds)
        else:
            removed = guo_hall_thinning(processed, cfg.thinning.rounds)
    if snapshot is not None:
        snapshot("thin", processed)

    return {"class_counts": class_counts, "removed": removed}


def _transform(
    img: PixelBuffer,
    writer: SvgWriter,
    cfg: Wb2SvgV1,
    snapshot: Optional[SnapshotHook],
) -> Dict[str, Any]:
    processed = PixelBuffer.alloc(img.width, img.height)
    try:
        stats = preprocess(img, processed, cfg, snapshot)
        with profiler.timer("tracing"):
            paths = trace_paths(processed)
    finally:
        processed.release()

    with profiler.timer("serialization"):
        render_svg(
            writer, img.width, img.height, paths,
            element=cfg.svg.element,
            stroke_width=cfg.svg.line_stroke_width,
        )

    counts = stats["class_counts"]
    logger.info(
        f"Vectorized {img.width}x{img.height}: "
        f"{counts[ColorClass.BLACK]} black, {counts[ColorClass.RED]} red, "
        f"{counts[ColorClass.GREEN]} green, {counts[ColorClass.BLUE]} blue px; "
        f"{stats['removed']} thinned; {len(paths)} paths"
    )
    stats["num_paths"] = len(paths)
    stats["bytes"] = writer.cursor
    return stats


def transform(
    img: PixelBuffer,
    buffer: Optional[bytearray],
    capacity: Optional[int] = None,
    cfg: Optional[Wb2SvgV1] = None,
    snapshot: Optional[SnapshotHook] = None,
) -> int:
    """Vectorize ``img`` into ``buffer``.

    Parameters
    ----------
    img : PixelBuffer
        Source image, owned by the caller and left unchanged
    buffer : bytearray or None
        Destination for the ASCII SVG text, owned by the caller. A NUL byte
        follows the written text.
    capacity : int, optional
        Usable bytes of ``buffer``; defaults to ``len(buffer)``
    cfg : Wb2SvgV1, optional
        Configuration; defaults reproduce the reference pipeline
    snapshot : callable, optional
        Debug hook, see module docstring

    Returns
    -------
    int
        Bytes written (excluding the NUL), or -1 when ``buffer`` is None,
        ``capacity <= 0``, or the document exceeds ``capacity``

    Raises
    ------
    ValueError
        If ``capacity`` is larger than ``buffer``
    """
    if buffer is None:
        return OVERFLOW
    if capacity is None:
        capacity = len(buffer)
    if capacity <= 0:
        return OVERFLOW

    writer = SvgWriter(buffer, capacity)
    stats = _transform(img, writer, cfg or Wb2SvgV1(), snapshot)
    if stats["bytes"] == OVERFLOW:
        logger.warning(f"SVG output exceeded capacity of {capacity} bytes")
    return stats["bytes"]


def vectorize(img: PixelBuffer, cfg: Optional[Wb2SvgV1] = None) -> str:
    """Vectorize ``img`` and return the SVG document as text.

    Raises
    ------
    SvgOverflowError
        If the document does not fit in cfg.svg.capacity_bytes
    """
    cfg = cfg or Wb2SvgV1()
    buffer = bytearray(cfg.svg.capacity_bytes)
    n = transform(img, buffer, cfg=cfg)
    if n == OVERFLOW:
        raise SvgOverflowError(f"buffer size exceeded ({cfg.svg.capacity_bytes} bytes)")
    return buffer[:n].decode("ascii")


def save_gradient_map(pixels, path: Union[str, Path]) -> None:
    """Write the Sobel gradient magnitude of the input luminance as a PNG."""
    field = ScalarField(color.luminance(pixels))
    grad = sobel_magnitude(field)
    try:
        preview = grad.to_pixel_buffer()
        fs.atomic_save_image(preview.pixels, path)
    finally:
        field.release()
        grad.release()


def _png_snapshot(out_dir: Path, saved: Dict[str, str]) -> SnapshotHook:
    """Snapshot hook writing <out_dir>/<name>.png and recording the path."""
    def save(name: str, buf: PixelBuffer) -> None:
        path = out_dir / f"{name}.png"
        fs.atomic_save_image(buf.pixels, path)
        saved[name] = str(path)
    return save


def run_pipeline(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    cfg: Optional[Wb2SvgV1] = None,
) -> Dict[str, Any]:
    """Decode ``input_path``, vectorize it and write the SVG to ``output_path``.

    Returns
    -------
    Dict[str, Any]
        svg_path, bytes, num_paths, class_counts (by class name) and
        snapshots (name → path; empty unless debug.save_intermediates)

    Raises
    ------
    ImageDecodeError
        If the input cannot be read or decoded
    SvgOverflowError
        If the document exceeds cfg.svg.capacity_bytes (nothing is written)
    """
    cfg = cfg or Wb2SvgV1()
    input_path = Path(input_path)
    output_path = Path(output_path)

    logger.info(f"Loading {input_path}")
    pixels = fs.load_rgba(input_path)
    img = PixelBuffer(pixels)

    snapshots: Dict[str, str] = {}
    hook: Optional[SnapshotHook] = None
    if cfg.debug.save_intermediates:
        out_dir = fs.ensure_dir(cfg.debug.out_dir)
        hook = _png_snapshot(out_dir, snapshots)
        gradient_path = out_dir / "gradient.png"
        save_gradient_map(pixels, gradient_path)
        snapshots["gradient"] = str(gradient_path)

    buffer = bytearray(cfg.svg.capacity_bytes)
    writer = SvgWriter(buffer)
    try:
        stats = _transform(img, writer, cfg, hook)
    finally:
        img.release()

    if stats["bytes"] == OVERFLOW:
        raise SvgOverflowError(f"buffer size exceeded ({cfg.svg.capacity_bytes} bytes)")

    fs.atomic_write_text(output_path, buffer[:stats["bytes"]].decode("ascii"))
    logger.info(f"Wrote {stats['bytes']} bytes to {output_path}")

    return {
        "svg_path": str(output_path),
        "bytes": stats["bytes"],
        "num_paths": stats["num_paths"],
        "class_counts": {c.name.lower(): n for c, n in stats["class_counts"].items()},
        "snapshots": snapshots,
    }
