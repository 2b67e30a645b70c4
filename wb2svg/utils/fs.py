"""Filesystem helpers: atomic writes, YAML loading, raster decode/encode.

Provides:
    - Atomic writes: tmp file → fsync → rename (no half-written SVGs)
    - YAML loading for configs
    - Raster decoding to RGBA (Pillow) for the pipeline input
    - Raster encoding for debug snapshots

The decode/encode helpers are the only place image files are touched; the
pipeline itself works on in-memory arrays.

Usage:
    from wb2svg.utils import fs
    pixels = fs.load_rgba("board.jpg")          # (H, W, 4) uint8
    fs.atomic_save_image(pixels, "out/gauss.png")
    fs.atomic_write_text("out/out.svg", svg_text)
"""

import io
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np
import yaml
from PIL import Image, UnidentifiedImageError


class ImageDecodeError(ValueError):
    """Raised when input bytes cannot be decoded as a raster image."""


def ensure_dir(p: Union[str, Path]) -> Path:
    """Create directory (and parents) if missing, return Path object."""
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p


def atomic_write_bytes(
    path: Union[str, Path],
    data: bytes,
    tmp_suffix: str = ".tmp"
) -> None:
    """Write bytes to file atomically (tmp → fsync → rename).

    Parameters
    ----------
    path : Union[str, Path]
        Target file path
    data : bytes
        Data to write
    tmp_suffix : str
        Temporary file suffix, default ".tmp"

    Raises
    ------
    RuntimeError
        If the write or rename fails (tmp file is removed)
    """
    path = Path(path)
    ensure_dir(path.parent)

    tmp_path = path.with_suffix(path.suffix + tmp_suffix)

    try:
        with open(tmp_path, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        tmp_path.replace(path)
    except OSError as e:
        if tmp_path.exists():
            tmp_path.unlink()
        raise RuntimeError(f"Failed to write {path} atomically: {e}") from e


def atomic_write_text(
    path: Union[str, Path],
    text: str,
    encoding: str = "utf-8"
) -> None:
    """Write text to file atomically."""
    atomic_write_bytes(path, text.encode(encoding))


def atomic_save_image(
    img: np.ndarray,
    path: Union[str, Path],
    pil_kwargs: Optional[Dict[str, Any]] = None
) -> None:
    """Save an image array atomically.

    Parameters
    ----------
    img : np.ndarray
        (H, W, 4) RGBA, (H, W, 3) RGB or (H, W) grayscale; non-uint8 input is
        clipped to [0, 255]
    path : Union[str, Path]
        Target file path (extension determines format)
    pil_kwargs : Optional[Dict[str, Any]]
        Additional kwargs for PIL.Image.save
    """
    path = Path(path)
    ensure_dir(path.parent)
    pil_kwargs = pil_kwargs or {}

    if img.dtype != np.uint8:
        img = np.clip(img, 0, 255).astype(np.uint8)
    if img.ndim == 3 and img.shape[2] == 1:
        img = img.squeeze(2)

    pil_img = Image.fromarray(np.ascontiguousarray(img))

    # Keep the real extension last so PIL can infer the format
    tmp_path = path.with_name(path.stem + ".tmp" + path.suffix)
    try:
        pil_img.save(tmp_path, **pil_kwargs)
        tmp_path.replace(path)
    except (OSError, ValueError) as e:
        if tmp_path.exists():
            tmp_path.unlink()
        raise RuntimeError(f"Failed to save image {path} atomically: {e}") from e


def load_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    """Load YAML file safely.

    Raises
    ------
    FileNotFoundError
        If file doesn't exist
    yaml.YAMLError
        If YAML parsing fails
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Failed to parse YAML file {path}: {e}") from e


def decode_rgba(data: bytes) -> np.ndarray:
    """Decode raster bytes into a row-major RGBA array.

    Parameters
    ----------
    data : bytes
        Encoded image (any format Pillow can read)

    Returns
    -------
    np.ndarray
        Pixels, shape (H, W, 4), dtype uint8, channel order RGBA

    Raises
    ------
    ImageDecodeError
        If the bytes are empty, truncated, not a supported image, or exceed
        Pillow's decompression-bomb pixel limit
    """
    if not data:
        raise ImageDecodeError("Cannot decode empty image data")
    try:
        with Image.open(io.BytesIO(data)) as im:
            return np.array(im.convert("RGBA"), dtype=np.uint8)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
        raise ImageDecodeError(f"Could not decode image: {e}") from e


def load_rgba(path: Union[str, Path]) -> np.ndarray:
    """Read and decode an image file into an (H, W, 4) uint8 RGBA array.

    Raises
    ------
    ImageDecodeError
        If the file is missing, unreadable or unsupported
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ImageDecodeError(f"Could not read {path}: {e}") from e
    try:
        return decode_rgba(data)
    except ImageDecodeError as e:
        raise ImageDecodeError(f"Could not read {path}: {e}") from e
