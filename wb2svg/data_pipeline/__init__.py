"""Raster-to-vector pipeline stages.

Modules:
    - buffers: PixelBuffer / ScalarField containers, ownership and bounds
    - convolution: Fixed-kernel convolution (Gaussian 5×5, Sobel)
    - quantize: HSV five-class color quantization
    - thinning: Guo-Hall skeletonization (mark, then apply)
    - path_tracer: Greedy 8-connected tracing into polylines
    - svg_writer: Bounded SVG serialization with overflow sentinel
    - pipeline: transform / vectorize / run_pipeline entry points

Workflow:
    1. Decode input (utils.fs) → PixelBuffer
    2. Smooth → quantize → thin (working buffer)
    3. Trace (consumes the working buffer) → SVG text in caller's buffer
    4. Optionally dump gauss/quantized/thin/gradient snapshots
"""

from .buffers import (
    RGBA,
    BufferReleasedError,
    DimensionMismatchError,
    PixelBuffer,
    ScalarField,
)
from .path_tracer import TracedPath, trace_paths
from .pipeline import run_pipeline, transform, vectorize
from .quantize import ColorClass
from .svg_writer import SvgOverflowError, SvgWriter

__all__ = [
    'RGBA',
    'BufferReleasedError',
    'DimensionMismatchError',
    'PixelBuffer',
    'ScalarField',
    'ColorClass',
    'TracedPath',
    'trace_paths',
    'SvgWriter',
    'SvgOverflowError',
    'transform',
    'vectorize',
    'run_pipeline',
]
