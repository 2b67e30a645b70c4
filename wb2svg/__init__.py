"""wb2svg: whiteboard photo → vector line drawing.

Converts a raster photograph of a whiteboard or hand-drawn sketch into an SVG
made of straight polyline segments.

Architecture layers (strict one-way dependency):
    scripts/ → wb2svg/data_pipeline/ → wb2svg/utils/

Pipeline:
    raw RGBA → Gaussian smoothing → 5-class color quantization
             → Guo-Hall thinning → greedy 8-connected tracing → SVG text

Key invariants:
    - Pixel buffers are row-major (H, W, 4) uint8 RGBA
    - After quantization only five canonical colors exist
    - White is background; every other class is foreground
    - SVG output is bounded by a caller-supplied capacity; overflow is reported,
      never silently truncated
    - YAML-only configs
"""

__version__ = "1.0.0"
