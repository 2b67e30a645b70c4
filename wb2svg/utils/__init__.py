"""Cross-cutting utilities (lowest dependency layer).

This package provides shared primitives for:
    - Config validation (validators)
    - Color space conversions (color)
    - Atomic I/O and raster decode/encode (fs)
    - Stage timing (profiler)
    - Unified logging (logging_config)

No module in utils/ may import from upper layers (data_pipeline, scripts).

Convenience imports:
    from wb2svg.utils import fs, color, validators
    from wb2svg.utils.logging_config import setup_logging, get_logger
"""

from . import color
from . import fs
from . import logging_config
from . import profiler
from . import validators

from .logging_config import get_logger, push_context, setup_logging

__all__ = [
    # Modules
    'color',
    'fs',
    'logging_config',
    'profiler',
    'validators',
    # Direct exports
    'setup_logging',
    'get_logger',
    'push_context',
]
