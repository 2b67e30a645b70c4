"""Lightweight wall-clock timing for pipeline stages.

Provides:
    - timer(): Context manager for wall-clock timing with optional sink

Used to measure each stage of the vectorization pipeline (smoothing,
quantization, thinning, tracing, serialization). Timings go to the
``wb2svg.utils.profiler`` logger at DEBUG unless a sink is supplied.
"""

import logging
import time
from contextlib import contextmanager
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@contextmanager
def timer(name: str, sink: Optional[Callable[[str, float], None]] = None):
    """Context manager for wall-clock timing.

    Parameters
    ----------
    name : str
        Timer name (for logging/display)
    sink : Optional[Callable[[str, float], None]]
        Optional callback(name, elapsed_seconds).
        If None, logs at DEBUG level.

    Yields
    ------
    None

    Examples
    --------
    >>> with timer("thinning"):
    ...     guo_hall_thinning(img)

    >>> timings = {}
    >>> with timer("trace", sink=timings.__setitem__):
    ...     paths = trace_paths(img)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        if sink is not None:
            sink(name, elapsed)
        else:
            logger.debug(f"{name}: {elapsed:.3f} s")
