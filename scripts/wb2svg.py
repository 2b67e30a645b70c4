#!/usr/bin/env python3
"""Vectorize a whiteboard photo into an SVG line drawing.

Pipeline: Gaussian smoothing → 5-class quantization → Guo-Hall thinning →
greedy tracing → SVG.

Usage:
    # Default output next to the working directory
    python scripts/wb2svg.py board.jpg

    # Explicit output, config and debug snapshots
    python scripts/wb2svg.py board.jpg out/board.svg --config configs/wb2svg.v1.yaml --debug-dir out

Exit codes:
    0  success
    1  decode failure, invalid config, or SVG larger than the buffer capacity
"""
import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from wb2svg.data_pipeline.pipeline import run_pipeline
from wb2svg.data_pipeline.svg_writer import SvgOverflowError
from wb2svg.utils.fs import ImageDecodeError
from wb2svg.utils.logging_config import get_logger, install_excepthook, push_context, setup_logging
from wb2svg.utils.validators import Wb2SvgV1, load_wb2svg_config

DEFAULT_OUTPUT = Path("out.svg")

logger = get_logger("wb2svg")


def main() -> int:
    """CLI entrypoint for single-image vectorization."""
    parser = argparse.ArgumentParser(
        description="Convert a whiteboard photo into an SVG line drawing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Debug Snapshots:
  --debug-dir DIR writes gauss.png, quantized.png, thin.png and gradient.png
  (Sobel magnitude of the input luminance) into DIR.

Examples:
  python scripts/wb2svg.py board.jpg
  python scripts/wb2svg.py board.jpg board.svg --capacity 1048576
""",
    )
    parser.add_argument("input", type=Path, help="Input raster image")
    parser.add_argument(
        "output",
        type=Path,
        nargs="?",
        default=DEFAULT_OUTPUT,
        help=f"Output SVG path (default: {DEFAULT_OUTPUT})",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="wb2svg.v1 YAML config (default: built-in reference settings)",
    )
    parser.add_argument(
        "--capacity",
        type=int,
        default=None,
        help="SVG buffer capacity in bytes (overrides svg.capacity_bytes)",
    )
    parser.add_argument(
        "--debug-dir",
        type=Path,
        default=None,
        help="Save intermediate images to this directory",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override logging.log_level from the config",
    )

    args = parser.parse_args()

    try:
        cfg = load_wb2svg_config(args.config) if args.config else Wb2SvgV1()
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.capacity is not None:
        if args.capacity <= 0:
            print(f"Error: --capacity must be positive, got {args.capacity}", file=sys.stderr)
            return 1
        cfg.svg.capacity_bytes = args.capacity
    if args.debug_dir is not None:
        cfg.debug.save_intermediates = True
        cfg.debug.out_dir = str(args.debug_dir)

    setup_logging(
        log_level=args.log_level or cfg.logging.log_level,
        log_file=cfg.logging.log_file,
        json=cfg.logging.json_format,
    )
    install_excepthook()
    push_context(image=args.input.name)

    try:
        summary = run_pipeline(args.input, args.output, cfg)
    except ImageDecodeError as e:
        logger.error(f"{e}")
        return 1
    except SvgOverflowError:
        logger.error("buffer size exceeded")
        return 1

    logger.info(f"{summary['num_paths']} paths, {summary['bytes']} bytes → {summary['svg_path']}")
    for name, path in summary["snapshots"].items():
        logger.info(f"  {name}: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
