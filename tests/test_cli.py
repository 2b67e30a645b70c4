"""Test the scripts/wb2svg.py command line entry point.

Tests:
    - Successful run writes the SVG and returns 0
    - --debug-dir writes snapshots
    - Decode failure and buffer overflow return 1
    - Invalid config returns 1

Run:
    pytest tests/test_cli.py -v
"""

import importlib.util
import logging
import sys
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from wb2svg.utils import logging_config


SCRIPT = Path(__file__).parent.parent / "scripts" / "wb2svg.py"


@pytest.fixture(scope="module")
def cli():
    """Load the script as a module without running it."""
    spec = importlib.util.spec_from_file_location("wb2svg_cli", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture(autouse=True)
def restore_globals():
    hook = sys.excepthook
    yield
    sys.excepthook = hook
    root = logging.getLogger()
    for handler in list(logging_config._installed_handlers):
        root.removeHandler(handler)
        handler.close()
    logging_config._installed_handlers.clear()
    root.setLevel(logging.WARNING)
    logging_config.pop_context()
    logging.captureWarnings(False)


@pytest.fixture
def board(tmp_path):
    rgb = np.full((10, 10, 3), 255, dtype=np.uint8)
    rgb[3:8, 1:9] = 0  # 5 rows: the blurred center row stays pure black
    path = tmp_path / "board.png"
    Image.fromarray(rgb).save(path)
    return path


def _run(cli, monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["wb2svg.py", *map(str, args)])
    return cli.main()


def test_success(cli, monkeypatch, board, tmp_path):
    out = tmp_path / "board.svg"
    assert _run(cli, monkeypatch, board, out) == 0
    text = out.read_text()
    assert text.startswith('<svg width="10" height="10"')
    assert 'stroke="rgb(0,0,0)"' in text


def test_debug_dir(cli, monkeypatch, board, tmp_path):
    debug = tmp_path / "debug"
    assert _run(cli, monkeypatch, board, tmp_path / "o.svg", "--debug-dir", debug) == 0
    assert sorted(p.name for p in debug.iterdir()) == [
        "gauss.png", "gradient.png", "quantized.png", "thin.png",
    ]


def test_decode_failure(cli, monkeypatch, tmp_path):
    bad = tmp_path / "bad.jpg"
    bad.write_bytes(b"nope")
    assert _run(cli, monkeypatch, bad, tmp_path / "o.svg") == 1


def test_overflow(cli, monkeypatch, board, tmp_path):
    out = tmp_path / "o.svg"
    assert _run(cli, monkeypatch, board, out, "--capacity", "32") == 1
    assert not out.exists()


def test_bad_config(cli, monkeypatch, board, tmp_path):
    cfg = tmp_path / "cfg.yaml"
    cfg.write_text("schema: other\n")
    assert _run(cli, monkeypatch, board, tmp_path / "o.svg", "--config", cfg) == 1
