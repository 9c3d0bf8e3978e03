"""
build_layer.py — Build and publish a Lambda dependency layer from requirements.txt.

Creates a python<version> venv keyed by the layer name, installs the
manifest, stages site-packages under python/, prunes pip/setuptools/wheel,
*dist-info and __pycache__, zips to <layer>.zip and publishes it for the
single supported runtime.  Transient artifacts are removed afterwards.

Usage:
    python scripts/build_layer.py --layer-name my-layer --manifest requirements.txt

Exit codes:
    0  Published, or the operator declined to continue
    1  Validation, build or publish failure
"""

from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT / "src") not in sys.path:
    sys.path.insert(0, str(REPO_ROOT / "src"))

from layer_helper.cli import main  # noqa: E402

if __name__ == "__main__":
    raise SystemExit(main())
