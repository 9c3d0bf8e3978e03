"""
layer_helper.cleanup — Remove every transient build artifact.

Idempotent: paths that are already gone are skipped silently.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from layer_helper.config import LayerContext

logger = logging.getLogger("layer_helper.cleanup")


def transient_paths(ctx: LayerContext) -> tuple[Path, ...]:
    return (ctx.env_dir, ctx.staging_dir, ctx.archive_path)


def cleanup(ctx: LayerContext) -> list[Path]:
    """Delete the build environment, staging directory and archive.

    Returns the paths that existed and were removed.
    """
    removed: list[Path] = []
    for path in transient_paths(ctx):
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        elif path.exists() or path.is_symlink():
            path.unlink()
        else:
            continue
        logger.info("Removed %s", path)
        removed.append(path)
    return removed
