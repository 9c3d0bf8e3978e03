"""
layer_helper.config — Immutable run context and environment-driven settings.

A single LayerContext is built at session start and threaded through every
pipeline stage.  Nothing in the pipeline reads ambient globals for the layer
name or build paths.
"""

from __future__ import annotations

import os
import re
import shlex
from dataclasses import dataclass
from pathlib import Path

DEFAULT_PYTHON_VERSION = "3.10"
DEFAULT_MANIFEST = "requirements.txt"
DEFAULT_EDITOR = "c9"
STAGING_DIR_NAME = "python"
# Keeps "." and ".." (both valid layer names) from resolving to real directories.
ENV_DIR_PREFIX = ".venv-"

_LAYER_NAME_RE = re.compile(r"[a-zA-Z0-9.-]+")


def is_valid_layer_name(name: str) -> bool:
    """Return True when name uses only a-z, A-Z, 0-9, hyphens and periods."""
    return _LAYER_NAME_RE.fullmatch(name) is not None


def runtime_for(python_version: str) -> str:
    """Map an interpreter version ("3.10" or "3.10.14") to a Lambda runtime id."""
    parts = python_version.strip().split(".")
    if len(parts) < 2 or not all(p.isdigit() for p in parts[:2]):
        raise ValueError(f"Invalid python version: {python_version!r}")
    return f"python{parts[0]}.{parts[1]}"


def resolve_editor(explicit: str | None = None) -> str:
    """CLI flag first, then LAYER_HELPER_EDITOR, then EDITOR, then c9."""
    for candidate in (
        explicit,
        os.environ.get("LAYER_HELPER_EDITOR"),
        os.environ.get("EDITOR"),
    ):
        if candidate and candidate.strip():
            return candidate.strip()
    return DEFAULT_EDITOR


def editor_argv(editor: str) -> list[str]:
    """Split an editor command such as "code --wait" into argv words.

    Raises ValueError for unbalanced quotes or an empty command.
    """
    argv = shlex.split(editor)
    if not argv:
        raise ValueError(f"Invalid editor command: {editor!r}")
    return argv


def resolve_region(explicit: str | None = None) -> str | None:
    """Return the AWS region to use, or None to defer to boto3's configured default."""
    for candidate in (
        explicit,
        os.environ.get("AWS_REGION"),
        os.environ.get("AWS_DEFAULT_REGION"),
    ):
        if candidate and candidate.strip():
            return candidate.strip()
    return None


def resolve_s3_bucket(explicit: str | None = None) -> str | None:
    value = explicit or os.environ.get("LAYER_HELPER_S3_BUCKET", "")
    return value.strip() or None


@dataclass(frozen=True)
class LayerContext:
    """Everything a pipeline run needs to know, fixed at session start."""

    layer_name: str
    work_dir: Path
    manifest_path: Path
    python_version: str = DEFAULT_PYTHON_VERSION
    editor: str = DEFAULT_EDITOR
    region: str | None = None
    s3_bucket: str | None = None
    description: str | None = None

    def __post_init__(self) -> None:
        if not is_valid_layer_name(self.layer_name):
            raise ValueError(
                f"Invalid layer name {self.layer_name!r}: "
                "use only a-z, A-Z, 0-9, hyphens, and periods"
            )
        # Fail early on a malformed version rather than at publish time.
        runtime_for(self.python_version)
        editor_argv(self.editor)

    @property
    def runtime(self) -> str:
        return runtime_for(self.python_version)

    @property
    def interpreter(self) -> str:
        return f"python{self.python_version}"

    @property
    def env_dir(self) -> Path:
        return self.work_dir / f"{ENV_DIR_PREFIX}{self.layer_name}"

    @property
    def staging_dir(self) -> Path:
        return self.work_dir / STAGING_DIR_NAME

    @property
    def archive_path(self) -> Path:
        return self.work_dir / f"{self.layer_name}.zip"


def build_context(
    *,
    layer_name: str,
    work_dir: Path | None = None,
    manifest: str | Path | None = None,
    python_version: str = DEFAULT_PYTHON_VERSION,
    editor: str | None = None,
    region: str | None = None,
    s3_bucket: str | None = None,
    description: str | None = None,
) -> LayerContext:
    """Create a LayerContext from CLI values plus environment fallbacks."""
    base = (work_dir or Path.cwd()).resolve()
    manifest_path = Path(manifest) if manifest else Path(DEFAULT_MANIFEST)
    if not manifest_path.is_absolute():
        manifest_path = base / manifest_path

    return LayerContext(
        layer_name=layer_name,
        work_dir=base,
        manifest_path=manifest_path,
        python_version=python_version,
        editor=resolve_editor(editor),
        region=resolve_region(region),
        s3_bucket=resolve_s3_bucket(s3_bucket),
        description=description,
    )
