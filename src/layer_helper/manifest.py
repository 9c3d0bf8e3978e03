"""
layer_helper.manifest — Requirements manifest validation.

A manifest is a pip requirements file.  Blank lines and lines whose first
non-whitespace character is "#" carry no requirement.  The file must hold at
least one other line before a build may start.

Retry policy: a failing manifest is opened in the editor once and checked
once more, with no confirmation prompt in between.  A second failure is fatal.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Callable
from enum import StrEnum
from pathlib import Path

from layer_helper.commands import CommandResult, run_command
from layer_helper.config import editor_argv
from layer_helper.console import InputFn, OutputFn, announce, echo, wait_for_enter
from layer_helper.exceptions import InvalidManifest

logger = logging.getLogger("layer_helper.manifest")

HASH_LENGTH = 16
# Tolerates a leading byte-order mark so it never counts as a requirement.
MANIFEST_ENCODING = "utf-8-sig"

EditorFn = Callable[[Path], None]


class ManifestState(StrEnum):
    ABSENT = "absent"
    EMPTY = "empty"
    COMMENT_ONLY = "comment-only"
    UNREADABLE = "unreadable"
    VALID = "valid"


_FAILURE_MESSAGES: dict[ManifestState, str] = {
    ManifestState.ABSENT: "{name} does not exist. Please create and add requirements to the file.",
    ManifestState.EMPTY: "{name} exists but is empty. Please add requirements to the file.",
    ManifestState.COMMENT_ONLY: (
        "{name} is empty or contains only comments. Please add valid requirements."
    ),
    ManifestState.UNREADABLE: "{name} is not valid UTF-8 text. Please re-save it as UTF-8.",
}


def _is_substantive(line: str) -> bool:
    stripped = line.strip()
    return bool(stripped) and not stripped.startswith("#")


def classify_manifest_text(text: str) -> ManifestState:
    """Classify manifest contents.  Pure; no filesystem access."""
    if text == "":
        return ManifestState.EMPTY
    if any(_is_substantive(line) for line in text.splitlines()):
        return ManifestState.VALID
    return ManifestState.COMMENT_ONLY


def inspect_manifest(path: Path) -> ManifestState:
    """Classify the manifest at path, creating it empty when it does not exist."""
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch()
        logger.info("Created empty manifest at %s", path)
        return ManifestState.ABSENT
    try:
        text = path.read_text(encoding=MANIFEST_ENCODING)
    except UnicodeDecodeError as exc:
        logger.warning("Manifest %s is not UTF-8: %s", path, exc)
        return ManifestState.UNREADABLE
    return classify_manifest_text(text)


def read_entries(path: Path) -> list[str]:
    """Return the substantive lines of the manifest, stripped, in file order."""
    return [
        line.strip()
        for line in path.read_text(encoding=MANIFEST_ENCODING).splitlines()
        if _is_substantive(line)
    ]


def compute_dependency_hash(entries: list[str]) -> str:
    """Return a canonical SHA256 hash of a requirement list.

    Canonical form: each entry stripped, sorted, joined by newline.  Same
    entries in any order produce the same hash.
    """
    canonical = "\n".join(sorted(e.strip() for e in entries))
    return hashlib.sha256(canonical.encode()).hexdigest()[:HASH_LENGTH]


def make_editor_opener(
    editor: str,
    *,
    run_fn: Callable[..., CommandResult] = run_command,
    input_fn: InputFn = input,
    output: OutputFn = echo,
) -> EditorFn:
    """Return a callable that opens a file in editor and blocks until Enter.

    editor may carry arguments ("code --wait"); the file path is appended.
    """
    argv = editor_argv(editor)

    def _open(path: Path) -> None:
        if not path.exists():
            path.touch()
        result = run_fn([*argv, str(path)], interactive=True)
        if not result.ok:
            logger.warning("Editor exited with %d: %s", result.return_code, result.command)
        announce(
            f"{path.name} has been opened. Once you are finished, press Enter to continue.",
            output=output,
        )
        wait_for_enter(input_fn=input_fn)

    return _open


def validate_manifest(
    path: Path,
    open_editor: EditorFn,
    *,
    output: OutputFn = echo,
) -> ManifestState:
    """Return VALID, giving the operator one chance to fix a bad manifest."""
    state = inspect_manifest(path)
    if state is ManifestState.VALID:
        announce(f"{path.name} has valid contents.", output=output)
        return state

    announce(_FAILURE_MESSAGES[state].format(name=path.name), output=output)
    open_editor(path)

    state = inspect_manifest(path)
    if state is ManifestState.VALID:
        announce(f"{path.name} has valid contents.", output=output)
        return state

    announce(_FAILURE_MESSAGES[state].format(name=path.name), output=output)
    raise InvalidManifest(str(path), state.value)
