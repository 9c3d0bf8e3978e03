"""
layer_helper.commands — Subprocess boundary.

Every external tool (interpreter, pip, npm, aws, editor) is invoked through
run_command so the pipeline can be tested against fakes.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger("layer_helper.commands")

_TAIL_CHARS = 8000


@dataclass(frozen=True)
class CommandResult:
    command: str
    return_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.return_code == 0

    @property
    def diagnostic(self) -> str:
        """Tool-native error text, stderr preferred, trimmed to the tail."""
        text = self.stderr.strip() or self.stdout.strip()
        return text[-_TAIL_CHARS:]


def display(command: Sequence[str | Path]) -> str:
    return " ".join(str(part) for part in command)


def run_command(
    command: Sequence[str | Path],
    *,
    cwd: Path | None = None,
    interactive: bool = False,
) -> CommandResult:
    """Run a command to completion and return its exit status and output.

    Interactive commands inherit the terminal so the operator can answer
    their prompts; their output is not captured.
    """
    cmd_display = display(command)
    logger.info("Running: %s", cmd_display)
    args = [str(part) for part in command]
    try:
        if interactive:
            proc = subprocess.run(args, cwd=str(cwd) if cwd else None, check=False)
            return CommandResult(command=cmd_display, return_code=proc.returncode)

        proc = subprocess.run(
            args,
            cwd=str(cwd) if cwd else None,
            check=False,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as exc:
        logger.error("Command not found: %s", args[0])
        return CommandResult(command=cmd_display, return_code=127, stderr=str(exc))

    result = CommandResult(
        command=cmd_display,
        return_code=proc.returncode,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
    )
    if not result.ok:
        logger.warning("Command failed (%d): %s", result.return_code, cmd_display)
    return result


def which(tool: str) -> str | None:
    """Return the resolved path of tool on PATH, or None."""
    return shutil.which(tool)
