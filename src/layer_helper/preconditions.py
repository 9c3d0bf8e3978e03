"""
layer_helper.preconditions — Interpreter and editor availability checks.

A missing interpreter is fatal with no recovery path.  A missing editor is
installed globally through npm; if that install fails the run is fatal too.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from layer_helper.commands import CommandResult, run_command, which
from layer_helper.config import LayerContext, editor_argv
from layer_helper.console import OutputFn, announce, echo
from layer_helper.exceptions import MissingDependencyTool

logger = logging.getLogger("layer_helper.preconditions")

WhichFn = Callable[[str], str | None]
RunFn = Callable[[Sequence[str]], CommandResult]


def check_interpreter(
    python_version: str,
    *,
    which_fn: WhichFn = which,
    output: OutputFn = echo,
) -> str:
    """Return the path of python<version>, raising MissingDependencyTool if absent."""
    interpreter = f"python{python_version}"
    path = which_fn(interpreter)
    if not path:
        message = f"Python {python_version} is not installed on this system."
        announce(message, output=output)
        raise MissingDependencyTool(interpreter, message)
    logger.debug("Interpreter %s resolved to %s", interpreter, path)
    return path


def ensure_editor(
    editor: str,
    *,
    which_fn: WhichFn = which,
    run_fn: RunFn = run_command,
    output: OutputFn = echo,
) -> None:
    """Install the editor program globally with npm when it is not already on PATH.

    Only the program word of editor is looked up or installed, so a command
    such as "code --wait" resolves "code".
    """
    program = editor_argv(editor)[0]
    if which_fn(program):
        announce(f"{program} is already installed.", output=output)
        return

    if not which_fn("npm"):
        announce(f"{program} is not installed and npm is unavailable to install it.", output=output)
        raise MissingDependencyTool("npm", f"npm is required to install {program}")

    announce(f"Installing {program} globally using npm...", output=output)
    result = run_fn(["npm", "install", "-g", program])
    if not result.ok:
        announce(f"Failed: {result.command}", output=output)
        raise MissingDependencyTool(
            program, f"Could not install {program} ({result.command}): {result.diagnostic}"
        )
    announce(f"{program} has been installed.", output=output)


def check_preconditions(
    ctx: LayerContext,
    *,
    which_fn: WhichFn = which,
    run_fn: RunFn = run_command,
    output: OutputFn = echo,
) -> None:
    check_interpreter(ctx.python_version, which_fn=which_fn, output=output)
    announce(f"Python {ctx.python_version} is installed.", output=output)
    ensure_editor(ctx.editor, which_fn=which_fn, run_fn=run_fn, output=output)
