"""
layer_helper.console — Operator prompts and delimited announcements.

Input and output functions are injectable so every prompt can be driven by
a scripted source in tests.
"""

from __future__ import annotations

from collections.abc import Callable

from layer_helper.config import is_valid_layer_name

InputFn = Callable[[str], str]
OutputFn = Callable[[str], None]

_YES = frozenset({"yes", "y"})
_NO = frozenset({"no", "n"})


def echo(msg: str) -> None:
    print(msg, flush=True)


def frame(message: str) -> str:
    """Return message boxed in asterisks, one line above and one below."""
    border = "*" * (len(message) + 4)
    return f"{border}\n* {message} *\n{border}"


def announce(message: str, *, output: OutputFn = echo) -> None:
    output(frame(message))


def ask_yes_no(question: str, *, input_fn: InputFn = input, output: OutputFn = echo) -> bool:
    """Ask until the operator answers yes or no.  Other input is re-prompted."""
    while True:
        answer = input_fn(f"{question} (Type 'yes' to continue or 'no' to exit): ")
        normalised = answer.strip().lower()
        if normalised in _YES:
            return True
        if normalised in _NO:
            return False
        output("Please answer 'yes' or 'no'.")


def prompt_layer_name(*, input_fn: InputFn = input, output: OutputFn = echo) -> str:
    """Read a layer name, re-prompting on invalid input.  Never truncates or escapes."""
    while True:
        name = input_fn("Enter the layer name (a-z, A-Z, 0-9, hyphens, and periods allowed): ")
        if is_valid_layer_name(name):
            output(f"Layer name is valid: {name}")
            return name
        announce(
            "Invalid layer name format. Please use only a-z, A-Z, 0-9, hyphens, and periods.",
            output=output,
        )


def wait_for_enter(*, input_fn: InputFn = input) -> None:
    input_fn("Press Enter to continue...")
