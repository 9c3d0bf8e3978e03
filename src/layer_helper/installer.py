"""
layer_helper.installer — Package-manager boundary.

PipInstaller drives the standard venv module and pip through subprocesses.
The environment's own interpreter is called directly, so no shell
activation is needed and nothing has to be deactivated afterwards.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from layer_helper.commands import CommandResult, run_command


class PackageInstaller(Protocol):
    def create_environment(self, interpreter: str, env_dir: Path) -> CommandResult: ...

    def upgrade_pip(self, env_dir: Path) -> CommandResult: ...

    def install_requirements(self, env_dir: Path, manifest: Path) -> CommandResult: ...

    def site_packages(self, env_dir: Path, python_version: str) -> Path: ...


def env_python(env_dir: Path) -> Path:
    return env_dir / "bin" / "python"


class PipInstaller:
    def __init__(self, *, run_fn: Callable[..., CommandResult] = run_command) -> None:
        self._run = run_fn

    def create_environment(self, interpreter: str, env_dir: Path) -> CommandResult:
        return self._run([interpreter, "-m", "venv", str(env_dir)])

    def upgrade_pip(self, env_dir: Path) -> CommandResult:
        return self._run([str(env_python(env_dir)), "-m", "pip", "install", "--upgrade", "pip"])

    def install_requirements(self, env_dir: Path, manifest: Path) -> CommandResult:
        return self._run([str(env_python(env_dir)), "-m", "pip", "install", "-r", str(manifest)])

    def site_packages(self, env_dir: Path, python_version: str) -> Path:
        major_minor = ".".join(python_version.split(".")[:2])
        return env_dir / "lib" / f"python{major_minor}" / "site-packages"
