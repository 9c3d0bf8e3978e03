"""
layer_helper.builder — Layer Builder.

Ordered sub-steps, each a hard gate.  The first failure raises
BuildStepFailure carrying the step name and the exact failing operation;
later steps never run and nothing is retried.

Archive layout: entries are stored relative to the work dir, so the staged
tree lands under "python/" which Lambda mounts at /opt/python.
"""

from __future__ import annotations

import logging
import shutil
import zipfile
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path, PurePosixPath

from layer_helper.commands import CommandResult, which
from layer_helper.config import LayerContext
from layer_helper.console import OutputFn, announce, echo
from layer_helper.exceptions import BuildStepFailure
from layer_helper.installer import PackageInstaller
from layer_helper.pruning import BYTECODE_RULE, RESIDUE_RULE, PruneRule, prune

logger = logging.getLogger("layer_helper.builder")


class BuildStep(StrEnum):
    VERIFY_INTERPRETER = "verify-interpreter"
    CREATE_ENVIRONMENT = "create-environment"
    UPGRADE_PIP = "upgrade-pip"
    INSTALL_REQUIREMENTS = "install-requirements"
    COPY_PACKAGES = "copy-packages"
    PRUNE_RESIDUE = "prune-residue"
    PRUNE_BYTECODE = "prune-bytecode"
    CREATE_ARCHIVE = "create-archive"


@dataclass
class BuildReport:
    archive_path: Path
    completed: list[BuildStep] = field(default_factory=list)
    pruned: list[PurePosixPath] = field(default_factory=list)
    archive_entries: int = 0


def _require(step: BuildStep, result: CommandResult) -> None:
    if not result.ok:
        raise BuildStepFailure(step=step.value, operation=result.command, detail=result.diagnostic)


def create_archive(staging_dir: Path, archive_path: Path) -> int:
    """Zip staging_dir into archive_path keeping the staging dir name as the root.

    Returns the number of entries written.
    """
    if archive_path.exists():
        archive_path.unlink()
    base = staging_dir.parent
    count = 0
    with zipfile.ZipFile(archive_path, "w", zipfile.ZIP_DEFLATED) as zf:
        for path in sorted(staging_dir.rglob("*")):
            zf.write(path, path.relative_to(base).as_posix())
            count += 1
    return count


class LayerBuilder:
    def __init__(
        self,
        ctx: LayerContext,
        installer: PackageInstaller,
        *,
        which_fn: Callable[[str], str | None] = which,
        output: OutputFn = echo,
    ) -> None:
        self._ctx = ctx
        self._installer = installer
        self._which = which_fn
        self._output = output
        self._report = BuildReport(archive_path=ctx.archive_path)

    # -- sub-steps ----------------------------------------------------------

    def _verify_interpreter(self) -> None:
        if not self._which(self._ctx.interpreter):
            raise BuildStepFailure(
                step=BuildStep.VERIFY_INTERPRETER.value,
                operation=f"command -v {self._ctx.interpreter}",
                detail=f"Python {self._ctx.python_version} is not installed on this system.",
            )

    def _create_environment(self) -> None:
        if self._ctx.env_dir.exists():
            shutil.rmtree(self._ctx.env_dir)
        result = self._installer.create_environment(self._ctx.interpreter, self._ctx.env_dir)
        _require(BuildStep.CREATE_ENVIRONMENT, result)

    def _upgrade_pip(self) -> None:
        _require(BuildStep.UPGRADE_PIP, self._installer.upgrade_pip(self._ctx.env_dir))

    def _install_requirements(self) -> None:
        result = self._installer.install_requirements(self._ctx.env_dir, self._ctx.manifest_path)
        _require(BuildStep.INSTALL_REQUIREMENTS, result)

    def _copy_packages(self) -> None:
        source = self._installer.site_packages(self._ctx.env_dir, self._ctx.python_version)
        staging = self._ctx.staging_dir
        if staging.exists():
            shutil.rmtree(staging)
        shutil.copytree(source, staging, symlinks=True)

    def _prune(self, rule: PruneRule) -> None:
        removed = prune(self._ctx.staging_dir, rule)
        logger.info("Pruned %d path(s) of %s", len(removed), rule.label)
        self._report.pruned.extend(removed)

    def _create_archive(self) -> None:
        self._report.archive_entries = create_archive(
            self._ctx.staging_dir, self._ctx.archive_path
        )

    # -- driver -------------------------------------------------------------

    def _operation(self, step: BuildStep) -> str:
        """Human-readable description of filesystem steps, used in failure reports."""
        ctx = self._ctx
        site = self._installer.site_packages(ctx.env_dir, ctx.python_version)
        return {
            BuildStep.COPY_PACKAGES: f"cp -r {site} {ctx.staging_dir}",
            BuildStep.PRUNE_RESIDUE: f"prune {RESIDUE_RULE.label} in {ctx.staging_dir}",
            BuildStep.PRUNE_BYTECODE: f"prune {BYTECODE_RULE.label} in {ctx.staging_dir}",
            BuildStep.CREATE_ARCHIVE: f"zip -r {ctx.archive_path.name} {ctx.staging_dir.name}",
        }.get(step, step.value)

    def build(self) -> BuildReport:
        steps: list[tuple[BuildStep, Callable[[], None]]] = [
            (BuildStep.VERIFY_INTERPRETER, self._verify_interpreter),
            (BuildStep.CREATE_ENVIRONMENT, self._create_environment),
            (BuildStep.UPGRADE_PIP, self._upgrade_pip),
            (BuildStep.INSTALL_REQUIREMENTS, self._install_requirements),
            (BuildStep.COPY_PACKAGES, self._copy_packages),
            (BuildStep.PRUNE_RESIDUE, lambda: self._prune(RESIDUE_RULE)),
            (BuildStep.PRUNE_BYTECODE, lambda: self._prune(BYTECODE_RULE)),
            (BuildStep.CREATE_ARCHIVE, self._create_archive),
        ]

        for index, (step, handler) in enumerate(steps, start=1):
            logger.info("Build step %d/%d: %s", index, len(steps), step)
            try:
                handler()
            except BuildStepFailure as exc:
                self._report_failure(exc)
                raise
            except OSError as exc:
                failure = BuildStepFailure(
                    step=step.value, operation=self._operation(step), detail=str(exc)
                )
                self._report_failure(failure)
                raise failure from exc
            self._report.completed.append(step)

        announce(
            f"Created {self._ctx.archive_path.name} ({self._report.archive_entries} entries)",
            output=self._output,
        )
        return self._report

    def _report_failure(self, exc: BuildStepFailure) -> None:
        announce(f"Build step '{exc.step}' failed: {exc.operation}", output=self._output)
        if exc.detail:
            self._output(exc.detail)
