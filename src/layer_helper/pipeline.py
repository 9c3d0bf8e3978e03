"""
layer_helper.pipeline — Build-and-publish orchestration.

Stages run strictly in order, each a hard gate for the next:

    preconditions -> manifest -> confirmation -> credential gate
        -> build -> publish

Cleanup runs after every outcome, including fatal failures and operator
aborts, so the work dir is always left ready for a fresh run.

Exit codes:
    0  Layer published, or the operator declined to continue.
    1  Fatal validation, build or publish failure.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from layer_helper.builder import BuildReport, LayerBuilder
from layer_helper.cleanup import cleanup
from layer_helper.cloud import AwsCloudClient, CloudClient, PublishedLayer
from layer_helper.commands import CommandResult, run_command, which
from layer_helper.config import LayerContext
from layer_helper.console import OutputFn, announce, ask_yes_no, echo
from layer_helper.credentials import CredentialGate, DecideFn, ask_to_continue
from layer_helper.exceptions import LayerHelperError, UserAborted
from layer_helper.installer import PackageInstaller, PipInstaller
from layer_helper.manifest import EditorFn, make_editor_opener, validate_manifest
from layer_helper.preconditions import check_preconditions
from layer_helper.publisher import publish_layer

logger = logging.getLogger("layer_helper.pipeline")

EXIT_OK = 0
EXIT_FAILURE = 1


@dataclass(frozen=True)
class Collaborators:
    """External tools and operator decisions the pipeline depends on."""

    installer: PackageInstaller
    cloud: CloudClient
    open_editor: EditorFn
    confirm: Callable[[], bool]
    decide: DecideFn
    which_fn: Callable[[str], str | None] = which
    run_fn: Callable[[Sequence[str]], CommandResult] = run_command
    output: OutputFn = echo


def default_collaborators(ctx: LayerContext) -> Collaborators:
    return Collaborators(
        installer=PipInstaller(),
        cloud=AwsCloudClient(region=ctx.region),
        open_editor=make_editor_opener(ctx.editor),
        confirm=lambda: ask_yes_no("Are you sure you want to proceed?"),
        decide=ask_to_continue,
    )


@dataclass(frozen=True)
class PipelineResult:
    exit_code: int
    published: PublishedLayer | None = None
    build: BuildReport | None = None
    error: BaseException | None = None


def run_pipeline(
    ctx: LayerContext,
    collab: Collaborators,
    *,
    edit_first: bool = False,
    assume_yes: bool = False,
) -> PipelineResult:
    out = collab.output
    report: BuildReport | None = None
    try:
        check_preconditions(ctx, which_fn=collab.which_fn, run_fn=collab.run_fn, output=out)

        if edit_first:
            collab.open_editor(ctx.manifest_path)
        validate_manifest(ctx.manifest_path, collab.open_editor, output=out)

        if not assume_yes and not collab.confirm():
            raise UserAborted("Operator declined the final confirmation")

        CredentialGate(collab.cloud, decide=collab.decide, output=out).run()

        report = LayerBuilder(ctx, collab.installer, which_fn=collab.which_fn, output=out).build()
        published = publish_layer(ctx, collab.cloud, output=out)
        return PipelineResult(exit_code=EXIT_OK, published=published, build=report)
    except UserAborted as exc:
        logger.info("Stopped by operator: %s", exc)
        announce("Exiting without publishing.", output=out)
        return PipelineResult(exit_code=EXIT_OK, build=report, error=exc)
    except LayerHelperError as exc:
        logger.error("layer_helper failed: %s", exc)
        return PipelineResult(exit_code=EXIT_FAILURE, build=report, error=exc)
    finally:
        # A cleanup error is reported but never replaces the run outcome.
        try:
            removed = cleanup(ctx)
        except OSError:
            logger.exception("Cleanup failed; remove build artifacts in %s by hand", ctx.work_dir)
        else:
            logger.info("Cleanup removed %d path(s)", len(removed))
