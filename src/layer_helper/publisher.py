"""
layer_helper.publisher — Publish the archive as a new layer version.

Exactly one compatible runtime is declared.  Any failure is fatal for the
run; credentials and content are assumed settled by the earlier gates.
"""

from __future__ import annotations

import logging

from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError

from layer_helper.cloud import CloudClient, PublishedLayer
from layer_helper.config import LayerContext
from layer_helper.console import OutputFn, announce, echo
from layer_helper.exceptions import PublishFailure
from layer_helper.manifest import compute_dependency_hash, read_entries

logger = logging.getLogger("layer_helper.publisher")


def default_description(ctx: LayerContext) -> str:
    """Return "<runtime> deps:<hash>" for the manifest in ctx."""
    deps_hash = compute_dependency_hash(read_entries(ctx.manifest_path))
    return f"{ctx.runtime} deps:{deps_hash}"


def publish_layer(
    ctx: LayerContext,
    cloud: CloudClient,
    *,
    output: OutputFn = echo,
) -> PublishedLayer:
    archive = ctx.archive_path
    if ctx.s3_bucket:
        content = f"--content S3Bucket={ctx.s3_bucket},S3Key=layers/{archive.name}"
    else:
        content = f"--zip-file fileb://{archive.name}"
    operation = (
        f"aws lambda publish-layer-version --layer-name {ctx.layer_name} "
        f"{content} --compatible-runtimes {ctx.runtime}"
    )
    if not archive.is_file():
        announce(f"Publish failed: archive {archive} not found", output=output)
        raise PublishFailure(f"Archive not found: {archive}")

    try:
        description = ctx.description or default_description(ctx)
        published = cloud.publish_layer(
            layer_name=ctx.layer_name,
            archive_path=archive,
            runtime=ctx.runtime,
            description=description,
            s3_bucket=ctx.s3_bucket,
        )
    except (BotoCoreError, ClientError, S3UploadFailedError, OSError) as exc:
        logger.error("Publish failed: %s", exc)
        announce(f"Publish failed: {operation}", output=output)
        output(str(exc))
        raise PublishFailure(f"{operation}: {exc}") from exc

    announce(
        f"Published {published.layer_name} version {published.version}: "
        f"{published.layer_version_arn}",
        output=output,
    )
    return published
