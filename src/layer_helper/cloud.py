"""
layer_helper.cloud — AWS boundary.

CloudClient is the narrow interface the pipeline talks to.  AwsCloudClient
implements it with boto3 for the credential probe and the layer publish, and
with the `aws configure` CLI for interactive credential setup.

A fresh boto3 Session is created for every call so that credentials written
by `aws configure` mid-run are picked up by the next probe.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from layer_helper.commands import CommandResult, run_command

logger = logging.getLogger("layer_helper.cloud")

S3_KEY_PREFIX = "layers"


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of the read-only reference call.

    Authenticated requires both a successful call and non-empty output.
    """

    succeeded: bool
    output: str = ""
    error: str = ""

    @property
    def authenticated(self) -> bool:
        return self.succeeded and bool(self.output.strip())


@dataclass(frozen=True)
class PublishedLayer:
    layer_name: str
    version: int
    layer_version_arn: str


class CloudClient(Protocol):
    def probe(self) -> ProbeResult: ...

    def configure(self) -> CommandResult: ...

    def publish_layer(
        self,
        *,
        layer_name: str,
        archive_path: Path,
        runtime: str,
        description: str,
        s3_bucket: str | None = None,
    ) -> PublishedLayer: ...


def _format_bucket(bucket: dict[str, Any]) -> str:
    created = bucket.get("CreationDate")
    stamp = created.strftime("%Y-%m-%d %H:%M:%S") if created is not None else ""
    return f"{stamp} {bucket.get('Name', '')}".strip()


class AwsCloudClient:
    """CloudClient backed by boto3 and the aws CLI."""

    def __init__(
        self,
        *,
        region: str | None = None,
        session_factory: Callable[..., Any] = boto3.Session,
        run_fn: Callable[..., CommandResult] = run_command,
    ) -> None:
        self._region = region
        self._session_factory = session_factory
        self._run = run_fn

    def _session(self) -> Any:
        return self._session_factory(region_name=self._region)

    def probe(self) -> ProbeResult:
        """List S3 buckets, the equivalent of `aws s3 ls`."""
        try:
            response = self._session().client("s3").list_buckets()
        except (BotoCoreError, ClientError) as exc:
            logger.info("Credential probe failed: %s", exc)
            return ProbeResult(succeeded=False, error=str(exc))

        lines = [_format_bucket(b) for b in response.get("Buckets", [])]
        return ProbeResult(succeeded=True, output="\n".join(lines))

    def configure(self) -> CommandResult:
        return self._run(["aws", "configure"], interactive=True)

    def publish_layer(
        self,
        *,
        layer_name: str,
        archive_path: Path,
        runtime: str,
        description: str,
        s3_bucket: str | None = None,
    ) -> PublishedLayer:
        """Publish archive_path as a new version of layer_name for one runtime.

        Raises botocore errors unchanged; the Publisher decides what is fatal.
        """
        session = self._session()
        if s3_bucket:
            key = f"{S3_KEY_PREFIX}/{archive_path.name}"
            logger.info("Uploading %s to s3://%s/%s", archive_path, s3_bucket, key)
            session.client("s3").upload_file(str(archive_path), s3_bucket, key)
            content: dict[str, Any] = {"S3Bucket": s3_bucket, "S3Key": key}
        else:
            content = {"ZipFile": archive_path.read_bytes()}

        response = session.client("lambda").publish_layer_version(
            LayerName=layer_name,
            Description=description,
            Content=content,
            CompatibleRuntimes=[runtime],
        )
        return PublishedLayer(
            layer_name=layer_name,
            version=int(response["Version"]),
            layer_version_arn=str(response["LayerVersionArn"]),
        )
