"""Shared fixtures and fakes for layer_helper tests."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

_SRC = Path(__file__).resolve().parents[1] / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

from layer_helper.cloud import ProbeResult, PublishedLayer  # noqa: E402
from layer_helper.commands import CommandResult  # noqa: E402
from layer_helper.config import LayerContext  # noqa: E402

REGION = "eu-west-2"


@pytest.fixture(autouse=True)
def aws_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Minimal AWS env for boto3 and moto.  Never reaches real AWS."""
    monkeypatch.setenv("AWS_REGION", REGION)
    monkeypatch.setenv("AWS_DEFAULT_REGION", REGION)
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.delenv("LAYER_HELPER_EDITOR", raising=False)
    monkeypatch.delenv("LAYER_HELPER_S3_BUCKET", raising=False)
    monkeypatch.delenv("EDITOR", raising=False)


@pytest.fixture
def ctx(tmp_path: Path) -> LayerContext:
    return LayerContext(
        layer_name="my-layer.v2",
        work_dir=tmp_path,
        manifest_path=tmp_path / "requirements.txt",
        region=REGION,
    )


class Console:
    """Collects output lines and serves scripted input lines."""

    def __init__(self, answers: list[str] | None = None) -> None:
        self.lines: list[str] = []
        self.prompts: list[str] = []
        self._answers: Iterator[str] = iter(answers or [])

    def output(self, msg: str) -> None:
        self.lines.append(msg)

    def input(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return next(self._answers)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


@pytest.fixture
def console() -> Console:
    return Console()


class FakeCloud:
    """Scripted CloudClient.  Probe results are consumed in order."""

    def __init__(
        self,
        probes: list[ProbeResult] | None = None,
        *,
        publish_error: Exception | None = None,
    ) -> None:
        self._probes = list(probes or [ProbeResult(succeeded=True, output="2024-01-01 bucket")])
        self.publish_error = publish_error
        self.probe_calls = 0
        self.configure_calls = 0
        self.published: list[dict[str, object]] = []

    def probe(self) -> ProbeResult:
        self.probe_calls += 1
        if len(self._probes) > 1:
            return self._probes.pop(0)
        return self._probes[0]

    def configure(self) -> CommandResult:
        self.configure_calls += 1
        return CommandResult(command="aws configure", return_code=0)

    def publish_layer(
        self,
        *,
        layer_name: str,
        archive_path: Path,
        runtime: str,
        description: str,
        s3_bucket: str | None = None,
    ) -> PublishedLayer:
        if self.publish_error is not None:
            raise self.publish_error
        self.published.append(
            {
                "layer_name": layer_name,
                "archive_path": archive_path,
                "archive_exists": archive_path.exists(),
                "runtime": runtime,
                "description": description,
                "s3_bucket": s3_bucket,
            }
        )
        return PublishedLayer(
            layer_name=layer_name,
            version=len(self.published),
            layer_version_arn=(
                f"arn:aws:lambda:{REGION}:123456789012:layer:{layer_name}:{len(self.published)}"
            ),
        )


UNAUTHENTICATED = ProbeResult(succeeded=False, error="Unable to locate credentials")
AUTHENTICATED = ProbeResult(succeeded=True, output="2024-01-01 00:00:00 my-bucket")


def _write(path: Path, content: str = "") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


class FakeInstaller:
    """PackageInstaller that lays out a realistic site-packages tree on disk."""

    def __init__(self, *, fail_step: str | None = None) -> None:
        self.fail_step = fail_step
        self.calls: list[str] = []

    def _result(self, step: str, command: str) -> CommandResult:
        self.calls.append(step)
        if step == self.fail_step:
            return CommandResult(
                command=command,
                return_code=1,
                stderr=f"ERROR: {step} failed",
            )
        return CommandResult(command=command, return_code=0)

    def site_packages(self, env_dir: Path, python_version: str) -> Path:
        return env_dir / "lib" / "python3.10" / "site-packages"

    def create_environment(self, interpreter: str, env_dir: Path) -> CommandResult:
        result = self._result("create", f"{interpreter} -m venv {env_dir}")
        if result.ok:
            site = self.site_packages(env_dir, "3.10")
            _write(site / "pip" / "__init__.py")
            _write(site / "pip" / "__pycache__" / "__init__.cpython-310.pyc")
            _write(site / "pip-23.0.1.dist-info" / "METADATA")
            _write(site / "setuptools" / "__init__.py")
            _write(site / "setuptools-65.5.0.dist-info" / "RECORD")
            _write(site / "pkg_resources" / "__init__.py")
            _write(site / "_distutils_hack" / "__init__.py")
            _write(site / "distutils-precedence.pth", "import _distutils_hack")
        return result

    def upgrade_pip(self, env_dir: Path) -> CommandResult:
        return self._result("upgrade", f"{env_dir}/bin/python -m pip install --upgrade pip")

    def install_requirements(self, env_dir: Path, manifest: Path) -> CommandResult:
        result = self._result("install", f"{env_dir}/bin/python -m pip install -r {manifest}")
        if result.ok:
            site = self.site_packages(env_dir, "3.10")
            _write(site / "requests" / "__init__.py", "__version__ = '2.31.0'\n")
            _write(site / "requests" / "api.py")
            _write(site / "requests" / "__pycache__" / "api.cpython-310.pyc")
            _write(site / "requests-2.31.0.dist-info" / "METADATA")
            _write(site / "urllib3" / "contrib" / "__pycache__" / "socks.cpython-310.pyc")
            _write(site / "urllib3" / "contrib" / "socks.py")
            _write(site / "__pycache__" / "six.cpython-310.pyc")
            _write(site / "six.py")
        return result


def which_all(tool: str) -> str | None:
    return f"/usr/bin/{tool}"


def which_none(tool: str) -> str | None:
    return None
