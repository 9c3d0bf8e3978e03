"""Unit tests for layer_helper.cli."""

from __future__ import annotations

import importlib.util
import sys
from pathlib import Path
from typing import Any

import pytest
from conftest import AUTHENTICATED, FakeCloud, FakeInstaller, which_all

from layer_helper import cli
from layer_helper.pipeline import Collaborators, PipelineResult


def test_parse_args_defaults() -> None:
    args = cli.parse_args([])
    assert args.layer_name is None
    assert args.manifest == "requirements.txt"
    assert args.python_version == "3.10"
    assert args.edit is False
    assert args.yes is False


def test_parse_args_all_flags(tmp_path: Path) -> None:
    args = cli.parse_args(
        [
            "--layer-name",
            "my-layer.v2",
            "--manifest",
            "deps.txt",
            "--work-dir",
            str(tmp_path),
            "--python-version",
            "3.12",
            "--editor",
            "vim",
            "--s3-bucket",
            "layer-artifacts",
            "--edit",
            "-y",
            "-v",
        ]
    )
    assert args.layer_name == "my-layer.v2"
    assert args.work_dir == tmp_path
    assert args.python_version == "3.12"
    assert args.editor == "vim"
    assert args.s3_bucket == "layer-artifacts"
    assert args.edit and args.yes and args.verbose


def test_main_rejects_invalid_layer_name_without_running(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(cli, "run_pipeline", lambda *a, **k: pytest.fail("pipeline ran"))
    assert cli.main(["--layer-name", "bad name"]) == 1


def test_main_returns_pipeline_exit_code(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    seen: dict[str, Any] = {}

    def _run(ctx, collab, *, edit_first: bool, assume_yes: bool) -> PipelineResult:
        seen.update(ctx=ctx, edit_first=edit_first, assume_yes=assume_yes)
        return PipelineResult(exit_code=0)

    monkeypatch.setattr(cli, "run_pipeline", _run)
    code = cli.main(["--layer-name", "my-layer", "--work-dir", str(tmp_path), "--yes"])

    assert code == 0
    assert seen["ctx"].layer_name == "my-layer"
    assert seen["ctx"].work_dir == tmp_path.resolve()
    assert seen["assume_yes"] is True
    assert seen["edit_first"] is False


def test_main_prompts_for_layer_name(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "prompt_layer_name", lambda: "prompted-layer")
    seen: dict[str, Any] = {}

    def _run(ctx, collab, **kwargs: Any) -> PipelineResult:
        seen["ctx"] = ctx
        return PipelineResult(exit_code=1)

    monkeypatch.setattr(cli, "run_pipeline", _run)
    assert cli.main(["--work-dir", str(tmp_path)]) == 1
    assert seen["ctx"].layer_name == "prompted-layer"


def test_main_rejects_bad_python_version(tmp_path: Path) -> None:
    assert cli.main(["--layer-name", "x", "--python-version", "abc", "--work-dir", str(tmp_path)]) == 1


def test_main_interrupt_returns_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def _run(*args: Any, **kwargs: Any) -> PipelineResult:
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, "run_pipeline", _run)
    assert cli.main(["--layer-name", "x", "--work-dir", str(tmp_path)]) == 1


def test_build_layer_script_delegates_to_cli() -> None:
    repo_root = Path(__file__).resolve().parents[2]
    spec = importlib.util.spec_from_file_location(
        "build_layer_script", repo_root / "scripts" / "build_layer.py"
    )
    assert spec and spec.loader
    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    spec.loader.exec_module(module)  # type: ignore[union-attr]
    assert module.main is cli.main


def test_main_reports_undecodable_manifest_as_failure(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "requirements.txt").write_bytes(b"# caf\xe9\nrequests\n")
    cloud = FakeCloud([AUTHENTICATED])
    lines: list[str] = []

    def _collaborators(ctx) -> Collaborators:
        return Collaborators(
            installer=FakeInstaller(),
            cloud=cloud,
            open_editor=lambda path: None,
            confirm=lambda: True,
            decide=lambda: False,
            which_fn=which_all,
            output=lines.append,
        )

    monkeypatch.setattr(cli, "default_collaborators", _collaborators)
    code = cli.main(["--layer-name", "my-layer", "--work-dir", str(tmp_path), "--yes"])

    assert code == 1
    assert any("is not valid UTF-8" in line for line in lines)
    assert cloud.probe_calls == 0
