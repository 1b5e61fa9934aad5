from __future__ import annotations

import base64
import io
import json
from typing import Any, Dict, List

import pytest
from click.testing import CliRunner

from lambda_kit import cli, preflight, remote_invoke, scaffold, serverless
from lambda_kit.subprocess_utils import CommandFailedError, MissingDependencyError


INFO_OUTPUT = "region: us-east-1\nstack: myapp-dev\n"


class _FakeLambda:
    def __init__(self, payload: Any) -> None:
        self._payload = payload

    def invoke(self, **kwargs: Any) -> Dict[str, Any]:  # noqa: ARG002
        return {
            "Payload": io.BytesIO(json.dumps(self._payload).encode()),
            "LogResult": base64.b64encode(b"REPORT Duration: 12 ms\n").decode(),
        }


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _use_lambda(monkeypatch: pytest.MonkeyPatch, payload: Any) -> None:
    monkeypatch.setattr(serverless, "info", lambda cfg, **kwargs: INFO_OUTPUT)
    monkeypatch.setattr(remote_invoke, "_default_client_factory", lambda region: _FakeLambda(payload))


def test_cli_uses_remote_exit_code(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    _use_lambda(monkeypatch, {"output": "hello", "exitCode": 3})

    result = runner.invoke(cli.main, ["cli", "echo", "hello"])

    assert result.exit_code == 3
    assert result.stdout == "hello"


def test_cli_passes_unknown_options_through(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    seen: List[Any] = []

    def fake_run(cfg, args, **kwargs):  # noqa: ANN001, ANN003
        seen.append((list(args), kwargs["stage"]))
        return 0

    monkeypatch.setattr(remote_invoke, "run_remote_cli", fake_run)

    result = runner.invoke(cli.main, ["cli", "--stage", "prod", "migrate", "--force"])

    assert result.exit_code == 0
    assert seen == [(["migrate", "--force"], "prod")]


def test_cli_missing_output_exits_one(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    _use_lambda(monkeypatch, {})

    result = runner.invoke(cli.main, ["cli", "ls"])

    assert result.exit_code == 1
    assert "[ERROR]" in result.stderr
    assert "REPORT Duration: 12 ms" in result.stderr


def test_cli_unparseable_info_exits_one(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(serverless, "info", lambda cfg, **kwargs: "stack: myapp-dev\n")

    result = runner.invoke(cli.main, ["cli", "ls"])

    assert result.exit_code == 1
    assert "region" in result.stderr


def test_deploy_failure_exits_one(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_deploy(cfg, **kwargs):  # noqa: ANN001, ANN003, ARG001
        raise CommandFailedError("명령 실행 실패: serverless deploy (exit=1)", cmd=["serverless"], returncode=1)

    monkeypatch.setattr(serverless, "deploy", failing_deploy)

    result = runner.invoke(cli.main, ["deploy", "--dry-run"])

    assert result.exit_code == 1
    assert "배포 실패" in result.stderr


def test_info_echoes_output(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(serverless, "info", lambda cfg, **kwargs: INFO_OUTPUT)

    result = runner.invoke(cli.main, ["info", "--stage", "dev"])

    assert result.exit_code == 0
    assert result.stdout == INFO_OUTPUT


def test_logs_forwards_exit_code(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    seen: List[Any] = []

    def fake_logs(cfg, *, stage=None, tail=False, cwd=None):  # noqa: ANN001, ARG001
        seen.append((stage, tail))
        return 2

    monkeypatch.setattr(serverless, "logs", fake_logs)

    result = runner.invoke(cli.main, ["logs", "-t", "--stage", "dev"])

    assert result.exit_code == 2
    assert seen == [("dev", True)]


def test_init_creates_templates(runner: CliRunner, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(preflight.shutil, "which", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr(preflight, "has_aws_credentials", lambda: True)

    def no_git(cmd, **kwargs):  # noqa: ANN001, ANN003, ARG001
        raise MissingDependencyError("git 없음")

    monkeypatch.setattr(scaffold, "run_command", no_git)

    first = runner.invoke(cli.main, ["-C", str(tmp_path), "init"])
    second = runner.invoke(cli.main, ["-C", str(tmp_path), "init"])

    assert first.exit_code == 0
    assert second.exit_code == 0
    assert (tmp_path / "serverless.yml").exists()
    assert (tmp_path / "handler.py").exists()
    assert "이미 존재" in second.stdout


def test_init_without_serverless_exits_one(runner: CliRunner, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(preflight.shutil, "which", lambda name: None)

    result = runner.invoke(cli.main, ["-C", str(tmp_path), "init"])

    assert result.exit_code == 1
    assert not (tmp_path / "serverless.yml").exists()


def test_init_without_credentials_exits_one(runner: CliRunner, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(preflight.shutil, "which", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr(preflight, "has_aws_credentials", lambda: False)

    result = runner.invoke(cli.main, ["-C", str(tmp_path), "init"])

    assert result.exit_code == 1
    assert "AWS" in result.stderr


def test_deploy_echoes_output(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    seen: List[Any] = []

    def fake_deploy(cfg, *, stage=None, dry_run=False, cwd=None):  # noqa: ANN001, ARG001
        seen.append((stage, dry_run))
        return "Service deployed to stack myapp-prod\n"

    monkeypatch.setattr(serverless, "deploy", fake_deploy)

    result = runner.invoke(cli.main, ["deploy", "--stage", "prod"])

    assert result.exit_code == 0
    assert result.stdout == "Service deployed to stack myapp-prod\n"
    assert seen == [("prod", False)]


def test_remove_echoes_output(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    seen: List[Any] = []

    def fake_remove(cfg, *, stage=None, cwd=None):  # noqa: ANN001, ARG001
        seen.append(stage)
        return "Stack removed\n"

    monkeypatch.setattr(serverless, "remove", fake_remove)

    result = runner.invoke(cli.main, ["remove", "--stage", "dev"])

    assert result.exit_code == 0
    assert result.stdout == "Stack removed\n"
    assert seen == ["dev"]


def test_invoke_passes_data(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    seen: List[Any] = []

    def fake_invoke(cfg, *, stage=None, data=None, cwd=None):  # noqa: ANN001, ARG001
        seen.append((stage, data))
        return '{"statusCode": 200}\n'

    monkeypatch.setattr(serverless, "invoke", fake_invoke)

    result = runner.invoke(cli.main, ["invoke", "-d", '{"name": "kit"}'])

    assert result.exit_code == 0
    assert result.stdout == '{"statusCode": 200}\n'
    assert seen == [(None, '{"name": "kit"}')]
