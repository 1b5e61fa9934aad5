import pytest

from lambda_kit.config import KitConfig, load_env_files


def test_defaults_when_env_is_empty() -> None:
    cfg = KitConfig.from_env()

    assert cfg.serverless_bin == "serverless"
    assert cfg.function == "main"
    assert cfg.default_stage is None
    assert cfg.command_timeout == 900.0
    assert cfg.show_progress is True


def test_invalid_timeout_raises_value_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COMMAND_TIMEOUT_SECONDS", "soon")

    with pytest.raises(ValueError) as excinfo:
        KitConfig.from_env()

    assert "COMMAND_TIMEOUT_SECONDS" in str(excinfo.value)


def test_non_positive_timeout_and_empty_function_are_both_reported(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("COMMAND_TIMEOUT_SECONDS", "0")
    monkeypatch.setenv("SERVERLESS_FUNCTION", "  ")

    with pytest.raises(ValueError) as excinfo:
        KitConfig.from_env()

    assert "COMMAND_TIMEOUT_SECONDS" in str(excinfo.value)
    assert "SERVERLESS_FUNCTION" in str(excinfo.value)


def test_resolve_stage_prefers_explicit_stage() -> None:
    cfg = KitConfig(default_stage="dev")

    assert cfg.resolve_stage("prod") == "prod"
    assert cfg.resolve_stage(None) == "dev"
    assert KitConfig().resolve_stage(None) is None


def test_load_env_files_later_file_overrides(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".env").write_text("DEFAULT_STAGE=dev\nSERVERLESS_BIN=sls\n", encoding="utf-8")
    (tmp_path / ".env.local").write_text("DEFAULT_STAGE=staging\n", encoding="utf-8")

    load_env_files(str(tmp_path))
    cfg = KitConfig.from_env()

    assert cfg.default_stage == "staging"
    assert cfg.serverless_bin == "sls"
