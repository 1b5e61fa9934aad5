"""
pytest 설정:

- repo root 를 sys.path 최상단에 고정해서 site-packages 에 설치된 다른 버전의
  lambda_kit 이 아니라 현재 소스를 테스트한다.
- 개발자 셸의 설정 환경변수가 테스트 결과에 영향을 주지 않도록 비운다.
"""

from __future__ import annotations

import os
import sys

import pytest


KIT_ENV_VARS = (
    "SERVERLESS_BIN",
    "SERVERLESS_FUNCTION",
    "DEFAULT_STAGE",
    "COMMAND_TIMEOUT_SECONDS",
    "CLI_SHOW_PROGRESS",
)


def pytest_configure() -> None:
    repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


@pytest.fixture(autouse=True)
def clean_kit_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # load_dotenv 가 os.environ 을 직접 바꾸므로 setenv 로 먼저 복원 대상에 등록한다.
    for name in KIT_ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
