from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, List

from dotenv import load_dotenv


ENV_FILES_DEFAULT_ORDER = [".env", ".env.local"]


def load_env_files(base_dir: str = ".",
                   files: Optional[List[str]] = None) -> None:
    """
    주어진 디렉토리에서 .env 계열 파일을 순서대로 로드한다.
    후순위 파일이 같은 키를 덮어쓴다.
    """
    order = files or ENV_FILES_DEFAULT_ORDER
    for name in order:
        path = os.path.join(base_dir, name)
        if os.path.exists(path):
            load_dotenv(path, override=True)


def _get_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "y"}


@dataclass
class KitConfig:
    serverless_bin: str = "serverless"
    function: str = "main"
    default_stage: Optional[str] = None
    command_timeout: float = 900.0
    show_progress: bool = True

    def resolve_stage(self, stage: Optional[str]) -> Optional[str]:
        """--stage 가 없으면 DEFAULT_STAGE 를 사용한다. 둘 다 없으면 None."""
        if stage:
            return stage
        return self.default_stage or None

    @classmethod
    def from_env(cls) -> "KitConfig":
        invalid: List[str] = []

        function = os.getenv("SERVERLESS_FUNCTION", "main").strip()
        if not function:
            invalid.append("SERVERLESS_FUNCTION")

        timeout = 900.0
        raw_timeout = os.getenv("COMMAND_TIMEOUT_SECONDS")
        if raw_timeout is not None and raw_timeout.strip() != "":
            try:
                timeout = float(raw_timeout)
            except ValueError:
                invalid.append("COMMAND_TIMEOUT_SECONDS")
            else:
                if timeout <= 0:
                    invalid.append("COMMAND_TIMEOUT_SECONDS")

        if invalid:
            raise ValueError(
                "환경변수 값이 올바르지 않습니다: " + ", ".join(sorted(set(invalid)))
            )

        return cls(
            serverless_bin=os.getenv("SERVERLESS_BIN") or "serverless",
            function=function,
            default_stage=os.getenv("DEFAULT_STAGE") or None,
            command_timeout=timeout,
            show_progress=_get_bool("CLI_SHOW_PROGRESS", True),
        )
