"""
serverless
----------

serverless CLI 의 라이프사이클 명령(deploy/remove/info/invoke/logs)을 감싸는 모듈.
실제 패키징/배포/로그 조회는 모두 serverless 에 위임한다.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from .config import KitConfig
from .logging_utils import get_logger
from .subprocess_utils import RunResult, run_command, stream_command


logger = get_logger(__name__)


# -f <function> 이 필요한 액션
_FUNCTION_ACTIONS = {"invoke", "logs"}


def build_command(
    cfg: KitConfig,
    action: str,
    *,
    stage: Optional[str] = None,
    extra: Sequence[str] = (),
) -> List[str]:
    cmd = [cfg.serverless_bin, action]
    if action in _FUNCTION_ACTIONS:
        cmd += ["-f", cfg.function]
    stage = cfg.resolve_stage(stage)
    if stage:
        cmd += ["--stage", stage]
    cmd += list(extra)
    return cmd


def _run(cfg: KitConfig, cmd: List[str], cwd: Optional[str]) -> RunResult:
    return run_command(
        cmd,
        cwd=cwd,
        timeout=cfg.command_timeout,
        show_progress=cfg.show_progress,
        spinner_message=f"{cmd[0]} {cmd[1]} 실행 중",
    )


def deploy(cfg: KitConfig, *, stage: Optional[str] = None, dry_run: bool = False,
           cwd: Optional[str] = None) -> str:
    """
    serverless deploy. dry_run 이면 --noDeploy 로 패키징까지만 수행한다.
    """
    extra = ["--noDeploy"] if dry_run else []
    return _run(cfg, build_command(cfg, "deploy", stage=stage, extra=extra), cwd).stdout


def remove(cfg: KitConfig, *, stage: Optional[str] = None, cwd: Optional[str] = None) -> str:
    return _run(cfg, build_command(cfg, "remove", stage=stage), cwd).stdout


def info(cfg: KitConfig, *, stage: Optional[str] = None, cwd: Optional[str] = None) -> str:
    return _run(cfg, build_command(cfg, "info", stage=stage), cwd).stdout


def invoke(cfg: KitConfig, *, stage: Optional[str] = None, data: Optional[str] = None,
           cwd: Optional[str] = None) -> str:
    extra = ["--data", data] if data is not None else []
    return _run(cfg, build_command(cfg, "invoke", stage=stage, extra=extra), cwd).stdout


def logs(cfg: KitConfig, *, stage: Optional[str] = None, tail: bool = False,
         cwd: Optional[str] = None) -> int:
    """
    serverless logs 를 streaming 모드로 실행하고 exit code 를 그대로 돌려준다.
    --tail 이면 사용자가 중단할 때까지 끝나지 않는다.
    """
    extra = ["--tail"] if tail else []
    return stream_command(build_command(cfg, "logs", stage=stage, extra=extra), cwd=cwd)
