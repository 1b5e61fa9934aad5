"""
scaffold
--------

`init` 에서 사용하는 템플릿 복사 및 git 연동.
git 연동은 best-effort 이며, 실패해도 init 자체는 성공으로 본다.
"""

from __future__ import annotations

import os
from importlib import resources
from typing import List, Sequence

from .logging_utils import get_logger
from .subprocess_utils import run_command


logger = get_logger(__name__)


TEMPLATE_PACKAGE = "lambda_kit.templates"
TEMPLATE_FILES = ("serverless.yml", "handler.py")

# serverless package/deploy 가 생성하는 산출물 디렉토리
ARTIFACTS_DIR = ".serverless"
_IGNORE_RULES = {ARTIFACTS_DIR, f"{ARTIFACTS_DIR}/", f"/{ARTIFACTS_DIR}", f"/{ARTIFACTS_DIR}/"}


def copy_templates(base_dir: str) -> List[str]:
    """
    base_dir 에 템플릿을 복사한다. 이미 같은 이름의 파일이 있으면 건너뛴다.

    Returns:
        새로 생성한 파일 이름 목록
    """
    created: List[str] = []
    for name in TEMPLATE_FILES:
        target = os.path.join(base_dir, name)
        if os.path.exists(target):
            logger.info("%s 이(가) 이미 존재하여 건너뜀", name)
            continue
        content = resources.files(TEMPLATE_PACKAGE).joinpath(name).read_text(encoding="utf-8")
        with open(target, "w", encoding="utf-8") as dst:
            dst.write(content)
        logger.info("%s 템플릿을 생성했습니다.", name)
        created.append(name)
    return created


def _git(args: Sequence[str], base_dir: str, *, check: bool = True):  # noqa: ANN202
    return run_command(["git", *args], cwd=base_dir, timeout=30.0, check=check)


def _is_git_work_tree(base_dir: str) -> bool:
    result = _git(["rev-parse", "--is-inside-work-tree"], base_dir, check=False)
    return result.returncode == 0 and result.stdout.strip() == "true"


def _ensure_ignored(base_dir: str) -> bool:
    """
    .serverless 가 ignore 되어 있지 않으면 .gitignore 에 한 줄 추가한다.
    추가했으면 True.
    """
    # 아직 없는 디렉토리는 파일로 취급되어 ".serverless/" 규칙에 안 걸리므로 내부 경로로 확인한다.
    # check-ignore: 0 = ignore 됨, 1 = ignore 안 됨
    inner_path = f"{ARTIFACTS_DIR}/.lambda-kit"
    result = _git(["check-ignore", "-q", inner_path], base_dir, check=False)
    if result.returncode == 0:
        return False

    path = os.path.join(base_dir, ".gitignore")
    prefix = ""
    if os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            existing = f.read()
        if _IGNORE_RULES & {line.strip() for line in existing.splitlines()}:
            return False
        if existing and not existing.endswith("\n"):
            prefix = "\n"
    with open(path, "a", encoding="utf-8") as f:
        f.write(f"{prefix}{ARTIFACTS_DIR}\n")
    logger.info(".gitignore 에 %s 를 추가했습니다.", ARTIFACTS_DIR)
    return True


def integrate_git(base_dir: str, created: Sequence[str]) -> None:
    """
    base_dir 이 git 작업 트리라면 새로 만든 파일을 stage 하고
    .serverless 산출물 디렉토리가 ignore 되도록 한다.
    """
    try:
        if not _is_git_work_tree(base_dir):
            logger.debug("git 작업 트리가 아니므로 git 연동을 건너뜀: %s", base_dir)
            return
        if created:
            _git(["add", "--", *created], base_dir)
            logger.info("git add: %s", ", ".join(created))
        _ensure_ignored(base_dir)
    except (RuntimeError, OSError) as e:
        logger.warning("git 연동에 실패했습니다 (무시하고 계속 진행): %s", e)
