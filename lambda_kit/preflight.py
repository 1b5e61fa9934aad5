"""
preflight
---------

`init` 전에 serverless CLI 설치 여부와 AWS 자격 증명 존재 여부를 확인한다.
설치나 자격 증명 설정을 대신 해주지는 않고, 안내 메시지만 제공한다.
"""

from __future__ import annotations

import os
import shutil

from .config import KitConfig
from .logging_utils import get_logger
from .subprocess_utils import MissingDependencyError, run_command


logger = get_logger(__name__)


SETUP_DOCS_URL = "https://www.serverless.com/framework/docs/getting-started"
CREDENTIALS_DOCS_URL = "https://www.serverless.com/framework/docs/providers/aws/guide/credentials"

CREDENTIAL_ENV_VARS = ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY")


class MissingCredentialsError(RuntimeError):
    """AWS 자격 증명을 찾지 못한 경우."""


def ensure_executable(name: str) -> str:
    path = shutil.which(name)
    if path is None:
        raise MissingDependencyError(
            f"'{name}' 명령을 찾을 수 없습니다. 설치 방법은 {SETUP_DOCS_URL} 를 참고하세요."
        )
    logger.debug("실행 파일 확인: %s -> %s", name, path)
    return path


def _credentials_from_env() -> bool:
    return all(os.getenv(name) for name in CREDENTIAL_ENV_VARS)


def _credentials_from_aws_cli() -> bool:
    """`aws configure get aws_access_key_id` 로 credentials 파일 설정을 확인한다."""
    try:
        result = run_command(
            ["aws", "configure", "get", "aws_access_key_id"],
            timeout=30.0,
            check=False,
        )
    except MissingDependencyError:
        logger.debug("aws CLI 가 없어 credentials 파일 확인을 건너뜀")
        return False
    except RuntimeError as e:
        logger.warning("aws CLI 로 자격 증명 확인 중 오류: %s", e)
        return False
    return result.returncode == 0 and bool(result.stdout.strip())


def has_aws_credentials() -> bool:
    if _credentials_from_env():
        logger.debug("환경변수에서 AWS 자격 증명을 찾았습니다.")
        return True
    return _credentials_from_aws_cli()


def check_environment(cfg: KitConfig) -> None:
    """
    serverless 실행 파일과 AWS 자격 증명을 확인한다.
    문제가 있으면 MissingDependencyError / MissingCredentialsError 를 던진다.
    """
    ensure_executable(cfg.serverless_bin)

    if not has_aws_credentials():
        raise MissingCredentialsError(
            "AWS 자격 증명을 찾을 수 없습니다.\n"
            f"{' / '.join(CREDENTIAL_ENV_VARS)} 환경변수를 설정하거나 다음 명령으로 설정하세요:\n"
            "  serverless config credentials --provider aws --key <key> --secret <secret>\n"
            f"자세한 내용: {CREDENTIALS_DOCS_URL}"
        )
