"""
remote_invoke
-------------

`lambda-kit cli` 구현.

serverless invoke 는 함수 로그와 결과가 한 스트림에 섞여 나오기 때문에 구조화된
결과를 받기 어렵다. 그래서 `serverless info` 출력에서 region/stack 을 읽어 낸 뒤
Lambda Invoke API 를 boto3 로 직접 호출한다.
"""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

import boto3
import click
from botocore.exceptions import BotoCoreError, ClientError

from . import serverless
from .config import KitConfig
from .logging_utils import get_logger


logger = get_logger(__name__)


REGION_PREFIX = "region: "
STACK_PREFIX = "stack: "


class StatusParseError(RuntimeError):
    """serverless info 출력에서 region/stack 을 찾지 못한 경우."""


class RemoteInvokeError(RuntimeError):
    """Lambda Invoke API 호출 자체가 실패한 경우."""


@dataclass(frozen=True)
class ServerlessStatus:
    region: str
    stack: str

    def function_name(self, function: str = "main") -> str:
        return f"{self.stack}-{function}"


@dataclass(frozen=True)
class InvokeResult:
    payload: Any
    log_tail: str


def parse_status(text: str) -> ServerlessStatus:
    """
    `serverless info` 출력에서 "region: " / "stack: " 으로 시작하는 줄을 찾는다.
    같은 접두어가 여러 번 나오면 마지막 값을 사용한다.
    """
    region = ""
    stack = ""
    for line in text.splitlines():
        if line.startswith(REGION_PREFIX):
            region = line[len(REGION_PREFIX):].strip()
        elif line.startswith(STACK_PREFIX):
            stack = line[len(STACK_PREFIX):].strip()

    if not region:
        raise StatusParseError("serverless info 출력에서 region 을 찾을 수 없습니다.")
    if not stack:
        raise StatusParseError("serverless info 출력에서 stack 이름을 찾을 수 없습니다.")
    return ServerlessStatus(region=region, stack=stack)


def build_payload(args: Sequence[str]) -> str:
    return json.dumps({"cli": " ".join(args)})


def _decode_log_tail(log_result: Optional[str]) -> str:
    if not log_result:
        return ""
    try:
        return base64.b64decode(log_result).decode("utf-8", errors="replace")
    except (binascii.Error, ValueError):
        logger.debug("LogResult 를 base64 로 디코딩하지 못했습니다.")
        return log_result


def _decode_payload(raw: bytes | str) -> Any:
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        logger.debug("Lambda 응답이 JSON 이 아닙니다: %s", text[:200])
        return text


def invoke_function(client: Any, function_name: str, payload: str) -> InvokeResult:
    logger.info("Lambda 호출: %s", function_name)
    logger.debug("Lambda payload: %s", payload)
    try:
        response = client.invoke(
            FunctionName=function_name,
            InvocationType="RequestResponse",
            LogType="Tail",
            Payload=payload,
        )
    except (ClientError, BotoCoreError) as e:
        raise RemoteInvokeError(f"Lambda 함수 호출 실패 ({function_name}): {e}") from e

    body = response.get("Payload")
    raw = body.read() if body is not None else b""
    return InvokeResult(
        payload=_decode_payload(raw),
        log_tail=_decode_log_tail(response.get("LogResult")),
    )


def report_result(result: InvokeResult) -> int:
    """
    결과를 출력하고 로컬 프로세스의 exit code 를 돌려준다.

    - "output" 이 있으면 그대로 출력하고 "exitCode" (없으면 1) 로 종료
    - 없으면 에러 + 로그 tail + 응답 전체를 출력하고 1 로 종료
    """
    payload = result.payload
    if isinstance(payload, dict) and "output" in payload:
        click.echo(str(payload["output"]), nl=False)
        raw_code = payload.get("exitCode", 1)
        try:
            code = int(raw_code)
        except (TypeError, ValueError):
            logger.warning("exitCode 값이 정수가 아닙니다: %r", raw_code)
            return 1
        # exit status 는 0..255 (256 은 0 으로 잘린다)
        if not 0 <= code <= 255:
            logger.warning("exitCode %s 가 0..255 범위를 벗어나 1 로 종료합니다.", code)
            return 1
        return code

    click.echo("[ERROR] Lambda 응답에 output 이 없습니다.", err=True)
    if result.log_tail:
        click.echo("## 함수 로그 (tail)", err=True)
        click.echo(result.log_tail, err=True)
    click.echo(json.dumps(payload, indent=2, ensure_ascii=False), err=True)
    return 1


def _default_client_factory(region: str) -> Any:
    return boto3.client("lambda", region_name=region)


def run_remote_cli(
    cfg: KitConfig,
    args: Sequence[str],
    *,
    stage: Optional[str] = None,
    cwd: Optional[str] = None,
    client_factory: Optional[Callable[[str], Any]] = None,
) -> int:
    """
    serverless info -> region/stack 파싱 -> Lambda 직접 호출 -> 결과 출력.
    파싱 실패 시 StatusParseError 를 던지며 원격 호출은 하지 않는다.
    """
    status = parse_status(serverless.info(cfg, stage=stage, cwd=cwd))
    function_name = status.function_name(cfg.function)
    logger.debug("region=%s function=%s", status.region, function_name)

    factory = client_factory or _default_client_factory
    client = factory(status.region)
    result = invoke_function(client, function_name, build_payload(args))
    return report_result(result)
