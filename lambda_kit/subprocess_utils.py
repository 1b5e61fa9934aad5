from __future__ import annotations

import queue
import subprocess
import sys
import threading
import time
from dataclasses import dataclass
from textwrap import shorten
from typing import IO, Mapping, Sequence

from .logging_utils import get_logger


logger = get_logger(__name__)


class MissingDependencyError(RuntimeError):
    """실행 파일을 PATH 에서 찾지 못한 경우."""


class CommandFailedError(RuntimeError):
    def __init__(self, message: str, *, cmd: Sequence[str], returncode: int) -> None:
        super().__init__(message)
        self.cmd = list(cmd)
        self.returncode = returncode


@dataclass(frozen=True)
class RunResult:
    returncode: int
    stdout: str
    stderr: str


def _is_tty(stream) -> bool:  # noqa: ANN001
    try:
        return bool(getattr(stream, "isatty") and stream.isatty())
    except Exception:  # noqa: BLE001
        return False


class Spinner:
    """
    간단한 CLI 스피너(로딩 애니메이션).

    serverless deploy 처럼 출력 없이 오래 걸리는 buffered 실행에서
    '멈춘 것 같은' UX를 방지한다. stderr 에만 그린다.
    """

    def __init__(self, message: str = "작업 처리 중", *, interval: float = 0.12) -> None:
        self._message = message
        self._interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._frames = ["|", "/", "-", "\\"]

    def start(self) -> None:
        if self._thread is not None:
            return

        def _run() -> None:
            idx = 0
            while not self._stop.is_set():
                frame = self._frames[idx % len(self._frames)]
                sys.stderr.write(f"\r{self._message} {frame}")
                sys.stderr.flush()
                idx += 1
                time.sleep(self._interval)

        self._thread = threading.Thread(target=_run, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=1.0)
        # 줄 정리
        sys.stderr.write("\r" + (" " * (len(self._message) + 4)) + "\r")
        sys.stderr.flush()


def _not_found(cmd: Sequence[str]) -> MissingDependencyError:
    return MissingDependencyError(
        f"필요한 명령을 찾을 수 없습니다: {cmd[0]} (설치되어 있고 PATH 에 있는지 확인하세요)"
    )


def run_command(
    cmd: Sequence[str],
    *,
    cwd: str | None = None,
    env: Mapping[str, str] | None = None,
    timeout: float | None = 900.0,
    check: bool = True,
    show_progress: bool = False,
    spinner_message: str | None = None,
) -> RunResult:
    """
    buffered 실행: 종료까지 기다린 뒤 stdout/stderr 를 캡처해서 돌려준다.

    - check=True 이고 exit code 가 0 이 아니면 CommandFailedError
    - show_progress=True 이고 stderr 가 TTY 이면 대기 중 스피너를 그린다
    """
    logger.info("명령 실행: %s", " ".join(cmd))

    spinner: Spinner | None = None
    if show_progress and _is_tty(sys.stderr):
        spinner = Spinner(spinner_message or shorten(" ".join(cmd), width=60, placeholder="…"))
        spinner.start()

    try:
        result = subprocess.run(  # noqa: S603
            list(cmd),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            cwd=cwd,
            env=dict(env) if env is not None else None,
        )
    except FileNotFoundError as e:
        raise _not_found(cmd) from e
    except subprocess.TimeoutExpired as e:
        raise RuntimeError(
            f"명령 실행이 {timeout}초 안에 끝나지 않았습니다: {' '.join(cmd)}"
        ) from e
    finally:
        if spinner is not None:
            spinner.stop()

    stdout = result.stdout or ""
    stderr = result.stderr or ""
    if stdout:
        logger.debug("명령 stdout: %s", shorten(stdout.strip(), width=2000))
    if stderr:
        logger.debug("명령 stderr: %s", shorten(stderr.strip(), width=2000))

    if check and result.returncode != 0:
        detail = ""
        if stderr.strip():
            detail = "\nstderr:\n" + shorten(stderr.strip(), width=2000)
        elif stdout.strip():
            detail = "\nstdout:\n" + shorten(stdout.strip(), width=2000)
        raise CommandFailedError(
            f"명령 실행 실패: {' '.join(cmd)} (exit={result.returncode}){detail}",
            cmd=cmd,
            returncode=result.returncode,
        )

    return RunResult(returncode=result.returncode, stdout=stdout, stderr=stderr)


def stream_command(
    cmd: Sequence[str],
    *,
    cwd: str | None = None,
    env: Mapping[str, str] | None = None,
) -> int:
    """
    streaming 실행: 타임아웃 없이 stdout/stderr 를 줄 단위로 각각의 터미널 스트림에 흘린다.

    `serverless logs --tail` 처럼 끝나지 않는 명령을 위한 모드.
    exit code 를 그대로 돌려주며, 0 이 아니어도 예외로 취급하지 않는다.
    중단은 OS 시그널(Ctrl-C)에 맡긴다.
    """
    logger.info("명령 실행(stream): %s", " ".join(cmd))

    try:
        proc = subprocess.Popen(  # noqa: S603
            list(cmd),
            cwd=cwd,
            env=dict(env) if env is not None else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            bufsize=1,
        )
    except FileNotFoundError as e:
        raise _not_found(cmd) from e

    # (스트림 이름, 줄) 혹은 (스트림 이름, None) = 해당 스트림 EOF
    q: queue.Queue[tuple[str, str | None]] = queue.Queue()

    def _reader(name: str, pipe: IO[str]) -> None:
        try:
            for line in pipe:
                q.put((name, line))
        finally:
            q.put((name, None))

    assert proc.stdout is not None and proc.stderr is not None
    readers = [
        threading.Thread(target=_reader, args=("stdout", proc.stdout), daemon=True),
        threading.Thread(target=_reader, args=("stderr", proc.stderr), daemon=True),
    ]
    for t in readers:
        t.start()

    open_streams = len(readers)
    try:
        while open_streams:
            name, line = q.get()
            if line is None:
                open_streams -= 1
                continue
            target = sys.stdout if name == "stdout" else sys.stderr
            target.write(line)
            target.flush()

        for t in readers:
            t.join(timeout=1.0)
        returncode = proc.wait()
    finally:
        proc.stdout.close()
        proc.stderr.close()

    logger.debug("명령 종료(stream): exit=%s", returncode)
    return returncode
