import logging
import sys


# -vv 미만에서는 boto3/botocore 의 DEBUG 로그(요청 서명, 엔드포인트 해석 등)를 숨긴다.
_NOISY_LOGGERS = ("boto3", "botocore", "urllib3")


def setup_logging(verbosity: int = 0) -> None:
    level = logging.INFO
    if verbosity >= 1:
        level = logging.DEBUG

    # stdout 은 명령 결과(serverless 출력, 원격 실행 결과) 전용으로 남겨둔다.
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stderr,
    )

    if verbosity < 2:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
