import sys
from typing import NoReturn, Optional

import click

from .config import load_env_files, KitConfig
from .logging_utils import setup_logging, get_logger
from . import preflight, remote_invoke, scaffold, serverless


logger = get_logger(__name__)


stage_option = click.option(
    "--stage",
    "stage",
    type=str,
    default=None,
    help="배포 stage (예: dev, prod). 생략하면 DEFAULT_STAGE 또는 serverless 기본값을 사용합니다.",
)


@click.group()
@click.option(
    "-C",
    "--chdir",
    "chdir",
    type=click.Path(file_okay=False, dir_okay=True, exists=True),
    default=".",
    help="작업 디렉토리 (기본: 현재 디렉토리)",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="로그 레벨을 DEBUG로 올립니다. (-vv 이면 boto3/botocore 로그까지 출력)",
)
@click.pass_context
def main(ctx: click.Context, chdir: str, verbose: int) -> None:
    """Serverless Framework + AWS Lambda 배포/운영 CLI"""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["chdir"] = chdir
    ctx.obj["verbose"] = verbose


def _load_config_from_ctx(ctx: click.Context) -> KitConfig:
    base_dir: str = ctx.obj["chdir"]
    load_env_files(base_dir)
    try:
        cfg = KitConfig.from_env()
    except ValueError as e:
        click.echo(f"[ERROR] 설정 로드 실패: {e}", err=True)
        sys.exit(1)
    logger.debug("Config loaded: %s", cfg)
    return cfg


def _fail(message: str, e: Exception) -> NoReturn:
    click.echo(f"[ERROR] {message}: {e}", err=True)
    sys.exit(1)


@main.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """
    현재 디렉토리에 serverless.yml / handler.py 템플릿을 생성하고 git 에 stage 한다.
    """
    cfg = _load_config_from_ctx(ctx)
    base_dir: str = ctx.obj["chdir"]

    try:
        preflight.check_environment(cfg)
    except RuntimeError as e:
        click.echo(f"[ERROR] {e}", err=True)
        sys.exit(1)

    created = scaffold.copy_templates(base_dir)
    for name in scaffold.TEMPLATE_FILES:
        if name in created:
            click.echo(f"{name} 템플릿을 생성했습니다.")
        else:
            click.echo(f"{name} 이(가) 이미 존재하여 건너뜀")

    scaffold.integrate_git(base_dir, created)
    click.echo("초기화 완료. `lambda-kit deploy` 로 배포하세요.")


@main.command()
@click.option(
    "--dry-run",
    "dry_run",
    is_flag=True,
    help="실제 배포 없이 패키징까지만 수행합니다.",
)
@stage_option
@click.pass_context
def deploy(ctx: click.Context, dry_run: bool, stage: Optional[str]) -> None:
    """serverless deploy 실행"""
    cfg = _load_config_from_ctx(ctx)
    try:
        output = serverless.deploy(cfg, stage=stage, dry_run=dry_run, cwd=ctx.obj["chdir"])
    except RuntimeError as e:
        logger.debug("deploy 실패", exc_info=True)
        _fail("배포 실패", e)
    click.echo(output, nl=False)


@main.command(
    name="cli",
    context_settings={"ignore_unknown_options": True},
)
@stage_option
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def cli_command(ctx: click.Context, stage: Optional[str], args: tuple[str, ...]) -> None:
    """
    배포된 Lambda 함수에서 명령을 실행한다.
    종료 코드는 원격 명령의 exitCode 를 따른다.
    """
    cfg = _load_config_from_ctx(ctx)
    try:
        exit_code = remote_invoke.run_remote_cli(cfg, args, stage=stage, cwd=ctx.obj["chdir"])
    except RuntimeError as e:
        logger.debug("원격 실행 실패", exc_info=True)
        _fail("원격 실행 실패", e)
    sys.exit(exit_code)


@main.command()
@stage_option
@click.pass_context
def info(ctx: click.Context, stage: Optional[str]) -> None:
    """serverless info 실행"""
    cfg = _load_config_from_ctx(ctx)
    try:
        output = serverless.info(cfg, stage=stage, cwd=ctx.obj["chdir"])
    except RuntimeError as e:
        _fail("info 조회 실패", e)
    click.echo(output, nl=False)


@main.command()
@stage_option
@click.pass_context
def remove(ctx: click.Context, stage: Optional[str]) -> None:
    """serverless remove 실행 (배포된 스택 삭제)"""
    cfg = _load_config_from_ctx(ctx)
    try:
        output = serverless.remove(cfg, stage=stage, cwd=ctx.obj["chdir"])
    except RuntimeError as e:
        _fail("삭제 실패", e)
    click.echo(output, nl=False)


@main.command()
@stage_option
@click.option(
    "-t",
    "--tail",
    "tail",
    is_flag=True,
    help="로그를 계속 따라갑니다. (Ctrl-C 로 중단)",
)
@click.pass_context
def logs(ctx: click.Context, stage: Optional[str], tail: bool) -> None:
    """serverless logs 실행. 종료 코드는 serverless 의 종료 코드를 따른다."""
    cfg = _load_config_from_ctx(ctx)
    try:
        exit_code = serverless.logs(cfg, stage=stage, tail=tail, cwd=ctx.obj["chdir"])
    except RuntimeError as e:
        _fail("로그 조회 실패", e)
    sys.exit(exit_code)


@main.command()
@stage_option
@click.option(
    "-d",
    "--data",
    "data",
    type=str,
    default=None,
    help="함수에 전달할 이벤트 데이터 (serverless invoke --data)",
)
@click.pass_context
def invoke(ctx: click.Context, stage: Optional[str], data: Optional[str]) -> None:
    """serverless invoke 실행"""
    cfg = _load_config_from_ctx(ctx)
    try:
        output = serverless.invoke(cfg, stage=stage, data=data, cwd=ctx.obj["chdir"])
    except RuntimeError as e:
        _fail("invoke 실패", e)
    click.echo(output, nl=False)
