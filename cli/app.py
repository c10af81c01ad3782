"""
cli/app.py - 메인 CLI 엔트리포인트

Click 기반의 CLI 애플리케이션 진입점입니다.
호스트 배포 도구의 두 트리거 지점(제거 직전, 배포 직후)을 명령어로 제공합니다.

명령어 구조:
    csm --version               # 버전 표시
    csm remove                  # Child Stack 삭제 (removalPolicy=remove일 때만)
    csm deploy                  # Child Stack 업데이트 (upgradeFunction 호출)

    예시:
    csm remove -c serverless.yml -p my-profile -r ap-northeast-2
    csm remove --prefix tenant- --removal-policy remove --max-concurrent 3
    csm deploy --prefix tenant- --upgrade-function upgrade-tenant --continue-on-failure

설정 우선순위:
    명령줄 옵션 > serverless.yml의 custom.serverless-child-stack-manager > 기본값

종료 코드:
    0: 성공 또는 건너뜀
    1: 설정 오류, 목록 조회 실패, 중단된 Stack 작업
"""

import logging
from pathlib import Path
from typing import Any, Callable

import boto3
import click

from cli.ui.console import console, print_error, print_failure_table, print_info, print_success, print_warning
from cli.ui.progress import stack_progress
from core.config import DEFAULT_CONFIG_FILE, get_version
from core.exceptions import CSMError, format_error_for_user
from plugins.child_stacks import ChildStackManager, ChildStackManagerConfig, RemovalPolicy, RunOutcome, load_config_file

# Keep lightweight, centralized logging config
# WARNING 레벨로 설정하여 INFO 로그가 진행 상황 출력에 섞이지 않도록 함
logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

VERSION = get_version()


def _common_options(func: Callable) -> Callable:
    """remove/deploy 공통 옵션"""
    options = [
        click.option(
            "-c",
            "--config",
            "config_path",
            type=click.Path(dir_okay=False),
            default=None,
            help=f"설정 파일 (기본: ./{DEFAULT_CONFIG_FILE}가 있으면 사용)",
        ),
        click.option("--prefix", "prefix", default=None, help="Child Stack 이름 prefix"),
        click.option(
            "--max-concurrent",
            "max_concurrent",
            type=click.IntRange(min=1),
            default=None,
            help="최대 동시 작업 수 (기본: 5)",
        ),
        click.option(
            "--continue-on-failure/--stop-on-failure",
            "continue_on_failure",
            default=None,
            help="개별 Stack 실패 시 계속 진행 여부 (기본: 중단)",
        ),
        click.option("--monitor-frequency", type=click.FloatRange(min=0, min_open=True), default=None, help="상태 폴링 간격 (초)"),
        click.option("--monitor-timeout", type=click.FloatRange(min=0, min_open=True), default=None, help="Stack별 최대 대기 시간 (초)"),
        click.option("-p", "--profile", "profile", default=None, help="AWS 프로파일"),
        click.option("-r", "--region", "region", default=None, help="리전 (기본: 프로파일/환경 변수)"),
        click.option("-q", "--quiet", is_flag=True, help="진행 상황 표시 없이 결과만 출력"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.version_option(version=VERSION, prog_name="csm")
@click.option("-v", "--verbose", count=True, help="로그 상세도 (-v: INFO, -vv: DEBUG)")
def cli(verbose: int) -> None:
    """CloudFormation Child Stack 일괄 삭제/업데이트 도구"""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG if verbose > 1 else logging.INFO)


@cli.command()
@_common_options
@click.option(
    "--removal-policy",
    type=click.Choice(["keep", "remove"]),
    default=None,
    help="keep: 유지, remove: 삭제 (기본: keep)",
)
@click.option("--cfn-role", default=None, help="삭제 시 CloudFormation이 사용할 IAM Role ARN")
def remove(removal_policy: str | None, cfn_role: str | None, **options: Any) -> None:
    """prefix와 일치하는 Child Stack 삭제"""
    config = _load_config(options, removalPolicy=removal_policy, cfnRole=cfn_role)
    will_remove = config.removal_policy == RemovalPolicy.REMOVE
    exit_code = _run(config, options, "Removing child stacks", "before_remove", show_progress=will_remove)
    raise SystemExit(exit_code)


@cli.command()
@_common_options
@click.option("--upgrade-function", default=None, help="Stack마다 호출할 업그레이드 Lambda 함수")
def deploy(upgrade_function: str | None, **options: Any) -> None:
    """prefix와 일치하는 Child Stack마다 업그레이드 함수 호출"""
    config = _load_config(options, require_upgrade_function=True, upgradeFunction=upgrade_function)
    exit_code = _run(config, options, "Updating child stacks", "after_deploy")
    raise SystemExit(exit_code)


def _load_config(options: dict[str, Any], require_upgrade_function: bool = False, **extra: Any) -> ChildStackManagerConfig:
    """설정 파일과 명령줄 옵션을 합쳐 검증된 설정 생성

    설정 오류는 원격 호출 전에 메시지를 출력하고 종료 코드 1로 종료합니다.
    """
    try:
        config_path = options["config_path"]
        if config_path is None and Path(DEFAULT_CONFIG_FILE).exists():
            config_path = DEFAULT_CONFIG_FILE
        raw = load_config_file(config_path) if config_path else {}

        config = ChildStackManagerConfig.from_dict(
            raw,
            childStacksNamePrefix=options["prefix"],
            maxConcurrentCount=options["max_concurrent"],
            continueOnFailure=options["continue_on_failure"],
            monitorFrequency=options["monitor_frequency"],
            **extra,
        )
        if require_upgrade_function:
            config.require_upgrade_function()
        return config
    except Exception as e:
        print_error(format_error_for_user(e))
        raise SystemExit(1) from e


def _run(
    config: ChildStackManagerConfig,
    options: dict[str, Any],
    description: str,
    trigger: str,
    show_progress: bool = True,
) -> int:
    """Manager 생성 후 트리거(before_remove / after_deploy) 실행

    show_progress가 false면 (예: keep 정책) 시작 메시지와 진행 표시 없이 실행합니다.

    Returns:
        0: 성공 또는 건너뜀
        1: 실패
    """
    try:
        session = boto3.Session(profile_name=options["profile"], region_name=options["region"])
        manager = ChildStackManager.from_session(
            session,
            config,
            region_name=options["region"],
            monitor_timeout=options["monitor_timeout"],
        )

        if options["quiet"] or not show_progress:
            outcome = getattr(manager, trigger)()
        else:
            print_info(f"{description} prefixed with: {config.child_stacks_name_prefix}")
            with stack_progress(description) as tracker:
                outcome = getattr(manager, trigger)(progress_tracker=tracker)

    except KeyboardInterrupt:
        console.print("\n[dim]Cancelled[/dim]")
        return 130
    except Exception as e:
        print_error(format_error_for_user(e))
        detail = e.to_dict() if isinstance(e, CSMError) else repr(e)
        logging.getLogger(__name__).debug(f"실행 실패: {detail}", exc_info=True)
        return 1

    _print_outcome(outcome)
    return 0


def _print_outcome(outcome: RunOutcome) -> None:
    """실행 결과 출력"""
    if outcome.skipped:
        print_warning(outcome.message)
        return

    print_success(f"{outcome.message} ({outcome.processed}/{outcome.found} processed)")
    if outcome.failed:
        print_warning(
            f"{len(outcome.failed)} stack failure(s) ignored because continueOnFailure=true "
            f"({outcome.succeeded} succeeded)"
        )
        print_failure_table(outcome.failed)


if __name__ == "__main__":
    cli()
