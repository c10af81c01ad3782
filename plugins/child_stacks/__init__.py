"""
plugins/child_stacks - CloudFormation Child Stack 관리 도구

이름 prefix로 식별되는 Child Stack 전체를 CloudFormation 쓰로틀링 한도 안에서
일괄 삭제하거나 업그레이드 함수로 업데이트합니다.

## 사용 케이스
- 서비스 제거 전 서비스가 만든 테넌트별 Stack 정리 (removalPolicy=remove)
- 서비스 배포 후 모든 테넌트 Stack을 새 템플릿으로 업그레이드
"""

from .config import ChildStackManagerConfig, load_config_file
from .manager import ChildStackManager
from .types import RemovalPolicy, RunOutcome, RunStatus, StackActionKind

__all__ = [
    "ChildStackManager",
    "ChildStackManagerConfig",
    "RemovalPolicy",
    "RunOutcome",
    "RunStatus",
    "StackActionKind",
    "load_config_file",
    "run_remove",
    "run_deploy",
]


# CLI 진입점 함수들
def run_remove(
    session,
    config: dict | None = None,
    region: str | None = None,
    progress_tracker=None,
    **overrides,
) -> RunOutcome:
    """Child Stack 삭제 (removalPolicy=remove일 때만)

    Args:
        session: boto3.Session
        config: 설정 딕셔너리 (camelCase 키)
        region: 대상 리전
        progress_tracker: 진행 상황 추적기 (선택사항)
        **overrides: 덮어쓸 설정 (camelCase 키, None은 무시)
    """
    manager = ChildStackManager.from_session(
        session,
        ChildStackManagerConfig.from_dict(config, **overrides),
        region_name=region,
    )
    return manager.before_remove(progress_tracker=progress_tracker)


def run_deploy(
    session,
    config: dict | None = None,
    region: str | None = None,
    progress_tracker=None,
    **overrides,
) -> RunOutcome:
    """Child Stack 업데이트 (업그레이드 함수 호출)

    Args:
        session: boto3.Session
        config: 설정 딕셔너리 (camelCase 키)
        region: 대상 리전
        progress_tracker: 진행 상황 추적기 (선택사항)
        **overrides: 덮어쓸 설정 (camelCase 키, None은 무시)
    """
    manager = ChildStackManager.from_session(
        session,
        ChildStackManagerConfig.from_dict(config, **overrides),
        region_name=region,
    )
    return manager.after_deploy(progress_tracker=progress_tracker)
