"""
plugins/child_stacks/manager.py - Child Stack Manager

호스트(CLI, 배포 파이프라인 등)의 두 트리거 지점에서 호출되는 진입점입니다.

- before_remove(): 서비스 제거 직전. removalPolicy=remove일 때만 Child Stack 삭제
- after_deploy(): 서비스 배포 직후. 업그레이드 함수를 Child Stack마다 호출

흐름:
    설정 검증 → list_matching_stacks() → BoundedScheduler.run(with_failure_policy(action))
    → RunOutcome (REMOVED / UPDATED / SKIPPED) 또는 첫 번째 실패 예외 전파

Example:
    import boto3

    config = ChildStackManagerConfig.from_dict({"childStacksNamePrefix": "tenant-", "removalPolicy": "remove"})
    manager = ChildStackManager.from_session(boto3.Session(), config)
    outcome = manager.before_remove()
    print(outcome.message, outcome.processed)
"""

from __future__ import annotations

import logging
from typing import Any

from core.parallel.client import DEFAULT_MAX_POOL_CONNECTIONS, get_client
from core.parallel.errors import FailureCollector
from core.parallel.scheduler import BoundedScheduler, ProgressTracker

from .actions import make_stack_action
from .config import ChildStackManagerConfig
from .enumerator import list_matching_stacks
from .monitor import CompletionMonitor, StackMonitor
from .policy import with_failure_policy
from .types import (
    MSG_REMOVED,
    MSG_SKIP_REMOVE_EMPTY,
    MSG_SKIP_REMOVE_POLICY,
    MSG_SKIP_UPDATE_EMPTY,
    MSG_UPDATED,
    RemovalPolicy,
    RunOutcome,
    RunStatus,
    StackActionKind,
)

logger = logging.getLogger(__name__)


class ChildStackManager:
    """Child Stack 일괄 삭제/업데이트 관리자

    실행 간 상태를 보관하지 않습니다. 같은 인스턴스에서 remove와 update를
    동시에 실행하는 것은 지원하지 않습니다.
    """

    def __init__(
        self,
        config: ChildStackManagerConfig,
        cfn: Any,
        lambda_client: Any = None,
        monitor: CompletionMonitor | None = None,
    ):
        """초기화

        Args:
            config: 검증된 설정
            cfn: CloudFormation boto3 client
            lambda_client: Lambda boto3 client (update 실행 시 필요)
            monitor: 완료 모니터 (None이면 StackMonitor)
        """
        self.config = config
        self.cfn = cfn
        self.lambda_client = lambda_client
        self.monitor = monitor or StackMonitor(cfn, frequency=config.monitor_frequency)

    @classmethod
    def from_session(
        cls,
        session: Any,
        config: ChildStackManagerConfig,
        region_name: str | None = None,
        monitor_timeout: float | None = None,
    ) -> ChildStackManager:
        """boto3 Session으로부터 생성

        연결 풀은 동시 작업 수 이상으로 설정합니다.

        Args:
            session: boto3 Session
            config: 검증된 설정
            region_name: 리전 (None이면 세션 리전. 둘 다 없으면 boto3가 NoRegionError를 던짐)
            monitor_timeout: Stack별 최대 대기 시간 (초, None이면 무제한)
        """
        region_name = region_name or session.region_name
        pool_size = max(DEFAULT_MAX_POOL_CONNECTIONS, config.max_concurrent_count)
        cfn = get_client(session, "cloudformation", region_name=region_name, max_pool_connections=pool_size)
        lambda_client = get_client(session, "lambda", region_name=region_name, max_pool_connections=pool_size)
        monitor = StackMonitor(cfn, frequency=config.monitor_frequency, timeout=monitor_timeout)
        return cls(config, cfn, lambda_client=lambda_client, monitor=monitor)

    def before_remove(self, progress_tracker: ProgressTracker | None = None) -> RunOutcome:
        """prefix와 일치하는 Child Stack 삭제

        removalPolicy=keep이면 목록 조회 없이 건너뜁니다.

        Args:
            progress_tracker: 진행 상황 추적기 (선택사항)

        Returns:
            RunOutcome (REMOVED 또는 SKIPPED)
        """
        prefix = self.config.child_stacks_name_prefix

        if self.config.removal_policy != RemovalPolicy.REMOVE:
            logger.info(MSG_SKIP_REMOVE_POLICY)
            return RunOutcome(status=RunStatus.SKIPPED, message=MSG_SKIP_REMOVE_POLICY)

        logger.info(f"Removing stacks prefixed with: {prefix}")
        stack_ids = list_matching_stacks(self.cfn, prefix)
        logger.info(f"Found {len(stack_ids)} stacks")

        if not stack_ids:
            logger.info(MSG_SKIP_REMOVE_EMPTY)
            return RunOutcome(status=RunStatus.SKIPPED, message=MSG_SKIP_REMOVE_EMPTY)

        logger.info("Starting delete operation")
        processed, collector = self._execute(StackActionKind.REMOVAL, stack_ids, progress_tracker)
        logger.info(MSG_REMOVED)

        return RunOutcome(
            status=RunStatus.REMOVED,
            message=MSG_REMOVED,
            found=len(stack_ids),
            processed=processed,
            failed=tuple(collector.failures),
        )

    def after_deploy(self, progress_tracker: ProgressTracker | None = None) -> RunOutcome:
        """prefix와 일치하는 Child Stack마다 업그레이드 함수 호출

        upgradeFunction이 없으면 원격 호출 전에 ConfigError를 던집니다.

        Args:
            progress_tracker: 진행 상황 추적기 (선택사항)

        Returns:
            RunOutcome (UPDATED 또는 SKIPPED)
        """
        self.config.require_upgrade_function()
        if self.lambda_client is None:
            raise ValueError("lambda_client is required to update child stacks")

        prefix = self.config.child_stacks_name_prefix
        logger.info(f"Deploying stacks prefixed with: {prefix}")
        stack_ids = list_matching_stacks(self.cfn, prefix)
        logger.info(f"Found {len(stack_ids)} stacks")

        if not stack_ids:
            logger.info(MSG_SKIP_UPDATE_EMPTY)
            return RunOutcome(status=RunStatus.SKIPPED, message=MSG_SKIP_UPDATE_EMPTY)

        logger.info("Starting update operation")
        processed, collector = self._execute(StackActionKind.UPDATE, stack_ids, progress_tracker)
        logger.info(MSG_UPDATED)

        return RunOutcome(
            status=RunStatus.UPDATED,
            message=MSG_UPDATED,
            found=len(stack_ids),
            processed=processed,
            failed=tuple(collector.failures),
        )

    def _execute(
        self,
        kind: StackActionKind,
        stack_ids: list[str],
        progress_tracker: ProgressTracker | None,
    ) -> tuple[int, FailureCollector]:
        """작업 함수에 실패 정책을 적용하여 스케줄러로 실행"""
        collector = FailureCollector(kind.value)
        action = with_failure_policy(
            make_stack_action(kind, self.cfn, self.lambda_client, self.monitor, self.config),
            self.config.continue_on_failure,
            collector,
        )

        scheduler = BoundedScheduler(self.config.max_concurrent_count)
        processed = scheduler.run(
            stack_ids,
            action,
            progress_tracker=progress_tracker,
            is_success=lambda stack_id: not collector.has_failed(stack_id),
        )

        if collector.has_errors:
            logger.warning(f"무시된 실패: {collector.get_summary()}")

        return processed, collector
