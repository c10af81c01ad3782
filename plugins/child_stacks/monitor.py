"""
plugins/child_stacks/monitor.py - Stack 완료 모니터

DeleteStack / 업그레이드 함수 호출은 요청이 "수락"되었음을 의미할 뿐 완료가 아닙니다.
StackMonitor는 DescribeStacks를 일정 간격(기본 10초)으로 폴링하여
Stack이 작업 종류에 맞는 종료 상태에 도달할 때까지 기다립니다.

종료 상태 판정:
    removal: DELETE_COMPLETE (또는 Stack 없음) → 성공, DELETE_FAILED → 실패
    update:  UPDATE_COMPLETE / CREATE_COMPLETE / IMPORT_COMPLETE → 성공,
             *_FAILED / *ROLLBACK_COMPLETE / DELETE_COMPLETE → 실패
    그 외 (*_IN_PROGRESS 등)는 계속 폴링

CloudFormation waiter는 DELETE_IN_PROGRESS 같은 중간 상태를 에러로 보고 멈추는 경우가 있어
직접 폴링합니다.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any, Protocol

from botocore.exceptions import ClientError

from core.exceptions import StackMonitorError, is_not_found
from core.parallel.decorators import is_retryable

from .config import DEFAULT_MONITOR_FREQUENCY
from .types import StackActionKind, StackStatus

logger = logging.getLogger(__name__)

UPDATE_SUCCESS_STATES = frozenset(
    {
        StackStatus.UPDATE_COMPLETE.value,
        StackStatus.CREATE_COMPLETE.value,
        StackStatus.IMPORT_COMPLETE.value,
    }
)


class CompletionMonitor(Protocol):
    """Stack 작업 완료 대기 인터페이스"""

    def wait(self, kind: StackActionKind, stack_id: str) -> str:
        """Stack이 종료 상태에 도달할 때까지 대기하고 최종 상태를 반환

        Raises:
            StackMonitorError: 실패 상태로 종료
        """
        ...


def is_terminal_success(kind: StackActionKind, status: str) -> bool:
    """작업 종류 기준 성공 종료 상태인지 확인"""
    if kind == StackActionKind.REMOVAL:
        return status == StackStatus.DELETE_COMPLETE.value
    return status in UPDATE_SUCCESS_STATES


def is_terminal_failure(kind: StackActionKind, status: str) -> bool:
    """작업 종류 기준 실패 종료 상태인지 확인"""
    if kind == StackActionKind.REMOVAL:
        return status == StackStatus.DELETE_FAILED.value
    return (
        status.endswith("_FAILED")
        or status.endswith("ROLLBACK_COMPLETE")
        or status == StackStatus.DELETE_COMPLETE.value
    )


class StackMonitor:
    """DescribeStacks 폴링 기반 완료 모니터

    여러 워커 스레드가 하나의 인스턴스를 공유합니다 (인스턴스 상태 없음).

    Attributes:
        frequency: 폴링 간격 (초)
        timeout: 최대 대기 시간 (초, None이면 무제한)
    """

    def __init__(
        self,
        cfn: Any,
        frequency: float = DEFAULT_MONITOR_FREQUENCY,
        timeout: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """초기화

        Args:
            cfn: CloudFormation boto3 client
            frequency: 폴링 간격 (초)
            timeout: 최대 대기 시간 (초, None이면 무제한)
            sleep: 대기 함수 (테스트용 주입)
            clock: 단조 시계 함수 (테스트용 주입)
        """
        self._cfn = cfn
        self.frequency = frequency
        self.timeout = timeout
        self._sleep = sleep
        self._clock = clock

    def wait(self, kind: StackActionKind, stack_id: str) -> str:
        """Stack이 종료 상태에 도달할 때까지 폴링

        Args:
            kind: 작업 종류
            stack_id: Stack ID

        Returns:
            최종 Stack 상태

        Raises:
            StackMonitorError: 실패 상태로 종료되었거나 타임아웃
            ClientError: 재시도 불가능한 DescribeStacks 에러
        """
        deadline = self._clock() + self.timeout if self.timeout is not None else None

        while True:
            described = self._describe(kind, stack_id)

            if described is not None:
                status, reason = described

                if is_terminal_success(kind, status):
                    logger.debug(f"Stack {stack_id} {kind.value} 완료: {status}")
                    return status

                if is_terminal_failure(kind, status):
                    message = f"Stack {stack_id} {kind.value} failed with status {status}"
                    if reason:
                        message = f"{message}: {reason}"
                    raise StackMonitorError(stack_id, message, status=status, reason=reason)

                logger.debug(f"Stack {stack_id} 진행 중: {status}")

            if deadline is not None and self._clock() >= deadline:
                raise StackMonitorError(
                    stack_id,
                    f"Timed out after {self.timeout:g}s waiting for stack {stack_id} {kind.value}",
                    status=described[0] if described else None,
                )

            self._sleep(self.frequency)

    def _describe(self, kind: StackActionKind, stack_id: str) -> tuple[str, str | None] | None:
        """현재 Stack 상태 조회

        Returns:
            (상태, 상태 사유) 또는 일시적 에러로 이번 폴링을 건너뛰면 None
        """
        try:
            stacks = self._cfn.describe_stacks(StackName=stack_id).get("Stacks") or []
        except ClientError as e:
            if kind == StackActionKind.REMOVAL and is_not_found(e):
                return StackStatus.DELETE_COMPLETE.value, None
            if is_retryable(e):
                logger.warning(f"Stack {stack_id} 상태 조회 실패, 다음 폴링에서 재시도: {e}")
                return None
            raise

        if not stacks:
            if kind == StackActionKind.REMOVAL:
                return StackStatus.DELETE_COMPLETE.value, None
            raise StackMonitorError(stack_id, f"Stack {stack_id} not found")

        stack = stacks[0]
        return stack["StackStatus"], stack.get("StackStatusReason")
