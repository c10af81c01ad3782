"""
plugins/child_stacks/policy.py - 개별 Stack 실패 처리 정책

continueOnFailure 설정에 따라 작업 함수를 감쌉니다.

- False: 작업 함수를 그대로 반환. 실패는 스케줄러로 전파되어 전체 실행을 중단
- True: 모든 실패를 잡아 로그를 남기고 수집한 뒤 stack_id를 반환 (성공으로 다운그레이드).
        에러 종류는 구분하지 않습니다.
"""

from __future__ import annotations

import logging

from core.parallel.errors import FailureCollector
from core.parallel.scheduler import StackAction

logger = logging.getLogger(__name__)


def with_failure_policy(
    action: StackAction,
    continue_on_failure: bool,
    collector: FailureCollector | None = None,
) -> StackAction:
    """실패 처리 정책이 적용된 작업 함수 반환

    Args:
        action: stack_id -> stack_id 작업 함수
        continue_on_failure: True이면 실패를 무시하고 계속 진행
        collector: 무시된 실패를 기록할 수집기 (선택사항)

    Returns:
        정책이 적용된 작업 함수
    """
    if not continue_on_failure:
        return action

    def tolerant(stack_id: str) -> str:
        try:
            return action(stack_id)
        except Exception as e:
            logger.warning(f"Stack {stack_id} failed: {e}")
            logger.warning(f"Stack {stack_id} failure ignored because continueOnFailure=true")
            if collector is not None:
                collector.collect(e, stack_id)
            return stack_id

    return tolerant
