"""
core/parallel/scheduler.py - 동시 실행 수 제한 스케줄러

Stack ID 목록 전체에 대해 작업 함수를 실행하되, 동시에 진행 중인 작업 수가
max_concurrent를 넘지 않도록 합니다. 작업 하나가 끝날 때마다 대기열(backlog)에서
다음 Stack을 꺼내 바로 시작하므로, 대기열이 빌 때까지 항상 max_concurrent개의
작업이 진행됩니다 (CloudFormation 쓰로틀링 한도를 넘지 않으면서 처리량 최대화).

ThreadPoolExecutor 기반이며, 완료 순서는 제출 순서가 아니라 먼저 끝난 순서입니다.

실패 처리:
- 작업 함수가 예외를 던지면 그 예외가 run()의 예외로 그대로 전파됩니다.
- 실패가 관측된 뒤에는 새 작업을 시작하지 않습니다.
- 이미 시작된 작업은 취소하거나 기다리지 않습니다. 백그라운드에서 계속 실행되며 결과는 버려집니다.
- 실패를 무시하고 계속하려면 작업 함수를 plugins.child_stacks.policy.with_failure_policy로 감싸세요.

Example:
    from core.parallel.scheduler import BoundedScheduler

    scheduler = BoundedScheduler(max_concurrent=5)
    processed = scheduler.run(stack_ids, lambda stack_id: delete_stack(cfn, monitor, stack_id))
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Sequence
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Protocol

logger = logging.getLogger(__name__)

StackAction = Callable[[str], str]


class ProgressTracker(Protocol):
    """스케줄러 진행 상황 수신자 (cli.ui.progress.StackProgressTracker 등)"""

    def set_total(self, total: int) -> None: ...

    def on_complete(self, success: bool) -> None: ...


class BoundedScheduler:
    """동시 실행 수 제한 스케줄러

    하나의 run() 호출 동안 backlog와 in-flight 맵은 호출 스레드만 읽고 씁니다.
    워커 스레드는 작업 함수만 실행하므로 별도의 락이 필요 없습니다.

    Attributes:
        max_concurrent: 동시에 진행할 수 있는 최대 작업 수 (1 이상)
    """

    def __init__(self, max_concurrent: int = 5):
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be >= 1, got {max_concurrent}")
        self.max_concurrent = max_concurrent

    def run(
        self,
        stack_ids: Sequence[str],
        action: StackAction,
        progress_tracker: ProgressTracker | None = None,
        is_success: Callable[[str], bool] | None = None,
    ) -> int:
        """모든 Stack에 작업 함수를 실행

        Args:
            stack_ids: 대상 Stack ID 목록 (각 ID는 정확히 한 번 시작됨)
            action: stack_id -> stack_id 작업 함수
            progress_tracker: 진행 상황 추적기 (선택사항)
            is_success: 정상 반환된 작업의 성공 여부 판정 함수. 실패를 무시하고 반환한
                작업을 추적기에 실패로 표시할 때 사용 (기본: 정상 반환은 모두 성공)

        Returns:
            정상 반환된 작업 수

        Raises:
            작업 함수가 던진 첫 번째 예외
        """
        backlog = deque(stack_ids)
        if not backlog:
            logger.debug("실행할 Stack이 없습니다")
            return 0

        if progress_tracker:
            progress_tracker.set_total(len(backlog))

        logger.info(f"Stack 작업 시작: {len(backlog)}개, max_concurrent={self.max_concurrent}")

        in_flight: dict[Future[str], str] = {}
        completed = 0

        executor = ThreadPoolExecutor(
            max_workers=min(self.max_concurrent, len(backlog)),
            thread_name_prefix="stack-action",
        )
        try:
            # 초기 배치
            while backlog and len(in_flight) < self.max_concurrent:
                stack_id = backlog.popleft()
                in_flight[executor.submit(action, stack_id)] = stack_id

            while in_flight:
                done, _ = wait(in_flight, return_when=FIRST_COMPLETED)

                # 동시에 끝난 작업 중 실패가 있으면 새 작업을 시작하기 전에 먼저 처리
                for future in sorted(done, key=lambda f: f.exception() is None):
                    stack_id = in_flight.pop(future)
                    error = future.exception()

                    if error is not None:
                        if progress_tracker:
                            progress_tracker.on_complete(success=False)
                        logger.error(
                            f"Stack {stack_id} 작업 실패, 중단합니다 "
                            f"(진행 중 {len(in_flight)}개는 기다리지 않음, 미시작 {len(backlog)}개): {error}"
                        )
                        raise error

                    completed += 1
                    logger.info(f"Stack {future.result()} operation completed.")
                    if progress_tracker:
                        success = is_success(stack_id) if is_success else True
                        progress_tracker.on_complete(success=success)

                    # 완료된 슬롯을 다음 Stack으로 채움
                    if backlog:
                        next_id = backlog.popleft()
                        in_flight[executor.submit(action, next_id)] = next_id
        finally:
            # 실패 시 진행 중인 작업은 기다리지 않음
            executor.shutdown(wait=not in_flight)

        logger.info(f"Stack 작업 완료: {completed}개")
        return completed


def run_bounded(
    stack_ids: Sequence[str],
    max_concurrent: int,
    action: StackAction,
    progress_tracker: ProgressTracker | None = None,
    is_success: Callable[[str], bool] | None = None,
) -> int:
    """BoundedScheduler 편의 함수

    Args:
        stack_ids: 대상 Stack ID 목록
        max_concurrent: 최대 동시 작업 수
        action: stack_id -> stack_id 작업 함수
        progress_tracker: 진행 상황 추적기 (선택사항)
        is_success: 정상 반환된 작업의 성공 여부 판정 함수 (선택사항)

    Returns:
        정상 반환된 작업 수
    """
    return BoundedScheduler(max_concurrent).run(
        stack_ids, action, progress_tracker=progress_tracker, is_success=is_success
    )
