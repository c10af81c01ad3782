"""
core/parallel - 동시 실행 제한 처리 모듈

CloudFormation 쓰로틀링 한도 안에서 여러 Stack 작업을 동시에 처리합니다.

주요 구성 요소:
- BoundedScheduler: 동시 작업 수를 제한하며 대기열을 채워 나가는 스케줄러
- get_client: adaptive retry가 적용된 boto3 client
- FailureCollector: 무시된 Stack 실패 수집기

Example:
    from core.parallel import BoundedScheduler

    scheduler = BoundedScheduler(max_concurrent=5)
    processed = scheduler.run(stack_ids, delete_action)

Example (진행 상황 표시):
    from cli.ui.progress import stack_progress

    with stack_progress("Removing child stacks") as tracker:
        scheduler.run(stack_ids, delete_action, progress_tracker=tracker)
"""

from .client import get_client
from .decorators import categorize_error, get_error_code, is_retryable
from .errors import FailureCollector, StackFailure
from .scheduler import BoundedScheduler, ProgressTracker, StackAction, run_bounded
from .types import ErrorCategory

__all__: list[str] = [
    # Scheduler
    "BoundedScheduler",
    "ProgressTracker",
    "StackAction",
    "run_bounded",
    # Client (retry 적용)
    "get_client",
    # Error handling
    "ErrorCategory",
    "FailureCollector",
    "StackFailure",
    "categorize_error",
    "get_error_code",
    "is_retryable",
]
