"""
core/parallel/errors.py - 무시된 Stack 실패 수집

continueOnFailure=true로 실행할 때 무시(성공으로 다운그레이드)된
개별 Stack 실패를 스레드 안전하게 수집하고 요약합니다.

주요 구성 요소:
- StackFailure: 수집된 실패 상세 정보
- FailureCollector: 스레드 세이프 실패 수집기

Example:
    collector = FailureCollector("removal")

    try:
        delete_stack(stack_id)
    except Exception as e:
        collector.collect(e, stack_id)

    if collector.has_errors:
        print(collector.get_summary())
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime

from .decorators import categorize_error, get_error_code
from .types import ErrorCategory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StackFailure:
    """수집된 Stack 실패 정보

    Attributes:
        timestamp: 실패 시각
        stack_id: 실패한 Stack ID
        operation: 작업 종류 (예: "removal", "update")
        error_code: 에러 코드 (ClientError 코드 또는 예외 클래스명)
        error_message: 에러 메시지
        category: 에러 카테고리
    """

    timestamp: datetime
    stack_id: str
    operation: str
    error_code: str
    error_message: str
    category: ErrorCategory

    def __str__(self) -> str:
        return f"[{self.category.value}] {self.stack_id} - {self.operation}: {self.error_message}"

    def to_dict(self) -> dict[str, str]:
        """딕셔너리로 변환 (로깅/직렬화용)"""
        return {
            "timestamp": self.timestamp.isoformat(),
            "stack_id": self.stack_id,
            "operation": self.operation,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "category": self.category.value,
        }


class FailureCollector:
    """스레드 세이프 실패 수집기

    여러 워커 스레드에서 동시에 발생하는 실패를 안전하게 수집합니다.
    """

    def __init__(self, operation: str):
        """초기화

        Args:
            operation: 작업 종류 (수집된 실패에 공통 적용)
        """
        self.operation = operation
        self._failures: list[StackFailure] = []
        self._lock = threading.Lock()

    def collect(self, error: Exception, stack_id: str) -> StackFailure:
        """예외를 분류하여 수집

        Args:
            error: 발생한 예외
            stack_id: 실패한 Stack ID

        Returns:
            수집된 StackFailure
        """
        failure = StackFailure(
            timestamp=datetime.now(),
            stack_id=stack_id,
            operation=self.operation,
            error_code=get_error_code(error),
            error_message=str(error),
            category=categorize_error(error),
        )

        with self._lock:
            self._failures.append(failure)

        logger.debug(f"실패 수집: {failure}")
        return failure

    @property
    def failures(self) -> list[StackFailure]:
        """수집된 모든 실패의 복사본 반환"""
        with self._lock:
            return list(self._failures)

    @property
    def has_errors(self) -> bool:
        """실패 존재 여부"""
        with self._lock:
            return len(self._failures) > 0

    def has_failed(self, stack_id: str) -> bool:
        """해당 Stack의 실패가 수집되었는지 여부"""
        with self._lock:
            return any(f.stack_id == stack_id for f in self._failures)

    def get_summary(self) -> str:
        """카테고리별 실패 건수를 포함한 요약 문자열 반환

        Returns:
            포맷팅된 요약 문자열 (예: "3 failures (stack_failed: 2, throttling: 1)")
        """
        with self._lock:
            if not self._failures:
                return "no failures"

            by_category: dict[str, int] = {}
            for f in self._failures:
                by_category[f.category.value] = by_category.get(f.category.value, 0) + 1

            parts = [f"{k}: {v}" for k, v in sorted(by_category.items())]
            return f"{len(self._failures)} failures ({', '.join(parts)})"

    def clear(self) -> None:
        """수집된 실패 전체 초기화"""
        with self._lock:
            self._failures.clear()
