"""
plugins/child_stacks/types.py - Child Stack 공용 타입

Stack 상태, 작업 종류, 실행 결과 타입을 정의합니다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from core.parallel.errors import StackFailure


class StackStatus(str, Enum):
    """이 도구가 다루는 CloudFormation Stack 상태"""

    # 안정 상태 (목록 조회 대상)
    CREATE_COMPLETE = "CREATE_COMPLETE"
    ROLLBACK_COMPLETE = "ROLLBACK_COMPLETE"
    UPDATE_COMPLETE = "UPDATE_COMPLETE"
    IMPORT_COMPLETE = "IMPORT_COMPLETE"
    UPDATE_ROLLBACK_COMPLETE = "UPDATE_ROLLBACK_COMPLETE"

    # 삭제 종료 상태
    DELETE_COMPLETE = "DELETE_COMPLETE"
    DELETE_FAILED = "DELETE_FAILED"


# 작업 대상이 될 수 있는 안정 상태. 전이 중인 Stack은 중복 작업 방지를 위해 제외
STABLE_STATES: frozenset[StackStatus] = frozenset(
    {
        StackStatus.CREATE_COMPLETE,
        StackStatus.ROLLBACK_COMPLETE,
        StackStatus.UPDATE_COMPLETE,
        StackStatus.IMPORT_COMPLETE,
        StackStatus.UPDATE_ROLLBACK_COMPLETE,
    }
)

# ListStacks StackStatusFilter (열거형 선언 순서로 고정)
STABLE_STATE_FILTER: list[str] = [status.value for status in StackStatus if status in STABLE_STATES]


class StackActionKind(str, Enum):
    """Stack 작업 종류 (실행 함수와 모니터 동작을 결정)"""

    REMOVAL = "removal"
    UPDATE = "update"


class RemovalPolicy(str, Enum):
    """서비스 제거 시 Child Stack 처리 정책

    - keep: Child Stack을 그대로 둠
    - remove: prefix와 일치하는 Child Stack을 모두 삭제
    """

    KEEP = "keep"
    REMOVE = "remove"


class RunStatus(str, Enum):
    """실행 결과 상태"""

    REMOVED = "removed"
    UPDATED = "updated"
    SKIPPED = "skipped"


# 사용자 표시 메시지
MSG_REMOVED = "Stacks successfully removed"
MSG_UPDATED = "Stacks successfully updated"
MSG_SKIP_REMOVE_POLICY = "Skipping remove of child stacks because of removalPolicy setting"
MSG_SKIP_REMOVE_EMPTY = "Skipping remove of child stacks because no stacks found"
MSG_SKIP_UPDATE_EMPTY = "Skipping update of child stacks because no stacks found"


@dataclass(frozen=True)
class RunOutcome:
    """한 번의 remove/update 실행 결과

    Attributes:
        status: 결과 상태
        message: 사용자 표시 메시지
        found: 발견된 Stack 수
        processed: 완료로 처리된 Stack 수 (무시된 실패 포함)
        failed: continueOnFailure로 무시된 실패 목록
    """

    status: RunStatus
    message: str
    found: int = 0
    processed: int = 0
    failed: tuple[StackFailure, ...] = field(default_factory=tuple)

    @property
    def skipped(self) -> bool:
        """건너뛴 실행인지 여부"""
        return self.status == RunStatus.SKIPPED

    @property
    def succeeded(self) -> int:
        """실제로 성공한 Stack 수"""
        return self.processed - len(self.failed)
