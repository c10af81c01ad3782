"""
core/parallel/types.py - 병렬 실행 공용 타입

에러 분류(ErrorCategory)를 정의합니다.
"""

from enum import Enum


class ErrorCategory(Enum):
    """에러 카테고리

    실패한 Stack 작업의 원인을 분류하여 요약 보고에 사용합니다.
    """

    THROTTLING = "throttling"
    ACCESS_DENIED = "access_denied"
    NOT_FOUND = "not_found"
    NETWORK = "network"
    TIMEOUT = "timeout"
    EXPIRED_TOKEN = "expired_token"
    FUNCTION_ERROR = "function_error"  # 업그레이드 함수가 보고한 에러
    STACK_FAILED = "stack_failed"  # Stack이 실패/롤백 상태로 종료
    UNKNOWN = "unknown"
