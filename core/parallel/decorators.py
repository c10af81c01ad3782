"""
core/parallel/decorators.py - AWS API 에러 분류 유틸리티

AWS API 호출의 에러 분류와 재시도 가능 여부 판단을 제공합니다.

주요 구성 요소:
- categorize_error: 예외를 ErrorCategory로 분류
- get_error_code: 예외에서 에러 코드 추출
- is_retryable: 재시도 가능 여부 판단 (Stack 모니터 폴링에서 사용)
"""

import logging

from core.exceptions import (
    FunctionInvocationError,
    StackMonitorError,
    is_access_denied,
    is_not_found,
    is_throttling,
)

from .types import ErrorCategory

logger = logging.getLogger(__name__)

# 재시도 가능한 AWS 에러 코드
RETRYABLE_ERROR_CODES: set[str] = {
    "Throttling",
    "ThrottlingException",
    "RequestLimitExceeded",
    "TooManyRequestsException",
    "RateExceeded",
    "ServiceUnavailable",
    "ServiceUnavailableException",
    "InternalError",
    "InternalServiceError",
    "RequestTimeout",
    "RequestTimeoutException",
}


def categorize_error(error: Exception) -> ErrorCategory:
    """예외 객체를 분석하여 ErrorCategory로 분류

    커스텀 Stack 예외는 타입으로, ClientError는 response의 에러 코드로,
    네트워크/타임아웃 에러는 타입으로 분류합니다.

    Args:
        error: 분류할 예외

    Returns:
        에러 카테고리
    """
    if isinstance(error, FunctionInvocationError):
        return ErrorCategory.FUNCTION_ERROR
    if isinstance(error, StackMonitorError):
        return ErrorCategory.STACK_FAILED

    if is_throttling(error):
        return ErrorCategory.THROTTLING
    if is_access_denied(error):
        return ErrorCategory.ACCESS_DENIED
    if is_not_found(error):
        return ErrorCategory.NOT_FOUND

    # ClientError 상세 분류
    response = getattr(error, "response", None)
    if isinstance(response, dict):
        error_code = response.get("Error", {}).get("Code", "")

        if "Timeout" in error_code:
            return ErrorCategory.TIMEOUT

        if error_code in ("ExpiredToken", "ExpiredTokenException"):
            return ErrorCategory.EXPIRED_TOKEN

    # 네트워크 에러
    if isinstance(error, (ConnectionError, TimeoutError, OSError)):
        return ErrorCategory.NETWORK

    return ErrorCategory.UNKNOWN


def get_error_code(error: Exception) -> str:
    """예외 객체에서 에러 코드 문자열 추출

    ClientError의 경우 response에서 Code를 추출하고,
    그 외에는 예외 클래스명을 반환합니다.

    Args:
        error: 예외 객체

    Returns:
        에러 코드 문자열
    """
    response = getattr(error, "response", None)
    if isinstance(response, dict):
        code: str = response.get("Error", {}).get("Code", "Unknown")
        return code
    return error.__class__.__name__


def is_retryable(error: Exception) -> bool:
    """재시도 가능한 에러인지 확인

    RETRYABLE_ERROR_CODES에 포함된 에러 코드이거나
    네트워크/타임아웃 에러인 경우 True를 반환합니다.

    Args:
        error: 확인할 예외

    Returns:
        재시도 가능하면 True
    """
    response = getattr(error, "response", None)
    if isinstance(response, dict):
        error_code = response.get("Error", {}).get("Code", "")
        return error_code in RETRYABLE_ERROR_CODES

    return isinstance(error, (ConnectionError, TimeoutError))
