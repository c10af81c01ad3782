"""
core/exceptions.py - 통합 예외 계층 구조

애플리케이션 전체에서 사용되는 예외 클래스들을 정의합니다.
일관된 예외 처리와 에러 메시지를 제공합니다.

예외 계층 구조:
    CSMError (베이스)
    ├── ConfigError (설정 관련, 원격 호출 전에 발생)
    └── StackActionError (개별 Stack 작업 실패)
        ├── FunctionInvocationError (업그레이드 함수가 보고한 에러)
        └── StackMonitorError (Stack이 실패 상태로 종료 / 모니터 타임아웃)

Stack 목록 조회(ListStacks) 실패는 래핑하지 않고 botocore ClientError 그대로 전파합니다.

Usage:
    from core.exceptions import ConfigError, StackActionError

    if not prefix:
        raise ConfigError("childStacksNamePrefix", "childStacksNamePrefix is required")
"""

from typing import Any, Dict, Optional

# =============================================================================
# 베이스 예외
# =============================================================================


class CSMError(Exception):
    """Child Stack Manager 기본 예외 클래스

    모든 커스텀 예외의 베이스 클래스입니다.

    Attributes:
        message: 에러 메시지
        cause: 원인 예외 (체이닝용)
        details: 추가 상세 정보
    """

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details or {}

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """예외 정보를 딕셔너리로 반환"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "cause": str(self.cause) if self.cause else None,
            "details": self.details,
        }


# =============================================================================
# 설정 관련 예외
# =============================================================================


class ConfigError(CSMError):
    """설정 관련 예외

    필수 설정 누락, 잘못된 값 등. 원격 호출 전에 발생하며 재시도하지 않습니다.
    메시지는 그대로 사용자에게 노출됩니다 (예: "childStacksNamePrefix is required").
    """

    def __init__(
        self,
        key: str,
        message: str,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, cause)
        self.config_key = key
        self.details["config_key"] = key


# =============================================================================
# Stack 작업 관련 예외
# =============================================================================


class StackActionError(CSMError):
    """개별 Stack 작업 실패 예외

    Attributes:
        stack_id: 실패한 Stack ID
    """

    def __init__(
        self,
        stack_id: str,
        message: str,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, cause)
        self.stack_id = stack_id
        self.details["stack_id"] = stack_id


class FunctionInvocationError(StackActionError):
    """업그레이드 Lambda 함수가 실행되었으나 실패를 보고한 경우

    호출 자체의 실패(ClientError)와 구분하기 위해 함수가 반환한
    errorMessage를 그대로 메시지로 사용합니다.
    """

    def __init__(
        self,
        stack_id: str,
        message: str,
        function_error: Optional[str] = None,
    ):
        super().__init__(stack_id, message)
        self.function_error = function_error
        if function_error:
            self.details["function_error"] = function_error


class StackMonitorError(StackActionError):
    """Stack이 실패/롤백 상태로 종료되었거나 모니터링이 타임아웃된 경우"""

    def __init__(
        self,
        stack_id: str,
        message: str,
        status: Optional[str] = None,
        reason: Optional[str] = None,
    ):
        super().__init__(stack_id, message)
        self.status = status
        self.reason = reason
        self.details.update({"status": status, "reason": reason})


# =============================================================================
# 예외 유틸리티 함수
# =============================================================================


def _client_error_code(error: Exception) -> str:
    """botocore ClientError 형식의 예외에서 에러 코드 추출"""
    response = getattr(error, "response", None)
    if not isinstance(response, dict):
        return ""
    return response.get("Error", {}).get("Code", "")


def is_access_denied(error: Exception) -> bool:
    """액세스 거부 오류인지 확인

    Args:
        error: 확인할 예외

    Returns:
        액세스 거부 오류이면 True
    """
    return _client_error_code(error) in (
        "AccessDenied",
        "AccessDeniedException",
        "UnauthorizedAccess",
    )


def is_throttling(error: Exception) -> bool:
    """스로틀링 오류인지 확인

    Args:
        error: 확인할 예외

    Returns:
        스로틀링 오류이면 True
    """
    throttling_codes = {
        "Throttling",
        "ThrottlingException",
        "RequestLimitExceeded",
        "TooManyRequestsException",
        "RateExceeded",
    }
    return _client_error_code(error) in throttling_codes


def is_not_found(error: Exception) -> bool:
    """리소스를 찾을 수 없는 오류인지 확인

    CloudFormation은 없는 Stack에 대해 ValidationError("... does not exist")를 반환합니다.

    Args:
        error: 확인할 예외

    Returns:
        리소스 없음 오류이면 True
    """
    not_found_codes = {
        "ResourceNotFoundException",
        "NotFoundException",
        "StackNotFoundException",
    }

    code = _client_error_code(error)
    if code in not_found_codes:
        return True

    if code == "ValidationError":
        message = error.response.get("Error", {}).get("Message", "")  # type: ignore[attr-defined]
        return "does not exist" in message

    return False


def format_error_for_user(error: Exception) -> str:
    """사용자에게 표시할 에러 메시지 포맷팅

    Args:
        error: 예외

    Returns:
        사용자 친화적인 에러 메시지
    """
    if isinstance(error, CSMError):
        # 커스텀 예외는 이미 포맷팅됨
        return str(error)

    # boto3 ClientError
    response = getattr(error, "response", None)
    if isinstance(response, dict):
        error_info = response.get("Error", {})
        code = error_info.get("Code", "UnknownError")
        message = error_info.get("Message", str(error))

        friendly_messages = {
            "AccessDenied": "Access denied. Check the IAM policy of the caller.",
            "ExpiredToken": "Credentials have expired. Log in again.",
            "InvalidClientTokenId": "Invalid credentials.",
            "Throttling": "Too many requests. Retry later or lower maxConcurrentCount.",
        }

        return friendly_messages.get(code, f"{code}: {message}")

    return str(error)
