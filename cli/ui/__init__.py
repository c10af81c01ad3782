# cli/ui - 콘솔 출력 컴포넌트 (rich)
"""
콘솔 출력 모듈

CLI 전용 UI 컴포넌트들 (콘솔 출력, 진행 상황 표시)
"""

from .console import (
    SYMBOL_ERROR,
    SYMBOL_INFO,
    SYMBOL_SUCCESS,
    SYMBOL_WARNING,
    console,
    get_console,
    print_error,
    print_failure_table,
    print_info,
    print_success,
    print_warning,
)
from .progress import StackProgressTracker, stack_progress

__all__ = [
    "SYMBOL_ERROR",
    "SYMBOL_INFO",
    "SYMBOL_SUCCESS",
    "SYMBOL_WARNING",
    "StackProgressTracker",
    "console",
    "get_console",
    "print_error",
    "print_failure_table",
    "print_info",
    "print_success",
    "print_warning",
    "stack_progress",
]
