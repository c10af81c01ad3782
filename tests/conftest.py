"""
tests/conftest.py - pytest 공통 픽스처

AWS API 모킹과 테스트 헬퍼를 제공합니다.

Usage:
    def test_something(mock_cfn_client, recording_monitor):
        # mock_cfn_client: ListStacks 페이지네이터가 설정된 CloudFormation client 모킹
        # recording_monitor: 호출을 기록하는 CompletionMonitor
        pass
"""

import os
import sys
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


# =============================================================================
# 환경 설정
# =============================================================================


@pytest.fixture(autouse=True)
def setup_test_environment():
    """테스트 환경 설정"""
    os.environ.setdefault("AWS_DEFAULT_REGION", "ap-northeast-2")
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

    yield


# =============================================================================
# 유틸리티 함수
# =============================================================================


def create_mock_client_error(
    error_code: str,
    error_message: str = "Test error",
    operation: str = "TestOperation",
) -> Exception:
    """ClientError 생성 헬퍼"""
    from botocore.exceptions import ClientError

    return ClientError(
        {
            "Error": {
                "Code": error_code,
                "Message": error_message,
            }
        },
        operation,
    )


def stack_summary(name: str, stack_id: Optional[str] = None) -> Dict[str, Any]:
    """ListStacks StackSummary 생성 헬퍼"""
    return {
        "StackName": name,
        "StackId": f"arn:aws:cloudformation:ap-northeast-2:123456789012:stack/{name}/1" if stack_id is None else stack_id,
        "StackStatus": "CREATE_COMPLETE",
    }


def make_cfn_client(pages: List[Dict[str, Any]]) -> MagicMock:
    """ListStacks 페이지네이터가 주어진 페이지를 반환하는 CloudFormation client 모킹"""
    client = MagicMock()
    paginator = MagicMock()
    paginator.paginate.return_value = pages
    client.get_paginator.return_value = paginator
    return client


class RecordingMonitor:
    """wait() 호출을 기록하는 테스트용 CompletionMonitor

    fail_on에 포함된 stack_id는 error를 던집니다.
    """

    def __init__(self, fail_on=(), error: Optional[Exception] = None):
        self.fail_on = set(fail_on)
        self.error = error or RuntimeError("terrible error")
        self.calls: List[tuple] = []
        self._lock = threading.Lock()

    def wait(self, kind, stack_id: str) -> str:
        with self._lock:
            self.calls.append((kind, stack_id))
        if stack_id in self.fail_on:
            raise self.error
        return "DELETE_COMPLETE" if kind.value == "removal" else "UPDATE_COMPLETE"

    def calls_for(self, kind) -> List[str]:
        return [stack_id for k, stack_id in self.calls if k == kind]


# =============================================================================
# AWS 모킹 픽스처
# =============================================================================


@pytest.fixture
def mock_cfn_client():
    """Foo-A / Bar-B / Foo-C 세 Stack을 반환하는 CloudFormation client 모킹"""
    return make_cfn_client(
        [
            {
                "StackSummaries": [
                    stack_summary("Foo-A"),
                    stack_summary("Bar-B"),
                    stack_summary("Foo-C"),
                ]
            }
        ]
    )


@pytest.fixture
def mock_lambda_client():
    """성공 응답을 반환하는 Lambda client 모킹"""
    client = MagicMock()
    client.invoke.return_value = {"StatusCode": 200, "ExecutedVersion": "$LATEST"}
    return client


@pytest.fixture
def recording_monitor():
    """항상 성공하는 RecordingMonitor"""
    return RecordingMonitor()


# =============================================================================
# moto 통합
# =============================================================================


@pytest.fixture
def aws_credentials():
    """moto 사용 시 AWS 자격 증명 설정"""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "ap-northeast-2"


@pytest.fixture
def moto_cfn(aws_credentials):
    """moto를 사용한 CloudFormation 모킹"""
    moto = pytest.importorskip("moto")

    with moto.mock_aws():
        import boto3

        yield boto3.client("cloudformation", region_name="ap-northeast-2")
