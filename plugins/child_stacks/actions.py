"""
plugins/child_stacks/actions.py - Stack 작업 실행

Stack 하나에 대한 작업 단위입니다. 두 작업 모두 같은 형태를 가집니다:
원격 변경 요청 → CompletionMonitor로 완료 대기 → stack_id 반환.

- delete_stack: DeleteStack 요청 후 removal 완료 대기
- deploy_stack: 업그레이드 Lambda 함수를 동기(RequestResponse) 호출 후 update 완료 대기

Example:
    action = make_stack_action(StackActionKind.REMOVAL, cfn, None, monitor, config)
    action("arn:aws:cloudformation:...:stack/Foo-A/...")
"""

from __future__ import annotations

import json
import logging
from typing import Any

from core.exceptions import FunctionInvocationError

from .config import ChildStackManagerConfig
from .monitor import CompletionMonitor
from .types import StackActionKind

logger = logging.getLogger(__name__)


def delete_stack(
    cfn: Any,
    monitor: CompletionMonitor,
    stack_id: str,
    role_arn: str | None = None,
) -> str:
    """Stack 삭제 후 삭제 완료까지 대기

    Args:
        cfn: CloudFormation boto3 client
        monitor: 완료 모니터
        stack_id: 삭제할 Stack ID
        role_arn: CloudFormation이 삭제 시 사용할 IAM Role ARN (선택)

    Returns:
        stack_id
    """
    params: dict[str, Any] = {"StackName": stack_id}
    if role_arn:
        params["RoleARN"] = role_arn

    logger.debug(f"Stack 삭제 요청: {stack_id}")
    cfn.delete_stack(**params)

    monitor.wait(StackActionKind.REMOVAL, stack_id)
    return stack_id


def deploy_stack(
    lambda_client: Any,
    monitor: CompletionMonitor,
    stack_id: str,
    upgrade_function: str,
) -> str:
    """업그레이드 함수 호출 후 Stack 업데이트 완료까지 대기

    함수가 실행되었지만 실패를 보고한 경우(FunctionError), 함수가 반환한
    errorMessage를 그대로 메시지로 하는 FunctionInvocationError를 던집니다.
    호출 자체의 실패(ClientError)는 그대로 전파됩니다.

    Args:
        lambda_client: Lambda boto3 client
        monitor: 완료 모니터
        stack_id: 업데이트할 Stack ID
        upgrade_function: 업그레이드 Lambda 함수 이름 또는 ARN

    Returns:
        stack_id

    Raises:
        FunctionInvocationError: 업그레이드 함수가 에러를 보고함
    """
    logger.info(f"Deploying stack with id: {stack_id}")

    response = lambda_client.invoke(
        FunctionName=upgrade_function,
        InvocationType="RequestResponse",
        LogType="None",
        Payload=json.dumps({"stackId": stack_id}),
    )

    function_error = response.get("FunctionError")
    if function_error:
        message = _function_error_message(response.get("Payload"), function_error)
        raise FunctionInvocationError(stack_id, message, function_error=function_error)

    monitor.wait(StackActionKind.UPDATE, stack_id)
    return stack_id


def _function_error_message(payload: Any, function_error: str) -> str:
    """Lambda 에러 응답 payload에서 errorMessage 추출

    payload를 해석할 수 없으면 원문, 원문도 없으면 FunctionError 값을 반환합니다.
    """
    if payload is None:
        return function_error

    raw = payload.read() if hasattr(payload, "read") else payload
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, (bytes, bytearray)) else str(raw)
    if not text:
        return function_error

    try:
        detail = json.loads(text)
    except ValueError:
        return text

    if isinstance(detail, dict) and detail.get("errorMessage"):
        return str(detail["errorMessage"])
    return text


def make_stack_action(
    kind: StackActionKind,
    cfn: Any,
    lambda_client: Any,
    monitor: CompletionMonitor,
    config: ChildStackManagerConfig,
):
    """스케줄러가 실행할 stack_id -> stack_id 작업 함수 생성

    Args:
        kind: 작업 종류
        cfn: CloudFormation boto3 client (removal)
        lambda_client: Lambda boto3 client (update)
        monitor: 완료 모니터
        config: 검증된 설정

    Returns:
        stack_id를 받아 작업 완료 후 stack_id를 반환하는 함수
    """
    if kind == StackActionKind.REMOVAL:

        def remove(stack_id: str) -> str:
            return delete_stack(cfn, monitor, stack_id, role_arn=config.cfn_role)

        return remove

    upgrade_function = config.require_upgrade_function()

    def update(stack_id: str) -> str:
        return deploy_stack(lambda_client, monitor, stack_id, upgrade_function)

    return update
