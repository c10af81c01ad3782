# tests/plugins/child_stacks/test_child_stacks_actions.py
"""
plugins/child_stacks/actions.py 단위 테스트

DeleteStack / 업그레이드 함수 호출과 완료 대기 테스트.
"""

import io
import json
from unittest.mock import MagicMock

import pytest
from conftest import RecordingMonitor, create_mock_client_error
from botocore.exceptions import ClientError

from core.exceptions import ConfigError, FunctionInvocationError
from plugins.child_stacks.actions import delete_stack, deploy_stack, make_stack_action
from plugins.child_stacks.config import ChildStackManagerConfig
from plugins.child_stacks.types import StackActionKind

STACK_ID = "arn:aws:cloudformation:ap-northeast-2:123456789012:stack/Foo-A/1"


# =============================================================================
# delete_stack
# =============================================================================


class TestDeleteStack:
    """delete_stack 테스트"""

    def test_deletes_and_waits(self, recording_monitor):
        """DeleteStack 요청 후 removal 완료 대기"""
        cfn = MagicMock()

        assert delete_stack(cfn, recording_monitor, STACK_ID) == STACK_ID
        cfn.delete_stack.assert_called_once_with(StackName=STACK_ID)
        assert recording_monitor.calls == [(StackActionKind.REMOVAL, STACK_ID)]

    def test_passes_role_arn(self, recording_monitor):
        """cfnRole이 있으면 RoleARN 전달"""
        cfn = MagicMock()
        role = "arn:aws:iam::123456789012:role/cfn-exec"

        delete_stack(cfn, recording_monitor, STACK_ID, role_arn=role)

        cfn.delete_stack.assert_called_once_with(StackName=STACK_ID, RoleARN=role)

    def test_request_failure_skips_wait(self, recording_monitor):
        """DeleteStack 실패 시 대기하지 않고 전파"""
        cfn = MagicMock()
        cfn.delete_stack.side_effect = create_mock_client_error("AccessDenied", "no", "DeleteStack")

        with pytest.raises(ClientError):
            delete_stack(cfn, recording_monitor, STACK_ID)

        assert recording_monitor.calls == []

    def test_monitor_failure_propagates(self):
        """모니터 실패 전파"""
        monitor = RecordingMonitor(fail_on={STACK_ID})

        with pytest.raises(RuntimeError, match="terrible error"):
            delete_stack(MagicMock(), monitor, STACK_ID)


# =============================================================================
# deploy_stack
# =============================================================================


class TestDeployStack:
    """deploy_stack 테스트"""

    def test_invokes_and_waits(self, mock_lambda_client, recording_monitor):
        """업그레이드 함수를 동기 호출 후 update 완료 대기"""
        assert deploy_stack(mock_lambda_client, recording_monitor, STACK_ID, "upgrade-tenant") == STACK_ID

        mock_lambda_client.invoke.assert_called_once()
        kwargs = mock_lambda_client.invoke.call_args.kwargs
        assert kwargs["FunctionName"] == "upgrade-tenant"
        assert kwargs["InvocationType"] == "RequestResponse"
        assert json.loads(kwargs["Payload"]) == {"stackId": STACK_ID}
        assert recording_monitor.calls == [(StackActionKind.UPDATE, STACK_ID)]

    def test_logs_deploying(self, mock_lambda_client, recording_monitor, caplog):
        """Stack별 배포 로그"""
        with caplog.at_level("INFO", logger="plugins.child_stacks.actions"):
            deploy_stack(mock_lambda_client, recording_monitor, STACK_ID, "fn")

        assert f"Deploying stack with id: {STACK_ID}" in caplog.text

    def test_function_error_uses_error_message(self, recording_monitor):
        """FunctionError 응답은 errorMessage를 메시지로 하는 FunctionInvocationError"""
        client = MagicMock()
        client.invoke.return_value = {
            "StatusCode": 200,
            "FunctionError": "Unhandled",
            "Payload": io.BytesIO(
                json.dumps({"errorMessage": "Template format error", "errorType": "ValidationError"}).encode()
            ),
        }

        with pytest.raises(FunctionInvocationError) as exc_info:
            deploy_stack(client, recording_monitor, STACK_ID, "fn")

        assert str(exc_info.value) == "Template format error"
        assert exc_info.value.stack_id == STACK_ID
        assert exc_info.value.function_error == "Unhandled"
        assert recording_monitor.calls == []

    def test_function_error_with_raw_payload(self, recording_monitor):
        """JSON이 아닌 payload는 원문 사용"""
        client = MagicMock()
        client.invoke.return_value = {"FunctionError": "Unhandled", "Payload": io.BytesIO(b"Task timed out")}

        with pytest.raises(FunctionInvocationError, match="Task timed out"):
            deploy_stack(client, recording_monitor, STACK_ID, "fn")

    def test_function_error_without_payload(self, recording_monitor):
        """payload가 없으면 FunctionError 값 사용"""
        client = MagicMock()
        client.invoke.return_value = {"FunctionError": "Handled"}

        with pytest.raises(FunctionInvocationError, match="Handled"):
            deploy_stack(client, recording_monitor, STACK_ID, "fn")

    def test_function_error_with_bytes_payload(self, recording_monitor):
        """bytes payload 처리"""
        client = MagicMock()
        client.invoke.return_value = {"FunctionError": "Unhandled", "Payload": b'{"errorMessage": "boom"}'}

        with pytest.raises(FunctionInvocationError, match="boom"):
            deploy_stack(client, recording_monitor, STACK_ID, "fn")

    def test_invoke_failure_propagates(self, recording_monitor):
        """호출 자체의 실패는 그대로 전파"""
        client = MagicMock()
        client.invoke.side_effect = create_mock_client_error("ResourceNotFoundException", "Function not found", "Invoke")

        with pytest.raises(ClientError):
            deploy_stack(client, recording_monitor, STACK_ID, "fn")

        assert recording_monitor.calls == []


# =============================================================================
# make_stack_action
# =============================================================================


class TestMakeStackAction:
    """make_stack_action 테스트"""

    def test_removal_action(self, recording_monitor):
        """removal 작업 함수는 cfnRole과 함께 삭제"""
        cfn = MagicMock()
        config = ChildStackManagerConfig.from_dict({"childStacksNamePrefix": "Foo", "cfnRole": "role-arn"})

        action = make_stack_action(StackActionKind.REMOVAL, cfn, None, recording_monitor, config)

        assert action(STACK_ID) == STACK_ID
        cfn.delete_stack.assert_called_once_with(StackName=STACK_ID, RoleARN="role-arn")

    def test_update_action(self, mock_lambda_client, recording_monitor):
        """update 작업 함수는 업그레이드 함수 호출"""
        config = ChildStackManagerConfig.from_dict({"childStacksNamePrefix": "Foo", "upgradeFunction": "fn"})

        action = make_stack_action(StackActionKind.UPDATE, MagicMock(), mock_lambda_client, recording_monitor, config)

        assert action(STACK_ID) == STACK_ID
        assert mock_lambda_client.invoke.call_args.kwargs["FunctionName"] == "fn"

    def test_update_action_requires_function(self, mock_lambda_client, recording_monitor):
        """upgradeFunction 없이 update 작업 생성 시 ConfigError"""
        config = ChildStackManagerConfig.from_dict({"childStacksNamePrefix": "Foo"})

        with pytest.raises(ConfigError):
            make_stack_action(StackActionKind.UPDATE, MagicMock(), mock_lambda_client, recording_monitor, config)
