"""
plugins/child_stacks/config.py - Child Stack Manager 설정

설정은 실행마다 한 번 만들어지고 이후 변경되지 않습니다.
기본값 채우기와 필수값 검증은 모두 from_dict()에서 원격 호출 전에 수행합니다.

설정 키 (serverless.yml의 custom.serverless-child-stack-manager 섹션과 동일):
    childStacksNamePrefix: Child Stack 이름 prefix (필수)
    removalPolicy: keep | remove (기본: keep)
    maxConcurrentCount: 최대 동시 작업 수 (기본: 5)
    upgradeFunction: 업그레이드 Lambda 함수 이름 (update 실행 시 필수)
    continueOnFailure: 개별 Stack 실패 무시 여부 (기본: false)
    cfnRole: Stack 삭제 시 CloudFormation이 사용할 IAM Role ARN (선택)
    monitorFrequency: Stack 상태 폴링 간격, 초 (기본: 10)

Usage:
    from plugins.child_stacks.config import ChildStackManagerConfig, load_config_file

    raw = load_config_file("serverless.yml")
    config = ChildStackManagerConfig.from_dict(raw, maxConcurrentCount=2)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from core.config import CONFIG_SECTION
from core.exceptions import ConfigError

from .types import RemovalPolicy

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENT_COUNT = 5
DEFAULT_MONITOR_FREQUENCY = 10.0  # 초


@dataclass(frozen=True)
class ChildStackManagerConfig:
    """검증된 Child Stack Manager 설정

    Attributes:
        child_stacks_name_prefix: Child Stack 이름 prefix (대소문자 구분, 단순 prefix 비교)
        removal_policy: 서비스 제거 시 Child Stack 처리 정책
        max_concurrent_count: 최대 동시 작업 수 (1 이상)
        upgrade_function: 업그레이드 Lambda 함수 이름 (update 실행에만 필요)
        continue_on_failure: True이면 개별 Stack 실패를 무시하고 계속 진행
        cfn_role: Stack 삭제 시 사용할 IAM Role ARN
        monitor_frequency: Stack 상태 폴링 간격 (초)
    """

    child_stacks_name_prefix: str
    removal_policy: RemovalPolicy = RemovalPolicy.KEEP
    max_concurrent_count: int = DEFAULT_MAX_CONCURRENT_COUNT
    upgrade_function: str = ""
    continue_on_failure: bool = False
    cfn_role: str | None = None
    monitor_frequency: float = DEFAULT_MONITOR_FREQUENCY

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any] | None, **overrides: Any) -> ChildStackManagerConfig:
        """설정 딕셔너리(camelCase 키)로부터 검증된 설정 생성

        값이 비어 있으면(None, "", 0, False) 기본값을 사용합니다.
        overrides 중 None이 아닌 값은 raw 값보다 우선합니다.

        Args:
            raw: 설정 딕셔너리 (None이면 빈 설정)
            **overrides: 덮어쓸 설정 (camelCase 키)

        Returns:
            ChildStackManagerConfig

        Raises:
            ConfigError: 필수값 누락 또는 잘못된 값
        """
        values: dict[str, Any] = dict(raw or {})
        values.update({k: v for k, v in overrides.items() if v is not None})

        prefix = values.get("childStacksNamePrefix")
        if not prefix:
            raise ConfigError("childStacksNamePrefix", "childStacksNamePrefix is required")
        if not isinstance(prefix, str):
            raise ConfigError("childStacksNamePrefix", "childStacksNamePrefix must be a string")

        return cls(
            child_stacks_name_prefix=prefix,
            removal_policy=_parse_removal_policy(values.get("removalPolicy")),
            max_concurrent_count=_parse_max_concurrent(values.get("maxConcurrentCount")),
            upgrade_function=_parse_optional_str("upgradeFunction", values.get("upgradeFunction")) or "",
            continue_on_failure=_parse_bool("continueOnFailure", values.get("continueOnFailure")),
            cfn_role=_parse_optional_str("cfnRole", values.get("cfnRole")),
            monitor_frequency=_parse_frequency(values.get("monitorFrequency")),
        )

    def require_upgrade_function(self) -> str:
        """update 실행에 필요한 업그레이드 함수 이름 반환

        Raises:
            ConfigError: upgradeFunction 미설정
        """
        if not self.upgrade_function:
            raise ConfigError("upgradeFunction", "upgradeFunction is required to update child stacks")
        return self.upgrade_function


def _parse_removal_policy(value: Any) -> RemovalPolicy:
    if not value:
        return RemovalPolicy.KEEP
    try:
        return RemovalPolicy(value)
    except ValueError as e:
        raise ConfigError("removalPolicy", f"removalPolicy must be 'keep' or 'remove', got {value!r}", e) from e


def _parse_max_concurrent(value: Any) -> int:
    if not value:
        return DEFAULT_MAX_CONCURRENT_COUNT
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError("maxConcurrentCount", f"maxConcurrentCount must be an integer, got {value!r}")
    if value < 1:
        raise ConfigError("maxConcurrentCount", f"maxConcurrentCount must be >= 1, got {value}")
    return value


def _parse_bool(key: str, value: Any) -> bool:
    if not value:
        return False
    if not isinstance(value, bool):
        raise ConfigError(key, f"{key} must be a boolean, got {value!r}")
    return value


def _parse_optional_str(key: str, value: Any) -> str | None:
    if not value:
        return None
    if not isinstance(value, str):
        raise ConfigError(key, f"{key} must be a string, got {value!r}")
    return value


def _parse_frequency(value: Any) -> float:
    if not value:
        return DEFAULT_MONITOR_FREQUENCY
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError("monitorFrequency", f"monitorFrequency must be a positive number, got {value!r}")
    return float(value)


def load_config_file(path: str | Path, section: str = CONFIG_SECTION) -> dict[str, Any]:
    """serverless.yml에서 Child Stack Manager 설정 섹션 로드

    custom.<section> 아래의 딕셔너리를 반환합니다. 섹션이 없으면 빈 딕셔너리.

    Args:
        path: YAML 파일 경로
        section: custom 아래의 섹션 이름

    Returns:
        설정 딕셔너리 (camelCase 키)

    Raises:
        ConfigError: 파일이 없거나 YAML 형식 오류
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError("config", f"Config file not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            document = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError("config", f"Invalid YAML in {config_path}", e) from e

    if not isinstance(document, dict):
        raise ConfigError("config", f"{config_path} must contain a mapping")

    custom = document.get("custom") or {}
    result = custom.get(section) or {}
    if not isinstance(result, dict):
        raise ConfigError(section, f"custom.{section} must be a mapping")

    logger.debug(f"설정 로드: {config_path} (custom.{section}, {len(result)}개 키)")
    return result
