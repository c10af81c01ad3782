"""
plugins/child_stacks/enumerator.py - Child Stack 검색

이름 prefix와 일치하고 안정 상태인 CloudFormation Stack ID 목록을 수집합니다.
ListStacks 페이지네이터가 NextToken이 없을 때까지 모든 페이지를 조회하며 페이지 수 제한은 없습니다.

목록 조회 실패는 그대로 전파됩니다 (부분 결과 없음, continueOnFailure 적용 대상 아님).
"""

from __future__ import annotations

import logging
from typing import Any

from .types import STABLE_STATE_FILTER

logger = logging.getLogger(__name__)


def list_matching_stacks(cfn: Any, name_prefix: str) -> list[str]:
    """prefix와 일치하는 안정 상태 Stack ID 목록 반환

    Args:
        cfn: CloudFormation boto3 client
        name_prefix: Stack 이름 prefix (대소문자 구분, 패턴 매칭 아님)

    Returns:
        페이지 순서대로 이어 붙인 Stack ID 목록
    """
    stack_ids: list[str] = []
    pages = 0

    paginator = cfn.get_paginator("list_stacks")
    for page in paginator.paginate(StackStatusFilter=list(STABLE_STATE_FILTER)):
        pages += 1
        for summary in page.get("StackSummaries") or []:
            if summary.get("StackName", "").startswith(name_prefix) and summary.get("StackId"):
                stack_ids.append(summary["StackId"])

    logger.debug(f"ListStacks {pages}페이지 조회, prefix={name_prefix!r} 일치 {len(stack_ids)}개")
    return stack_ids
