# core/__init__.py
"""
core - Child Stack Manager 인프라

CLI와 플러그인이 공유하는 최상위 패키지입니다.

아키텍처:
    core/
    ├── parallel/       # 동시 실행 제한 스케줄러, boto3 client, 에러 분류/수집
    ├── config.py       # 버전 및 기본값
    └── exceptions.py   # 통합 예외 계층

Usage:
    from core.exceptions import ConfigError, is_throttling
    from core.parallel import BoundedScheduler, get_client
"""

from core import config, exceptions, parallel

__all__: list[str] = [
    # 서브패키지
    "parallel",
    # 모듈
    "config",
    "exceptions",
]
