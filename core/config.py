"""
core/config.py - 중앙 설정

버전 정보와 기본값을 한 곳에서 관리합니다.
리전은 기본값을 두지 않습니다. 명령줄 옵션 또는 AWS 프로파일/환경 변수의 리전을 사용합니다.
"""

VERSION = "1.2.0"

# serverless.yml 안의 설정 섹션 이름
CONFIG_SECTION = "serverless-child-stack-manager"
DEFAULT_CONFIG_FILE = "serverless.yml"


def get_version() -> str:
    """버전 문자열 반환"""
    return VERSION
