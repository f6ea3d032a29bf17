"""예외 계층 정의"""

from __future__ import annotations


class SiteFeedError(Exception):
    """SiteFeed 예외의 기반 클래스"""


class ConfigError(SiteFeedError):
    """SDD 또는 입력 데이터가 잘못되었을 때 발생합니다. 재시도하지 않습니다."""


class SiteNotFoundError(ConfigError):
    """요청한 이름의 SDD가 저장소에 없을 때 발생합니다."""

    def __init__(self, name: str) -> None:
        super().__init__(f"SDD를 찾을 수 없습니다: {name}")
        self.name = name


class AcquisitionError(SiteFeedError):
    """페이지 수집 실패 (타임아웃, 비정상 상태 코드, 디코딩 실패)"""


class CacheError(SiteFeedError):
    """캐시 저장소 접근 실패. 캐시 계층 밖으로 전파되지 않습니다."""
