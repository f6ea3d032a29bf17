"""키/값 객체 저장소 인터페이스"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class ObjectInfo:
    """저장된 객체의 메타 정보"""

    key: str
    size: int
    uploaded_at: float  # epoch seconds


class ObjectStore(ABC):
    """바이트 객체를 문자열 키로 저장하는 비동기 저장소

    캐시 계층, 읽기 목록 저장소, SDD 저장소가 공통으로 사용합니다.
    """

    async def initialize(self) -> None:
        """저장소 초기화 (필요한 백엔드만 구현)"""

    async def close(self) -> None:
        """저장소 연결 종료 (필요한 백엔드만 구현)"""

    @abstractmethod
    async def put(
        self, key: str, data: bytes, content_type: str = "application/octet-stream"
    ) -> None:
        """객체를 저장합니다. 같은 키가 있으면 덮어씁니다."""

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        """객체를 읽습니다. 없으면 None."""

    @abstractmethod
    async def head(self, key: str) -> ObjectInfo | None:
        """객체 메타 정보를 반환합니다. 없으면 None."""

    @abstractmethod
    async def list(self, prefix: str = "") -> list[ObjectInfo]:
        """접두사로 시작하는 객체 목록을 키 순서로 반환합니다."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """객체를 삭제합니다. 없으면 아무 것도 하지 않습니다."""
