"""피드 캐시 - 피드 이름별 TTL 캐시 (콘텐츠 + 타임스탬프 메타데이터)"""

from __future__ import annotations

import json
import time
from collections.abc import Callable

from sitefeed.errors import CacheError
from sitefeed.logger import get_logger
from sitefeed.storage.base import ObjectStore

logger = get_logger("cache")


def cache_keys(name: str) -> tuple[str, str]:
    """피드 이름에서 (콘텐츠 키, 메타데이터 키)를 만듭니다."""
    return f"cache_{name}_feed.xml", f"cache_{name}_metadata.json"


class FeedCache:
    """ObjectStore 위의 TTL 캐시

    저장소 오류는 캐시 미스로 처리하거나 로그만 남기고 무시합니다.
    콘텐츠와 메타데이터는 두 번에 나눠 쓰므로, 메타데이터를 읽을 수 없으면
    콘텐츠가 있어도 미스로 처리합니다.
    """

    def __init__(
        self,
        store: ObjectStore,
        ttl_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    async def get(self, name: str) -> str | None:
        """유효한 캐시 콘텐츠를 반환합니다. 없거나 만료되었으면 None."""
        if not self.enabled:
            return None

        try:
            return await self._read(name)
        except CacheError as e:
            logger.warning("캐시 미스 (%s): %s", name, e)
            return None
        except Exception as e:
            logger.error("캐시 읽기 오류 (%s): %s", name, e)
            return None

    async def put(self, name: str, content: str) -> None:
        """콘텐츠와 타임스탬프 메타데이터를 저장합니다. ttl이 0 이하면 건너뜁니다."""
        if not self.enabled:
            return

        content_key, metadata_key = cache_keys(name)
        metadata = {"timestamp": int(self.clock() * 1000)}
        try:
            await self.store.put(
                content_key, content.encode("utf-8"), content_type="application/xml"
            )
            await self.store.put(
                metadata_key,
                json.dumps(metadata).encode("utf-8"),
                content_type="application/json",
            )
            logger.debug("캐시 저장: %s", name)
        except Exception as e:
            logger.error("캐시 쓰기 오류 (%s): %s", name, e)

    async def invalidate(self, name: str) -> None:
        """피드 이름의 캐시 객체를 모두 삭제합니다."""
        try:
            for key in cache_keys(name):
                await self.store.delete(key)
        except Exception as e:
            logger.error("캐시 삭제 오류 (%s): %s", name, e)

    async def _read(self, name: str) -> str | None:
        content_key, metadata_key = cache_keys(name)

        raw_metadata = await self.store.get(metadata_key)
        if raw_metadata is None:
            return None

        try:
            timestamp = float(json.loads(raw_metadata)["timestamp"])
        except (ValueError, KeyError, TypeError) as e:
            raise CacheError(f"메타데이터를 읽을 수 없습니다: {e}") from e

        age_seconds = self.clock() - timestamp / 1000
        if age_seconds >= self.ttl_seconds:
            logger.debug("캐시 만료: %s (%.0f초 경과)", name, age_seconds)
            return None

        content = await self.store.get(content_key)
        if content is None:
            return None
        logger.debug("캐시 적중: %s", name)
        return content.decode("utf-8")
