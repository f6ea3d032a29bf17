"""피드 파이프라인 - 캐시 → SDD 로드 → 페이지 수집 → 추출 → 캐시 저장"""

from __future__ import annotations

import time
from collections.abc import Callable

from sitefeed.cache import FeedCache
from sitefeed.collector.page_fetcher import PageFetcher
from sitefeed.config import Settings
from sitefeed.extractor import engine
from sitefeed.logger import get_logger
from sitefeed.read_later import ReadLaterStore
from sitefeed.repository import SiteRepository
from sitefeed.storage.base import ObjectStore
from sitefeed.storage.factory import create_store

logger = get_logger("pipeline")


class FeedPipeline:
    """피드 요청 처리 오케스트레이터

    저장소 하나를 캐시, SDD 저장소, 읽기 목록이 함께 사용합니다.
    동일 피드에 대한 동시 요청을 합치지 않으며, 재시도도 하지 않습니다.
    """

    def __init__(
        self,
        settings: Settings,
        store: ObjectStore | None = None,
        fetcher: PageFetcher | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.settings = settings
        self.store = store or create_store(settings.storage)
        self.fetcher = fetcher or PageFetcher()
        self.cache = FeedCache(self.store, settings.cache.ttl_seconds, clock=clock)
        self.sites = SiteRepository(self.store, fetch_defaults=settings.fetch)
        self.read_later = ReadLaterStore(self.store, clock=clock)

    async def initialize(self) -> None:
        """리소스 초기화"""
        await self.store.initialize()

    async def cleanup(self) -> None:
        """리소스 정리"""
        await self.store.close()

    async def get_feed(self, name: str, use_cache: bool = True) -> str:
        """이름에 해당하는 RSS 피드를 반환합니다.

        Raises:
            SiteNotFoundError: 저장된 SDD가 없을 때
            ConfigError: 저장된 SDD가 잘못되었을 때
            AcquisitionError: 페이지 수집 실패
        """
        if use_cache:
            cached = await self.cache.get(name)
            if cached is not None:
                logger.info("캐시된 피드 반환: %s", name)
                return cached

        sdd = await self.sites.load(name)
        html = await self.fetcher.fetch(sdd.fetch)
        content = engine.run(sdd, html)

        await self.cache.put(name, content)
        logger.info("피드 생성 완료: %s (%d bytes)", name, len(content))
        return content

    async def add_site(self, raw: dict) -> str:
        """SDD를 저장하고 키를 반환합니다. 같은 키의 캐시는 비웁니다."""
        key = await self.sites.save(raw)
        await self.cache.invalidate(key)
        return key
