"""나중에 읽기 저장소 - URL 중복 제거, 최근 50개 유지"""

from __future__ import annotations

import json
import time
from collections.abc import Callable
from datetime import datetime, timezone

from sitefeed.errors import ConfigError
from sitefeed.extractor.feed_writer import render_rss
from sitefeed.extractor.urls import url_key
from sitefeed.logger import get_logger
from sitefeed.models import FeedChannel, FeedEntry, ReadLaterItem
from sitefeed.storage.base import ObjectStore

logger = get_logger("read_later")

PREFIX = "readlater/"
DEFAULT_LIMIT = 50


class ReadLaterStore:
    """사용자가 제출한 URL 목록

    같은 URL을 다시 제출하면 기존 항목을 지우고 새로 씁니다.
    개수 제한은 쓰기 시점이 아니라 list() 호출 시점에 적용합니다.
    """

    def __init__(
        self,
        store: ObjectStore,
        limit: int = DEFAULT_LIMIT,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.limit = limit
        self.clock = clock

    async def add(self, url: str, text: str = "", title: str | None = None) -> str:
        """항목을 저장하고 ID를 반환합니다.

        Raises:
            ConfigError: URL이 http(s) 문자열이 아니거나 text/title이 문자열이 아닐 때
        """
        if not isinstance(url, str) or not url.startswith("http"):
            raise ConfigError("URL은 필수이며 http(s) URL이어야 합니다.")
        if text is not None and not isinstance(text, str):
            raise ConfigError("text는 문자열이어야 합니다.")
        if title is not None and not isinstance(title, str):
            raise ConfigError("title은 문자열이어야 합니다.")

        item = ReadLaterItem(
            id=url_key(url),
            url=url,
            text=text or "",
            title=title or url,
            timestamp=int(self.clock() * 1000),
        )

        for key, existing in await self._load_all():
            if existing.url == item.url:
                await self.store.delete(key)
                logger.debug("기존 항목 삭제: %s", key)

        await self.store.put(
            f"{PREFIX}{item.id}.json",
            json.dumps(item.to_dict(), ensure_ascii=False, indent=2).encode("utf-8"),
            content_type="application/json",
        )
        logger.info("나중에 읽기 저장 (id=%s): %s", item.id, item.url)
        return item.id

    async def list(self) -> list[ReadLaterItem]:
        """최신순 항목을 최대 limit개 반환하고, 초과분은 삭제합니다."""
        loaded = await self._load_all()
        loaded.sort(key=lambda pair: pair[1].timestamp, reverse=True)

        if len(loaded) >= self.limit:
            for key, item in loaded[self.limit:]:
                await self.store.delete(key)
                logger.info("오래된 항목 삭제: %s", item.url)

        return [item for _, item in loaded[: self.limit]]

    def render_feed(self, items: list[ReadLaterItem], origin: str) -> str:
        """읽기 목록을 RSS 피드로 직렬화합니다."""
        channel = FeedChannel(
            title="Read Later List",
            link=origin,
            description="Your personal read-later list",
            language="zh-CN",
        )
        entries = [
            FeedEntry(
                title=item.title,
                id=item.id,
                link=item.url,
                description=item.text,
                published=datetime.fromtimestamp(item.timestamp / 1000, tz=timezone.utc),
            )
            for item in items
        ]
        return render_rss(channel, entries)

    async def _load_all(self) -> list[tuple[str, ReadLaterItem]]:
        """저장된 항목을 (키, 항목) 쌍으로 읽습니다. 손상된 객체는 건너뜁니다."""
        pairs = []
        for info in await self.store.list(PREFIX):
            raw = await self.store.get(info.key)
            if raw is None:
                continue
            try:
                pairs.append((info.key, ReadLaterItem.from_dict(json.loads(raw))))
            except (ValueError, KeyError, TypeError) as e:
                logger.warning("읽을 수 없는 항목 건너뜀 (%s): %s", info.key, e)
        return pairs
