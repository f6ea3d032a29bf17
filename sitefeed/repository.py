"""SDD 저장소 - 사이트 정의 저장, 로드, 목록 조회"""

from __future__ import annotations

import json
import re

from sitefeed.config import FetchDefaults
from sitefeed.errors import ConfigError, SiteNotFoundError
from sitefeed.extractor.urls import url_key
from sitefeed.logger import get_logger
from sitefeed.models import SiteDataDefinition, SiteSummary
from sitefeed.sdd import parse_sdd, validate
from sitefeed.storage.base import ObjectStore

logger = get_logger("repository")

SDD_SUFFIX = ".sdd.json"
NAME_PATTERN = re.compile(r"^[A-Za-z0-9_\-]+$")


class SiteRepository:
    """ObjectStore에 "<키>.sdd.json" 형태로 SDD를 보관합니다."""

    def __init__(
        self, store: ObjectStore, fetch_defaults: FetchDefaults | None = None
    ) -> None:
        self.store = store
        self.fetch_defaults = fetch_defaults

    async def load(self, name: str) -> SiteDataDefinition:
        """이름으로 SDD를 읽고 검증합니다.

        Raises:
            SiteNotFoundError: 저장된 SDD가 없을 때
            ConfigError: 저장된 SDD가 잘못되었을 때
        """
        if not NAME_PATTERN.match(name):
            raise SiteNotFoundError(name)

        raw = await self.store.get(f"{name}{SDD_SUFFIX}")
        if raw is None:
            raise SiteNotFoundError(name)
        return parse_sdd(raw, self.fetch_defaults)

    async def save(self, raw: dict) -> str:
        """SDD를 검증한 뒤 저장하고 생성된 키를 반환합니다. 같은 URL이면 덮어씁니다."""
        sdd = validate(raw, self.fetch_defaults)
        key = url_key(sdd.url)
        await self.store.put(
            f"{key}{SDD_SUFFIX}",
            json.dumps(raw, ensure_ascii=False, indent=2).encode("utf-8"),
            content_type="application/json",
        )
        logger.info("SDD 저장 완료 (key=%s): %s", key, sdd.url)
        return key

    async def list(self) -> list[SiteSummary]:
        """저장된 SDD 요약 목록. 읽을 수 없는 항목은 건너뜁니다."""
        summaries = []
        for info in await self.store.list():
            if not info.key.endswith(SDD_SUFFIX) or "/" in info.key:
                continue
            key = info.key[: -len(SDD_SUFFIX)]
            raw = await self.store.get(info.key)
            if raw is None:
                continue
            try:
                sdd = parse_sdd(raw, self.fetch_defaults)
            except ConfigError as e:
                logger.warning("잘못된 SDD 건너뜀 (%s): %s", info.key, e)
                continue
            summaries.append(
                SiteSummary(key=key, title=sdd.title, url=sdd.url, favicon=sdd.favicon)
            )
        return summaries
