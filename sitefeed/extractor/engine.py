"""추출 엔진 - SDD와 HTML로 RSS 피드를 생성

처리 순서:
    문서 파싱 → 페이지 메타데이터 해석 → 항목 컨테이너 선택 및 제거 선택자 적용
    → 항목별 필드 추출 → URL 정규화 → 피드 항목 매핑 → RSS 직렬화
"""

from __future__ import annotations

import mimetypes
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from urllib.parse import urlsplit

from sitefeed.extractor.feed_writer import render_rss
from sitefeed.extractor.fields import extract, resolve_page_metadata
from sitefeed.extractor.selector import parse_document, select, subtract
from sitefeed.extractor.urls import encode_url, normalize
from sitefeed.logger import get_logger
from sitefeed.models import (
    DEFAULT_GENERATOR,
    Enclosure,
    FeedChannel,
    FeedEntry,
    ImageField,
    ItemRecord,
    PageVariableField,
    SiteDataDefinition,
)

logger = get_logger("extractor.engine")

# 이름만으로 URL 필드로 취급하는 필드
URL_FIELD_NAMES = ("link", "image")

DEFAULT_ENCLOSURE_TYPE = "image/jpeg"

DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d",
    "%Y.%m.%d %H:%M",
    "%Y.%m.%d",
    "%Y年%m月%d日 %H:%M",
    "%Y年%m月%d日",
)


def run(sdd: SiteDataDefinition, html: str, now: datetime | None = None) -> str:
    """SDD로 HTML을 해석하여 RSS 2.0 XML을 반환합니다.

    항목이 하나도 매칭되지 않으면 빈 피드를 반환합니다. 개별 필드의
    추출 실패는 None/기본값으로 처리되며 예외를 던지지 않습니다.

    Args:
        sdd: 검증된 사이트 정의
        html: 수집된 페이지 마크업
        now: 추출 시각 (날짜가 없는 항목과 lastBuildDate에 사용).
            생략하면 현재 시각이 lastBuildDate에 들어가므로, 같은 입력에
            같은 출력이 필요하면 now를 지정해야 합니다.
    """
    now = now or datetime.now(timezone.utc)

    records = extract_records(sdd, html)
    entries = build_entries(sdd, records, now)

    channel = FeedChannel(
        title=sdd.channel.title or sdd.title,
        link=sdd.url,
        description=sdd.title,
        language=sdd.channel.language,
        generator=sdd.channel.generator or DEFAULT_GENERATOR,
        image=normalize(sdd.favicon, sdd.url),
        last_build=now,
    )
    return render_rss(channel, entries)


def extract_records(sdd: SiteDataDefinition, html: str) -> list[ItemRecord]:
    """문서에서 항목 컨테이너마다 ItemRecord 하나를 만듭니다."""
    document = parse_document(html)
    page_metadata = resolve_page_metadata(document, sdd.page_metadata)

    containers = select(document, sdd.item_list.selector)
    logger.info(
        "%d개 항목 발견 (선택자: %s)", len(containers), sdd.item_list.selector
    )

    # 필드 추출 전에 모든 컨테이너에서 제거 선택자를 먼저 적용
    if sdd.item_list.subtract:
        for container in containers:
            if not container.decomposed:
                subtract(container, sdd.item_list.subtract)

    url_fields = _url_fields(sdd)
    records: list[ItemRecord] = []
    for container in containers:
        record: ItemRecord = {}
        for name, spec in sdd.field_specs.items():
            if container.decomposed and not isinstance(spec, PageVariableField):
                # 다른 컨테이너의 제거 선택자에 함께 제거된 중첩 컨테이너
                value = None
            else:
                value = extract(container, spec, page_metadata)
            if name in url_fields:
                value = normalize(value, sdd.url)
            record[name] = value
        records.append(record)

    return records


def build_entries(
    sdd: SiteDataDefinition,
    records: list[ItemRecord],
    now: datetime,
) -> list[FeedEntry]:
    """출력 매핑에 따라 ItemRecord를 FeedEntry로 변환합니다."""
    mapping = sdd.output_mapping
    entries = []

    for record in records:
        link = encode_url(_value(record, mapping.link))
        guid = _value(record, mapping.guid)
        published = parse_date(_value(record, mapping.date)) or now

        enclosure = None
        cover = _value(record, mapping.cover)
        if cover:
            cover_url = encode_url(normalize(cover, sdd.url))
            enclosure = Enclosure(url=cover_url, media_type=_media_type(cover_url))

        entries.append(
            FeedEntry(
                title=_value(record, mapping.title),
                id=guid or link,
                link=link,
                description=_value(record, mapping.description),
                published=published,
                enclosure=enclosure,
            )
        )

    return entries


def parse_date(value: str | None) -> datetime | None:
    """날짜 문자열을 timezone-aware datetime으로 변환합니다. 실패 시 None."""
    if not value or not value.strip():
        return None
    text = value.strip()

    parsed = None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass

    if parsed is None:
        for fmt in DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError, OverflowError):
            logger.debug("날짜 해석 실패: %s", text)
            return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    # UTC로 옮길 수 없는 범위 밖 날짜는 해석 실패로 취급
    try:
        return parsed.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        logger.debug("날짜 범위 초과: %s", text)
        return None


def _url_fields(sdd: SiteDataDefinition) -> set[str]:
    """URL 정규화 대상 필드 이름"""
    names = {name for name in URL_FIELD_NAMES if name in sdd.field_specs}
    names.update(
        name for name, spec in sdd.field_specs.items() if isinstance(spec, ImageField)
    )
    names.update(
        name
        for name in (sdd.output_mapping.link, sdd.output_mapping.cover)
        if name
    )
    return names


def _value(record: ItemRecord, field_name: str | None) -> str | None:
    if not field_name:
        return None
    return record.get(field_name)


def _media_type(url: str) -> str:
    try:
        guessed, _ = mimetypes.guess_type(urlsplit(url).path)
    except ValueError:
        return DEFAULT_ENCLOSURE_TYPE
    if guessed and guessed.startswith("image/"):
        return guessed
    return DEFAULT_ENCLOSURE_TYPE
