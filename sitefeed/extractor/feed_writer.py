"""RSS 2.0 직렬화"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from collections.abc import Iterable
from datetime import datetime, timezone
from email.utils import format_datetime

from sitefeed.models import FeedChannel, FeedEntry

RSS_DOCS = "https://validator.w3.org/feed/docs/rss2.html"

# XML 1.0에서 허용되지 않는 제어 문자
INVALID_XML_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


def render_rss(channel: FeedChannel, entries: Iterable[FeedEntry]) -> str:
    """채널 정보와 항목 목록을 RSS 2.0 XML 문자열로 직렬화합니다.

    같은 입력에 대해 항상 같은 바이트열을 생성합니다.
    """
    rss = ET.Element("rss", {"version": "2.0"})
    ch = ET.SubElement(rss, "channel")

    _text(ch, "title", channel.title)
    _text(ch, "link", channel.link)
    _text(ch, "description", channel.description or channel.title)
    if channel.last_build is not None:
        _text(ch, "lastBuildDate", _rfc822(channel.last_build))
    _text(ch, "docs", RSS_DOCS)
    _text(ch, "generator", channel.generator)
    _text(ch, "language", channel.language)

    if channel.image:
        image = ET.SubElement(ch, "image")
        _text(image, "title", channel.title)
        _text(image, "url", channel.image)
        _text(image, "link", channel.link)

    for entry in entries:
        item = ET.SubElement(ch, "item")
        _text(item, "title", entry.title)
        _text(item, "link", entry.link)
        if entry.id:
            guid = ET.SubElement(
                item,
                "guid",
                {"isPermaLink": "true" if entry.id == entry.link else "false"},
            )
            guid.text = INVALID_XML_CHARS.sub("", entry.id)
        _text(item, "pubDate", _rfc822(entry.published))
        _text(item, "description", entry.description)
        if entry.enclosure is not None:
            ET.SubElement(
                item,
                "enclosure",
                {
                    "url": entry.enclosure.url,
                    "length": "0",
                    "type": entry.enclosure.media_type,
                },
            )

    body = ET.tostring(rss, encoding="unicode")
    return '<?xml version="1.0" encoding="utf-8"?>\n' + body


def _text(parent: ET.Element, tag: str, value: str | None) -> None:
    """값이 있을 때만 하위 요소를 추가합니다."""
    if value is None or value == "":
        return
    ET.SubElement(parent, tag).text = INVALID_XML_CHARS.sub("", value)


def _rfc822(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_datetime(value.astimezone(timezone.utc), usegmt=True)
