"""상대 URL → 절대 URL 정규화"""

from __future__ import annotations

import hashlib
import re
from urllib.parse import quote, urlsplit

from sitefeed.logger import get_logger

logger = get_logger("extractor.urls")

SCHEME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")

# RFC 3986 예약 문자와 '%'는 그대로 둡니다 (재인코딩 방지)
URL_SAFE_CHARS = ":/?#[]@!$&'()*+,;=%~"


def normalize(value: str | None, base_url: str) -> str | None:
    """링크/이미지 주소를 base_url의 origin 기준 절대 URL로 변환합니다.

    - None/빈 문자열, 스킴이 있는 값은 그대로 반환
    - "//host/path" 는 base_url의 스킴을 붙임
    - "/path" 는 origin 뒤에 붙임
    - 그 외 상대 경로는 origin + "/" + 값
    - base_url이 잘못되었으면 원래 값을 그대로 반환 (예외 없음)
    """
    if not value or not value.strip():
        return value

    value = value.strip()
    if SCHEME_PATTERN.match(value):
        return value

    try:
        base = urlsplit(base_url)
    except ValueError:
        logger.warning("잘못된 기준 URL: %s", base_url)
        return value
    if not base.scheme or not base.netloc:
        logger.warning("잘못된 기준 URL: %s", base_url)
        return value

    if value.startswith("//"):
        return f"{base.scheme}:{value}"

    origin = f"{base.scheme}://{base.netloc}"
    if value.startswith("/"):
        return f"{origin}{value}"
    return f"{origin}/{value}"


def encode_url(url: str | None) -> str | None:
    """공백과 비 ASCII 문자를 퍼센트 인코딩합니다. 반복 적용해도 결과가 같습니다."""
    if not url:
        return url
    return quote(url, safe=URL_SAFE_CHARS)


def url_key(url: str) -> str:
    """호스트+경로 md5의 앞 8자리. SDD 키와 읽기 목록 항목 ID에 사용합니다."""
    parts = urlsplit(url)
    base = f"{parts.hostname or ''}{parts.path or '/'}"
    return hashlib.md5(base.encode("utf-8")).hexdigest()[:8]
