"""필드 추출기 - 항목 컨테이너에서 필드 명세 하나를 스칼라 값으로 변환"""

from __future__ import annotations

import copy
from collections.abc import Mapping

from bs4 import BeautifulSoup, Tag

from sitefeed.extractor.selector import select, subtract
from sitefeed.models import (
    AttributeField,
    FieldSpec,
    ImageField,
    PageVariableField,
    TextField,
)


def extract(
    item_root: BeautifulSoup | Tag,
    spec: FieldSpec,
    page_metadata: Mapping[str, str | None],
) -> str | None:
    """필드 명세에 따라 값을 추출합니다.

    선택자 매치가 없거나 속성이 없으면 None을 반환하며 예외를 던지지 않습니다.
    pageVariable 필드는 item_root를 조회하지 않고 미리 해석된
    page_metadata에서 값을 가져옵니다.
    """
    if isinstance(spec, PageVariableField):
        return page_metadata.get(spec.name)

    element = _first_match(item_root, spec)
    if element is None:
        return None

    if isinstance(spec, TextField):
        return element.get_text().strip()
    if isinstance(spec, (AttributeField, ImageField)):
        return _attribute(element, spec.attribute)

    raise TypeError(f"지원하지 않는 필드 명세: {spec!r}")


def resolve_page_metadata(
    document: BeautifulSoup | Tag,
    specs: Mapping[str, FieldSpec],
) -> dict[str, str | None]:
    """페이지 전체를 대상으로 메타데이터를 한 번씩 해석합니다."""
    return {name: extract(document, spec, {}) for name, spec in specs.items()}


def _first_match(
    item_root: BeautifulSoup | Tag,
    spec: TextField | AttributeField | ImageField,
) -> Tag | None:
    matches = select(item_root, spec.selector)
    if not matches:
        return None

    element = matches[0]
    if spec.subtract:
        # 다른 필드가 보는 트리에 영향을 주지 않도록 복사본에서 제거
        element = copy.copy(element)
        subtract(element, spec.subtract)
    return element


def _attribute(element: Tag, name: str) -> str | None:
    value = element.get(name)
    if value is None:
        return None
    # class, rel 등 다중 값 속성
    if isinstance(value, list):
        return " ".join(value)
    return value
