"""CSS 선택자 해석 및 제거(subtract) 선택자 적용"""

from __future__ import annotations

from collections.abc import Iterable

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

from sitefeed.logger import get_logger

logger = get_logger("extractor.selector")


def parse_document(html: str) -> BeautifulSoup:
    """HTML을 문서 핸들로 파싱합니다. 잘못된 마크업도 최대한 파싱합니다."""
    return BeautifulSoup(html or "", "html.parser")


def select(root: BeautifulSoup | Tag, css: str) -> list[Tag]:
    """root 아래에서 선택자에 매칭되는 요소를 문서 순서대로 반환합니다.

    문법이 잘못된 선택자는 예외 대신 빈 리스트로 처리합니다.
    """
    try:
        return list(root.select(css))
    except (SelectorSyntaxError, ValueError, NotImplementedError) as e:
        logger.debug("선택자 해석 실패 (%s): %s", css, e)
        return []


def subtract(root: BeautifulSoup | Tag, selectors: Iterable[str]) -> int:
    """root의 하위 요소 중 선택자에 매칭되는 것을 모두 제거합니다.

    root 자신은 제거 대상이 아닙니다. 제거된 요소 수를 반환합니다.
    """
    removed = 0
    for css in selectors:
        for element in select(root, css):
            # 상위 요소와 함께 이미 제거된 경우
            if element.decomposed:
                continue
            element.decompose()
            removed += 1
    return removed
