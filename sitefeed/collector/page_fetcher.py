"""페이지 수집기 - 일반 HTTP 요청 또는 Playwright 헤드리스 렌더링으로 HTML 획득"""

from __future__ import annotations

import codecs
import re

import httpx
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Route
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from sitefeed.errors import AcquisitionError
from sitefeed.logger import get_logger
from sitefeed.models import FetchConfig, FetchMode

logger = get_logger("collector.page")

# 힌트와 응답 charset이 모두 실패했을 때 시도하는 인코딩 (순서 고정)
FALLBACK_ENCODINGS = ("utf-8", "gb18030", "gbk", "gb2312")

# 한자 포함 여부로 디코딩 성공을 추정 (휴리스틱, 정확성 보장 없음)
HAN_PATTERN = re.compile(r"[一-龥]")

BLOCKED_RESOURCE_TYPES = {"image", "stylesheet", "font"}

BROWSER_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]


class PageFetcher:
    """FetchConfig에 따라 페이지 마크업을 텍스트로 가져옵니다.

    재시도는 하지 않으며, 모든 실패는 AcquisitionError로 전달합니다.
    """

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        # 테스트에서 httpx.MockTransport를 주입할 수 있습니다
        self.transport = transport

    async def fetch(self, config: FetchConfig) -> str:
        """페이지 HTML을 반환합니다."""
        logger.info("페이지 수집 (%s): %s", config.mode.value, config.url)
        if config.mode is FetchMode.HEADLESS:
            return await self._fetch_headless(config)
        return await self._fetch_plain(config)

    async def _fetch_plain(self, config: FetchConfig) -> str:
        """httpx로 페이지를 받아 인코딩 후보를 차례로 시도합니다."""
        headers = {
            "User-Agent": config.user_agent,
            "Accept-Charset": "gbk, utf-8;q=0.7, *;q=0.3",
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        }

        try:
            async with httpx.AsyncClient(
                timeout=config.timeout_seconds,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                response = await client.get(config.url, headers=headers)
                response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.error("수집 타임아웃 (%s): %s", config.url, e)
            raise AcquisitionError(f"Failed to fetch {config.url}: timeout") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error("수집 실패 (%s): HTTP %d", config.url, status)
            raise AcquisitionError(
                f"Failed to fetch {config.url}: HTTP error! status: {status}"
            ) from e
        except httpx.HTTPError as e:
            logger.error("수집 실패 (%s): %s", config.url, e)
            raise AcquisitionError(f"Failed to fetch {config.url}: {e}") from e

        trusted = trusted_encodings(config.encodings, response.charset_encoding)
        return decode_content(response.content, trusted)

    async def _fetch_headless(self, config: FetchConfig) -> str:
        """Playwright Chromium으로 렌더링한 뒤 HTML을 반환합니다."""
        try:
            async with async_playwright() as p:
                browser = await p.chromium.launch(headless=True, args=BROWSER_ARGS)
                try:
                    context = await browser.new_context(
                        user_agent=config.user_agent,
                        viewport={
                            "width": config.viewport.width,
                            "height": config.viewport.height,
                        },
                    )
                    page = await context.new_page()
                    # 이미지, 스타일시트, 폰트 요청은 차단
                    await page.route("**/*", _block_heavy_resources)
                    await page.goto(
                        config.url,
                        wait_until=config.wait_until,
                        timeout=config.timeout_ms,
                    )
                    return await page.content()
                finally:
                    await browser.close()
        except PlaywrightTimeoutError as e:
            logger.error("헤드리스 수집 타임아웃 (%s): %s", config.url, e)
            raise AcquisitionError(f"Failed to render {config.url}: timeout") from e
        except PlaywrightError as e:
            logger.error("헤드리스 수집 실패 (%s): %s", config.url, e)
            raise AcquisitionError(f"Failed to render {config.url}: {e}") from e


async def _block_heavy_resources(route: Route) -> None:
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        await route.abort()
    else:
        await route.continue_()


def trusted_encodings(hints: tuple[str, ...], declared: str | None) -> list[str]:
    """SDD 힌트 → 응답 charset 순서의 중복 없는 인코딩 목록"""
    chain: list[str] = []
    seen: set[str] = set()
    for name in (*hints, declared):
        if not name:
            continue
        try:
            canonical = codecs.lookup(name).name
        except LookupError:
            logger.warning("알 수 없는 인코딩 무시: %s", name)
            continue
        if canonical not in seen:
            seen.add(canonical)
            chain.append(name)
    return chain


def decode_content(
    content: bytes,
    trusted: list[str],
    fallbacks: tuple[str, ...] = FALLBACK_ENCODINGS,
) -> str:
    """바이트열을 텍스트로 디코딩합니다.

    1. 힌트/응답 charset 중 처음으로 엄격 디코딩에 성공한 결과
    2. utf-8 엄격 디코딩 결과
    3. 나머지 후보 중 한자가 포함된 첫 결과, 없으면 처음 성공한 결과

    Raises:
        AcquisitionError: 어떤 후보로도 디코딩할 수 없을 때
    """
    for encoding in trusted:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError as e:
            logger.debug("지정 인코딩 실패 %s: %s", encoding, e)

    first_success: str | None = None
    for encoding in fallbacks:
        try:
            decoded = content.decode(encoding)
        except UnicodeDecodeError as e:
            logger.debug("인코딩 실패 %s: %s", encoding, e)
            continue
        if codecs.lookup(encoding).name == "utf-8" or HAN_PATTERN.search(decoded):
            logger.debug("인코딩 결정: %s", encoding)
            return decoded
        if first_success is None:
            first_success = decoded

    if first_success is None:
        raise AcquisitionError(
            "Failed to decode content with any of the tried encodings"
        )
    return first_success
