"""SDD 검증 - 저장된 JSON 정의를 타입이 있는 SiteDataDefinition으로 변환"""

from __future__ import annotations

import json
from typing import Any

from sitefeed.config import FetchDefaults
from sitefeed.errors import ConfigError
from sitefeed.models import (
    AttributeField,
    ChannelSpec,
    FetchConfig,
    FetchMode,
    FieldSpec,
    ImageField,
    ItemListSpec,
    OutputMapping,
    PageVariableField,
    SiteDataDefinition,
    TextField,
    Viewport,
)

REQUIRED_FIELDS = ("version", "url", "title", "data_list", "data_list_elements", "rss")
OUTPUT_SLOTS = ("title", "link", "guid", "description", "date", "cover")

# 저장 포맷의 타입 태그 → 정규 이름
KIND_ALIASES = {
    "text": "text",
    "attr": "attribute",
    "attribute": "attribute",
    "image": "image",
    "var": "pageVariable",
    "pageVariable": "pageVariable",
}

# puppeteer 대기 조건 → playwright 대기 조건
WAIT_UNTIL_ALIASES = {
    "networkidle0": "networkidle",
    "networkidle2": "networkidle",
    "networkidle": "networkidle",
    "load": "load",
    "domcontentloaded": "domcontentloaded",
    "commit": "commit",
}


def parse_sdd(
    text: str | bytes, defaults: FetchDefaults | None = None
) -> SiteDataDefinition:
    """JSON 문자열을 디코딩한 뒤 검증합니다."""
    try:
        raw = json.loads(text)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"SDD JSON을 해석할 수 없습니다: {e}") from e
    return validate(raw, defaults)


def validate(raw: Any, defaults: FetchDefaults | None = None) -> SiteDataDefinition:
    """SDD 원본 딕셔너리를 검증하고 SiteDataDefinition을 반환합니다.

    구조만 검사합니다. 선택자 문법은 검사하지 않으며, 잘못된 선택자는
    추출 시점에 매치 0건으로 처리됩니다.
    user_agent, timeout이 없으면 defaults(설정의 fetch 섹션) 값을 씁니다.

    Raises:
        ConfigError: 필수 필드 누락 또는 잘못된 필드 명세
    """
    if not isinstance(raw, dict):
        raise ConfigError("SDD는 JSON 객체여야 합니다.")

    missing = [name for name in REQUIRED_FIELDS if name not in raw]
    if missing:
        raise ConfigError(f"SDD 필수 필드 누락: {', '.join(missing)}")

    url = _require_str(raw, "url")
    title = _require_str(raw, "title")

    data_list = _require_dict(raw, "data_list")
    item_list = ItemListSpec(
        selector=_selector_css(data_list, "data_list"),
        subtract=_string_tuple(data_list.get("un_selectors"), "data_list.un_selectors"),
    )

    meta_raw = raw.get("meta") or {}
    if not isinstance(meta_raw, dict):
        raise ConfigError("meta는 객체여야 합니다.")
    page_metadata: dict[str, FieldSpec] = {}
    for name, spec_raw in meta_raw.items():
        spec = _field_spec(spec_raw, f"meta.{name}", meta_names=None)
        if isinstance(spec, PageVariableField):
            raise ConfigError(f"meta.{name}: 페이지 메타데이터는 var 타입일 수 없습니다.")
        page_metadata[name] = spec

    elements = _require_dict(raw, "data_list_elements")
    if not elements:
        raise ConfigError("data_list_elements가 비어 있습니다.")
    field_specs = {
        name: _field_spec(spec_raw, f"data_list_elements.{name}", set(page_metadata))
        for name, spec_raw in elements.items()
    }

    rss = _require_dict(raw, "rss")
    items_raw = rss.get("items")
    if not isinstance(items_raw, dict):
        raise ConfigError("rss.items는 객체여야 합니다.")
    mapping = OutputMapping(
        **{
            slot: _optional_str(items_raw, slot, "rss.items") or None
            for slot in OUTPUT_SLOTS
        }
    )
    for slot, name in mapping.referenced_fields().items():
        if name not in field_specs:
            raise ConfigError(
                f"rss.items.{slot}가 존재하지 않는 필드를 참조합니다: {name}"
            )

    channel_raw = rss.get("channel") or {}
    if not isinstance(channel_raw, dict):
        raise ConfigError("rss.channel은 객체여야 합니다.")
    channel = ChannelSpec(
        title=_optional_str(channel_raw, "title", "rss.channel"),
        language=_optional_str(channel_raw, "language", "rss.channel"),
        generator=_optional_str(channel_raw, "generator", "rss.channel"),
    )

    return SiteDataDefinition(
        version=str(raw["version"]),
        url=url,
        title=title,
        favicon=_optional_str(raw, "favicon"),
        fetch=_fetch_config(raw, url, defaults or FetchDefaults()),
        item_list=item_list,
        field_specs=field_specs,
        page_metadata=page_metadata,
        output_mapping=mapping,
        channel=channel,
    )


def _field_spec(spec_raw: Any, where: str, meta_names: set[str] | None) -> FieldSpec:
    """원본 필드 명세를 태그 유니온으로 변환합니다."""
    if not isinstance(spec_raw, dict):
        raise ConfigError(f"{where}: 필드 명세는 객체여야 합니다.")

    kind = KIND_ALIASES.get(spec_raw.get("type", ""))
    if kind is None:
        raise ConfigError(f"{where}: 알 수 없는 필드 타입 {spec_raw.get('type')!r}")

    if kind == "pageVariable":
        path = spec_raw.get("value")
        if not isinstance(path, str) or not path.startswith("meta.") or path == "meta.":
            raise ConfigError(f"{where}: var 값은 'meta.<이름>' 형식이어야 합니다.")
        if meta_names is not None and path.split(".", 1)[1] not in meta_names:
            raise ConfigError(f"{where}: 정의되지 않은 메타데이터 참조 {path}")
        return PageVariableField(path=path)

    selector = _selector_css(spec_raw, where)
    subtract = _string_tuple(spec_raw.get("un_selectors"), f"{where}.un_selectors")

    if kind == "text":
        return TextField(selector=selector, subtract=subtract)
    if kind == "image":
        return ImageField(selector=selector, subtract=subtract)

    attribute = spec_raw.get("value")
    if not isinstance(attribute, str) or not attribute:
        raise ConfigError(f"{where}: attr 타입에는 속성 이름(value)이 필요합니다.")
    return AttributeField(selector=selector, attribute=attribute, subtract=subtract)


def _fetch_config(raw: dict, url: str, defaults: FetchDefaults) -> FetchConfig:
    """수집 파라미터를 한 번에 결정합니다."""
    mode = (
        FetchMode.HEADLESS
        if raw.get("suggest_fetch_method") == "headless"
        else FetchMode.PLAIN
    )

    encoding = raw.get("encoding")
    if isinstance(encoding, str):
        encodings = (encoding,) if encoding else ()
    else:
        encodings = _string_tuple(encoding, "encoding")

    viewport_raw = raw.get("viewport") or {}
    try:
        viewport = Viewport(
            width=int(viewport_raw.get("width") or 1280),
            height=int(viewport_raw.get("height") or 800),
        )
        timeout_ms = int(raw.get("timeout") or defaults.timeout_seconds * 1000)
    except (AttributeError, TypeError, ValueError) as e:
        raise ConfigError(f"수집 설정이 잘못되었습니다: {e}") from e

    wait_until = WAIT_UNTIL_ALIASES.get(raw.get("waitUntil") or "networkidle2")
    if wait_until is None:
        raise ConfigError(f"알 수 없는 waitUntil 값: {raw.get('waitUntil')!r}")

    return FetchConfig(
        url=url,
        mode=mode,
        user_agent=raw.get("user_agent") or defaults.user_agent,
        timeout_ms=timeout_ms,
        encodings=encodings,
        viewport=viewport,
        wait_until=wait_until,
    )


def _require_str(raw: dict, key: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{key}는 비어 있지 않은 문자열이어야 합니다.")
    return value


def _optional_str(raw: dict, key: str, where: str = "") -> str | None:
    """없으면 None, 있으면 문자열이어야 합니다."""
    value = raw.get(key)
    if value is not None and not isinstance(value, str):
        name = f"{where}.{key}" if where else key
        raise ConfigError(f"{name}는 문자열이어야 합니다.")
    return value


def _require_dict(raw: dict, key: str) -> dict:
    value = raw.get(key)
    if not isinstance(value, dict):
        raise ConfigError(f"{key}는 객체여야 합니다.")
    return value


def _selector_css(raw: dict, where: str) -> str:
    selector = raw.get("selector")
    css = selector.get("css") if isinstance(selector, dict) else None
    if not isinstance(css, str) or not css.strip():
        raise ConfigError(f"{where}: selector.css가 필요합니다.")
    return css


def _string_tuple(value: Any, where: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{where}는 문자열 리스트여야 합니다.")
    return tuple(v for v in value if v)
