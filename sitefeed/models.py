"""데이터 모델 정의 - SDD, 피드 항목, 읽기 목록 항목"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)
DEFAULT_TIMEOUT_MS = 30000
DEFAULT_GENERATOR = "SiteFeed"


class FetchMode(Enum):
    """페이지 수집 방식"""

    PLAIN = "plain"
    HEADLESS = "headless"


@dataclass(frozen=True)
class Viewport:
    """헤드리스 브라우저 뷰포트"""

    width: int = 1280
    height: int = 800


@dataclass(frozen=True)
class FetchConfig:
    """페이지 수집 파라미터 (SDD 로드 시점에 한 번 결정)"""

    url: str
    mode: FetchMode = FetchMode.PLAIN
    user_agent: str = DEFAULT_USER_AGENT
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    encodings: tuple[str, ...] = ()
    viewport: Viewport = field(default_factory=Viewport)
    wait_until: str = "networkidle"

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


# ──────────────────────────────────────────────
# 필드 명세 (닫힌 태그 유니온)
# ──────────────────────────────────────────────
@dataclass(frozen=True)
class TextField:
    """선택자 첫 매치의 텍스트"""

    selector: str
    subtract: tuple[str, ...] = ()


@dataclass(frozen=True)
class AttributeField:
    """선택자 첫 매치의 속성 값"""

    selector: str
    attribute: str
    subtract: tuple[str, ...] = ()


@dataclass(frozen=True)
class ImageField:
    """선택자 첫 매치의 이미지 주소 (src 속성)"""

    selector: str
    subtract: tuple[str, ...] = ()

    @property
    def attribute(self) -> str:
        return "src"


@dataclass(frozen=True)
class PageVariableField:
    """페이지 메타데이터 참조 (예: "meta.author")"""

    path: str

    @property
    def name(self) -> str:
        return self.path.split(".", 1)[1]


FieldSpec = TextField | AttributeField | ImageField | PageVariableField

# 항목 컨테이너 하나에서 추출한 필드 값
ItemRecord = dict[str, str | None]


@dataclass(frozen=True)
class ItemListSpec:
    """반복 항목 컨테이너 선택자와 제거 선택자"""

    selector: str
    subtract: tuple[str, ...] = ()


@dataclass(frozen=True)
class OutputMapping:
    """피드 항목 슬롯 → 필드 이름"""

    title: str | None = None
    link: str | None = None
    guid: str | None = None
    description: str | None = None
    date: str | None = None
    cover: str | None = None

    def referenced_fields(self) -> dict[str, str]:
        """값이 지정된 슬롯만 반환합니다."""
        slots = {
            "title": self.title,
            "link": self.link,
            "guid": self.guid,
            "description": self.description,
            "date": self.date,
            "cover": self.cover,
        }
        return {slot: name for slot, name in slots.items() if name}


@dataclass(frozen=True)
class ChannelSpec:
    """피드 채널 메타데이터"""

    title: str | None = None
    language: str | None = None
    generator: str | None = None


@dataclass(frozen=True)
class SiteDataDefinition:
    """검증된 SDD"""

    version: str
    url: str
    title: str
    fetch: FetchConfig
    item_list: ItemListSpec
    field_specs: dict[str, FieldSpec]
    output_mapping: OutputMapping
    page_metadata: dict[str, FieldSpec] = field(default_factory=dict)
    channel: ChannelSpec = field(default_factory=ChannelSpec)
    favicon: str | None = None


# ──────────────────────────────────────────────
# 피드 출력
# ──────────────────────────────────────────────
@dataclass
class Enclosure:
    """피드 항목 첨부 (커버 이미지)"""

    url: str
    media_type: str = "image/jpeg"


@dataclass
class FeedEntry:
    """피드 항목"""

    title: str | None
    id: str | None
    link: str | None
    description: str | None
    published: datetime
    enclosure: Enclosure | None = None


@dataclass
class FeedChannel:
    """직렬화할 피드 채널 정보"""

    title: str
    link: str
    description: str = ""
    language: str | None = None
    generator: str = DEFAULT_GENERATOR
    image: str | None = None
    last_build: datetime | None = None


# ──────────────────────────────────────────────
# 저장소 항목
# ──────────────────────────────────────────────
@dataclass
class ReadLaterItem:
    """나중에 읽기 항목"""

    id: str
    url: str
    text: str = ""
    title: str = ""
    timestamp: int = 0  # epoch millis

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "url": self.url,
            "text": self.text,
            "title": self.title,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, raw: dict) -> ReadLaterItem:
        """저장된 JSON 객체에서 항목을 복원합니다. url이 없으면 KeyError."""
        return cls(
            id=str(raw["id"]),
            url=str(raw["url"]),
            text=str(raw.get("text") or ""),
            title=str(raw.get("title") or raw["url"]),
            timestamp=int(raw.get("timestamp") or 0),
        )


@dataclass
class SiteSummary:
    """저장된 SDD 요약 (목록 조회용)"""

    key: str
    title: str
    url: str
    favicon: str | None = None
