"""설정 관리 모듈 - YAML + .env 기반 설정 로드 및 검증"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from dotenv import load_dotenv

from sitefeed.models import DEFAULT_TIMEOUT_MS, DEFAULT_USER_AGENT

STORAGE_BACKENDS = ("filesystem", "sqlite")


@dataclass
class ServerConfig:
    """HTTP 서버 설정"""

    host: str = "127.0.0.1"
    port: int = 3000
    add_key: str = ""


@dataclass
class CacheConfig:
    """피드 캐시 설정 (0이면 캐시 비활성화)"""

    minutes: int = 0

    @property
    def ttl_seconds(self) -> int:
        return self.minutes * 60


@dataclass
class StorageConfig:
    """객체 저장소 설정"""

    backend: str = "filesystem"  # "filesystem" | "sqlite"
    root_dir: str = "data/store"
    db_path: str = "data/sitefeed.db"


@dataclass
class FetchDefaults:
    """SDD에 값이 없을 때 사용하는 수집 기본값"""

    user_agent: str = DEFAULT_USER_AGENT
    timeout_seconds: int = DEFAULT_TIMEOUT_MS // 1000


@dataclass
class Settings:
    """전체 애플리케이션 설정"""

    server: ServerConfig = field(default_factory=ServerConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    fetch: FetchDefaults = field(default_factory=FetchDefaults)

    @classmethod
    def load(
        cls,
        config_path: str = "config/settings.yaml",
        env_path: str = "config/.env",
    ) -> Settings:
        """설정 파일과 환경 변수를 로드하여 Settings 인스턴스를 생성합니다."""
        env_file = Path(env_path)
        if env_file.exists():
            load_dotenv(env_file)

        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(
                f"설정 파일을 찾을 수 없습니다: {config_path}\n"
                f"config/settings.example.yaml을 복사하여 생성해 주세요."
            )

        with open(config_file, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        return cls._from_dict(raw)

    @classmethod
    def _from_dict(cls, raw: dict) -> Settings:
        """딕셔너리에서 Settings 인스턴스를 생성합니다."""
        sv_raw = raw.get("server") or {}
        server = ServerConfig(
            host=sv_raw.get("host", "127.0.0.1"),
            port=int(cls._resolve_env(sv_raw.get("port", 3000)) or 3000),
            add_key=cls._resolve_env(sv_raw.get("add_key", "")),
        )

        cache_raw = raw.get("cache") or {}
        cache = CacheConfig(
            minutes=int(cls._resolve_env(cache_raw.get("minutes", 0)) or 0),
        )

        st_raw = raw.get("storage") or {}
        storage = StorageConfig(
            backend=st_raw.get("backend", "filesystem"),
            root_dir=st_raw.get("root_dir", "data/store"),
            db_path=st_raw.get("db_path", "data/sitefeed.db"),
        )

        fetch_raw = raw.get("fetch") or {}
        fetch = FetchDefaults(
            user_agent=fetch_raw.get("user_agent", DEFAULT_USER_AGENT),
            timeout_seconds=int(
                fetch_raw.get("timeout_seconds", DEFAULT_TIMEOUT_MS // 1000)
            ),
        )

        return cls(server=server, cache=cache, storage=storage, fetch=fetch)

    @staticmethod
    def _resolve_env(value):
        """${ENV_VAR} 형식의 값을 환경 변수로 치환합니다."""
        if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
            env_key = value[2:-1]
            return os.getenv(env_key, "")
        return value

    def validate(self) -> list[str]:
        """설정 값의 유효성을 검사하고 경고 메시지 리스트를 반환합니다."""
        warnings = []

        if not self.server.add_key:
            warnings.append(
                "ADD_KEY가 설정되지 않았습니다. 인증이 필요한 엔드포인트는 모두 거부됩니다."
            )

        if self.storage.backend not in STORAGE_BACKENDS:
            warnings.append(
                f"알 수 없는 저장소 백엔드입니다: {self.storage.backend} "
                f"(filesystem 사용)"
            )

        if self.cache.minutes <= 0:
            warnings.append("피드 캐시가 비활성화되어 있습니다 (cache.minutes = 0).")

        return warnings
