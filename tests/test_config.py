"""Settings 설정 로드 테스트"""

import pytest
import yaml

from sitefeed.config import (
    CacheConfig,
    FetchDefaults,
    ServerConfig,
    Settings,
    StorageConfig,
)
from sitefeed.models import DEFAULT_USER_AGENT


@pytest.fixture
def sample_config(tmp_path):
    """테스트용 설정 파일 생성"""
    config = {
        "server": {
            "host": "0.0.0.0",
            "port": 8080,
            "add_key": "secret",
        },
        "cache": {
            "minutes": 15,
        },
        "storage": {
            "backend": "sqlite",
            "root_dir": "data/test-store",
            "db_path": "data/test.db",
        },
        "fetch": {
            "user_agent": "TestAgent/1.0",
            "timeout_seconds": 10,
        },
    }
    config_path = tmp_path / "settings.yaml"
    with open(config_path, "w") as f:
        yaml.dump(config, f)
    return config_path


class TestSettings:
    """Settings 클래스 테스트"""

    def test_load_from_yaml(self, sample_config):
        """YAML 파일에서 설정 로드 테스트"""
        settings = Settings.load(config_path=str(sample_config), env_path="/nonexistent")

        assert settings.server.host == "0.0.0.0"
        assert settings.server.port == 8080
        assert settings.server.add_key == "secret"
        assert settings.cache.minutes == 15
        assert settings.cache.ttl_seconds == 900
        assert settings.storage.backend == "sqlite"
        assert settings.storage.db_path == "data/test.db"
        assert settings.fetch.user_agent == "TestAgent/1.0"
        assert settings.fetch.timeout_seconds == 10

    def test_missing_config_file(self):
        """존재하지 않는 설정 파일 로드 시 에러 테스트"""
        with pytest.raises(FileNotFoundError):
            Settings.load(config_path="/nonexistent/settings.yaml")

    def test_env_placeholders(self, tmp_path, monkeypatch):
        """${VAR} 값은 환경 변수로 치환"""
        monkeypatch.setenv("TEST_ADD_KEY", "from-env")
        monkeypatch.setenv("TEST_CACHE_MINUTES", "5")
        config_path = tmp_path / "settings.yaml"
        config_path.write_text(
            'server:\n  add_key: "${TEST_ADD_KEY}"\n'
            'cache:\n  minutes: "${TEST_CACHE_MINUTES}"\n'
        )

        settings = Settings.load(config_path=str(config_path), env_path="/nonexistent")
        assert settings.server.add_key == "from-env"
        assert settings.cache.minutes == 5

    def test_env_file_loaded(self, tmp_path, monkeypatch):
        """.env 파일의 값도 치환에 사용"""
        monkeypatch.delenv("TEST_DOTENV_KEY", raising=False)
        env_path = tmp_path / ".env"
        env_path.write_text("TEST_DOTENV_KEY=dotenv-secret\n")
        config_path = tmp_path / "settings.yaml"
        config_path.write_text('server:\n  add_key: "${TEST_DOTENV_KEY}"\n')

        try:
            settings = Settings.load(config_path=str(config_path), env_path=str(env_path))
            assert settings.server.add_key == "dotenv-secret"
        finally:
            monkeypatch.delenv("TEST_DOTENV_KEY", raising=False)

    def test_env_resolution(self, monkeypatch):
        """환경 변수 치환 테스트"""
        monkeypatch.setenv("TEST_TOKEN", "resolved-token")
        result = Settings._resolve_env("${TEST_TOKEN}")
        assert result == "resolved-token"

    def test_env_resolution_missing(self):
        """존재하지 않는 환경 변수 치환 테스트"""
        result = Settings._resolve_env("${NONEXISTENT_VAR}")
        assert result == ""

    def test_env_resolution_plain_string(self):
        """일반 문자열은 치환하지 않음 테스트"""
        result = Settings._resolve_env("plain-value")
        assert result == "plain-value"

    def test_validate_no_warnings(self, sample_config):
        """모든 값이 정상이면 경고 없음"""
        settings = Settings.load(config_path=str(sample_config), env_path="/nonexistent")
        assert settings.validate() == []

    def test_validate_warnings(self, tmp_path):
        """키 미설정, 알 수 없는 백엔드, 캐시 비활성화 경고 테스트"""
        config_path = tmp_path / "settings.yaml"
        config_path.write_text("storage:\n  backend: s3\n")

        settings = Settings.load(config_path=str(config_path), env_path="/nonexistent")
        warnings = settings.validate()
        assert any("ADD_KEY가 설정되지 않았습니다" in w for w in warnings)
        assert any("s3" in w for w in warnings)
        assert any("피드 캐시가 비활성화" in w for w in warnings)

    def test_empty_config(self, tmp_path):
        """빈 설정 파일 로드 테스트"""
        config_path = tmp_path / "empty.yaml"
        config_path.write_text("")

        settings = Settings.load(config_path=str(config_path), env_path="/nonexistent")
        assert isinstance(settings.server, ServerConfig)
        assert isinstance(settings.cache, CacheConfig)
        assert isinstance(settings.storage, StorageConfig)
        assert isinstance(settings.fetch, FetchDefaults)
        assert settings.server.port == 3000
        assert settings.cache.minutes == 0
        assert settings.storage.backend == "filesystem"
        assert settings.fetch.user_agent == DEFAULT_USER_AGENT


class TestCacheConfig:
    """CacheConfig 데이터 클래스 테스트"""

    def test_ttl_seconds(self):
        """분 단위 설정을 초로 변환"""
        assert CacheConfig(minutes=2).ttl_seconds == 120
        assert CacheConfig().ttl_seconds == 0
