"""환경 설정 검증 스크립트

Usage:
    python -m sitefeed.check_setup
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

from sitefeed.config import STORAGE_BACKENDS, Settings, StorageConfig
from sitefeed.repository import SiteRepository
from sitefeed.storage.factory import create_store


def check_python_version() -> bool:
    """Python 버전 확인"""
    version = sys.version_info
    ok = version >= (3, 11)
    status = "✅" if ok else "❌"
    print(f"{status} Python {version.major}.{version.minor}.{version.micro} ... {'OK' if ok else 'Python 3.11+ 필요'}")
    return ok


def check_sqlite() -> bool:
    """SQLite 사용 가능 확인"""
    try:
        import sqlite3

        print(f"✅ SQLite database ... OK (v{sqlite3.sqlite_version})")
        return True
    except ImportError:
        print("❌ SQLite database ... sqlite3 모듈 없음")
        return False


def check_playwright() -> bool:
    """Playwright 설치 확인 (헤드리스 수집에만 필요)"""
    try:
        from playwright.async_api import async_playwright  # noqa: F401

        print("✅ Playwright ... OK")
        return True
    except ImportError:
        print("⚠️  Playwright ... 미설치 (pip install playwright && playwright install chromium)")
        return False


def check_config_files() -> bool:
    """설정 파일 존재 확인"""
    settings_exists = Path("config/settings.yaml").exists()
    env_exists = Path("config/.env").exists()

    if settings_exists:
        print("✅ config/settings.yaml ... OK")
    else:
        print("⚠️  config/settings.yaml ... 없음 (cp config/settings.example.yaml config/settings.yaml)")

    if env_exists:
        print("✅ config/.env ... OK")
    else:
        print("⚠️  config/.env ... 없음 (cp config/.env.example config/.env)")

    return settings_exists and env_exists


def check_add_key(add_key: str) -> bool:
    """관리용 키 설정 확인"""
    if add_key:
        print("✅ ADD_KEY ... OK")
        return True
    print("⚠️  ADD_KEY ... 미설정 (/add-sdd, /list, /read-later 요청이 모두 거부됩니다)")
    return False


def check_storage_backend(backend: str) -> bool:
    """저장소 백엔드 이름 확인"""
    if backend in STORAGE_BACKENDS:
        print(f"✅ Storage backend ... OK ({backend})")
        return True
    print(f"❌ Storage backend ... 알 수 없는 값 {backend!r} (filesystem | sqlite)")
    return False


async def check_stored_sites(config: StorageConfig) -> bool:
    """저장된 SDD 개수 확인"""
    store = create_store(config)
    try:
        await store.initialize()
        sites = await SiteRepository(store).list()
    except Exception as e:
        print(f"❌ Stored SDDs ... 저장소를 열 수 없습니다 ({e})")
        return False
    finally:
        await store.close()

    if not sites:
        print("⚠️  Stored SDDs ... 없음 (POST /add-sdd로 등록하세요)")
        return False
    print(f"✅ Stored SDDs ... {len(sites)}개")
    return True


async def main() -> None:
    """모든 설정 항목을 검증합니다."""
    print("=" * 50)
    print("  SiteFeed - 환경 설정 검증")
    print("=" * 50)
    print()

    results = []

    # 기본 확인
    results.append(check_python_version())
    results.append(check_sqlite())
    results.append(check_playwright())
    print()

    # 설정 파일 확인
    results.append(check_config_files())
    print()

    # 설정 기반 확인
    try:
        settings = Settings.load()

        results.append(check_add_key(settings.server.add_key))
        results.append(check_storage_backend(settings.storage.backend))
        results.append(await check_stored_sites(settings.storage))
    except FileNotFoundError:
        print("⚠️  설정 파일 없음 - 세부 검증 스킵")
        print("   config/settings.example.yaml을 복사하여 config/settings.yaml을 생성하세요.")

    print()
    print("=" * 50)

    if all(results):
        print("✅ All checks passed!")
    else:
        failed = results.count(False)
        print(f"⚠️  {failed}개 항목에 주의가 필요합니다.")

    print("=" * 50)


if __name__ == "__main__":
    asyncio.run(main())
