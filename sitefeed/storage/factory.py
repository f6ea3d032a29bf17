"""설정에 따라 객체 저장소 백엔드를 선택"""

from __future__ import annotations

from sitefeed.config import StorageConfig
from sitefeed.logger import get_logger
from sitefeed.storage.base import ObjectStore
from sitefeed.storage.filesystem import FileSystemStore
from sitefeed.storage.sqlite import SQLiteStore

logger = get_logger("storage")


def create_store(config: StorageConfig) -> ObjectStore:
    """프로세스 시작 시 한 번 호출하여 저장소를 생성합니다 (초기화는 호출자 몫)."""
    if config.backend == "sqlite":
        return SQLiteStore(config.db_path)
    if config.backend != "filesystem":
        logger.warning("알 수 없는 저장소 백엔드 %s, filesystem 사용", config.backend)
    return FileSystemStore(config.root_dir)
