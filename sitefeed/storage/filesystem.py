"""파일시스템 기반 객체 저장소"""

from __future__ import annotations

import asyncio
from pathlib import Path

from sitefeed.logger import get_logger
from sitefeed.storage.base import ObjectInfo, ObjectStore

logger = get_logger("storage.filesystem")


class FileSystemStore(ObjectStore):
    """루트 디렉토리 아래 파일로 객체를 저장합니다.

    키의 "/"는 하위 디렉토리가 되며, uploaded_at은 파일 수정 시각입니다.
    """

    def __init__(self, root_dir: str | Path) -> None:
        self.root = Path(root_dir)

    async def initialize(self) -> None:
        await asyncio.to_thread(self.root.mkdir, parents=True, exist_ok=True)
        logger.info("파일 저장소 초기화 완료: %s", self.root)

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        root = self.root.resolve()
        if path != root and root not in path.parents:
            raise ValueError(f"저장소 밖을 가리키는 키입니다: {key}")
        return path

    async def put(
        self, key: str, data: bytes, content_type: str = "application/octet-stream"
    ) -> None:
        path = self._path(key)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        await asyncio.to_thread(_write)

    async def get(self, key: str) -> bytes | None:
        path = self._path(key)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            return None

    async def head(self, key: str) -> ObjectInfo | None:
        path = self._path(key)
        try:
            stat = await asyncio.to_thread(path.stat)
        except FileNotFoundError:
            return None
        return ObjectInfo(key=key, size=stat.st_size, uploaded_at=stat.st_mtime)

    async def list(self, prefix: str = "") -> list[ObjectInfo]:
        def _scan() -> list[ObjectInfo]:
            if not self.root.exists():
                return []
            infos = []
            for path in self.root.rglob("*"):
                if not path.is_file():
                    continue
                key = path.relative_to(self.root).as_posix()
                if not key.startswith(prefix):
                    continue
                stat = path.stat()
                infos.append(
                    ObjectInfo(key=key, size=stat.st_size, uploaded_at=stat.st_mtime)
                )
            return sorted(infos, key=lambda info: info.key)

        return await asyncio.to_thread(_scan)

    async def delete(self, key: str) -> None:
        path = self._path(key)
        await asyncio.to_thread(path.unlink, missing_ok=True)
