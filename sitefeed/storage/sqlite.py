"""SQLite 객체 저장소 - aiosqlite 기반 비동기 blob 저장"""

from __future__ import annotations

import time
from pathlib import Path

import aiosqlite

from sitefeed.logger import get_logger
from sitefeed.storage.base import ObjectInfo, ObjectStore

logger = get_logger("storage.sqlite")

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS objects (
    key          TEXT PRIMARY KEY,
    data         BLOB NOT NULL,
    content_type TEXT NOT NULL DEFAULT 'application/octet-stream',
    uploaded_at  REAL NOT NULL
);
"""


class SQLiteStore(ObjectStore):
    """SQLite 테이블 하나에 객체를 저장하는 내구성 저장소"""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        """데이터베이스 연결 및 테이블 생성"""
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self._db = await aiosqlite.connect(self.db_path)
        self._db.row_factory = aiosqlite.Row
        await self._db.executescript(CREATE_TABLE_SQL)
        await self._db.commit()
        logger.info("SQLite 저장소 초기화 완료: %s", self.db_path)

    async def close(self) -> None:
        """데이터베이스 연결 종료"""
        if self._db:
            await self._db.close()
            self._db = None

    @property
    def db(self) -> aiosqlite.Connection:
        if self._db is None:
            raise RuntimeError("DB가 초기화되지 않았습니다. initialize()를 먼저 호출하세요.")
        return self._db

    async def put(
        self, key: str, data: bytes, content_type: str = "application/octet-stream"
    ) -> None:
        await self.db.execute(
            """
            INSERT INTO objects (key, data, content_type, uploaded_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET
                data = excluded.data,
                content_type = excluded.content_type,
                uploaded_at = excluded.uploaded_at
            """,
            (key, data, content_type, time.time()),
        )
        await self.db.commit()

    async def get(self, key: str) -> bytes | None:
        cursor = await self.db.execute(
            "SELECT data FROM objects WHERE key = ?", (key,)
        )
        row = await cursor.fetchone()
        return bytes(row["data"]) if row else None

    async def head(self, key: str) -> ObjectInfo | None:
        cursor = await self.db.execute(
            "SELECT key, length(data) AS size, uploaded_at FROM objects WHERE key = ?",
            (key,),
        )
        row = await cursor.fetchone()
        return self._row_to_info(row) if row else None

    async def list(self, prefix: str = "") -> list[ObjectInfo]:
        cursor = await self.db.execute(
            """
            SELECT key, length(data) AS size, uploaded_at FROM objects
            WHERE substr(key, 1, ?) = ?
            ORDER BY key
            """,
            (len(prefix), prefix),
        )
        rows = await cursor.fetchall()
        return [self._row_to_info(row) for row in rows]

    async def delete(self, key: str) -> None:
        await self.db.execute("DELETE FROM objects WHERE key = ?", (key,))
        await self.db.commit()

    @staticmethod
    def _row_to_info(row: aiosqlite.Row) -> ObjectInfo:
        return ObjectInfo(
            key=row["key"],
            size=row["size"],
            uploaded_at=row["uploaded_at"],
        )
