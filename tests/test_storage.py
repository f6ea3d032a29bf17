"""객체 저장소 테스트 - 파일시스템/SQLite 백엔드 공통 동작"""

import pytest

from sitefeed.config import StorageConfig
from sitefeed.storage.factory import create_store
from sitefeed.storage.filesystem import FileSystemStore
from sitefeed.storage.sqlite import SQLiteStore


@pytest.fixture(params=["filesystem", "sqlite"])
async def store(request, tmp_path):
    """백엔드별 저장소"""
    config = StorageConfig(
        backend=request.param,
        root_dir=str(tmp_path / "store"),
        db_path=str(tmp_path / "test.db"),
    )
    object_store = create_store(config)
    await object_store.initialize()
    yield object_store
    await object_store.close()


class TestObjectStore:
    """ObjectStore 공통 동작 테스트"""

    @pytest.mark.asyncio
    async def test_put_and_get(self, store):
        await store.put("a.json", b'{"x": 1}', content_type="application/json")
        assert await store.get("a.json") == b'{"x": 1}'

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        assert await store.get("missing.json") is None
        assert await store.head("missing.json") is None

    @pytest.mark.asyncio
    async def test_overwrite(self, store):
        await store.put("k", b"old")
        await store.put("k", b"new")
        assert await store.get("k") == b"new"

    @pytest.mark.asyncio
    async def test_head(self, store):
        await store.put("k", b"12345")
        info = await store.head("k")
        assert info.key == "k"
        assert info.size == 5
        assert info.uploaded_at > 0

    @pytest.mark.asyncio
    async def test_list_with_prefix(self, store):
        """접두사 필터와 키 정렬"""
        await store.put("readlater/b.json", b"b")
        await store.put("readlater/a.json", b"a")
        await store.put("site.sdd.json", b"s")

        keys = [info.key for info in await store.list("readlater/")]
        assert keys == ["readlater/a.json", "readlater/b.json"]
        assert len(await store.list()) == 3

    @pytest.mark.asyncio
    async def test_delete(self, store):
        await store.put("k", b"v")
        await store.delete("k")
        assert await store.get("k") is None
        # 없는 키 삭제는 무시
        await store.delete("k")


class TestFactory:
    """create_store() 테스트"""

    def test_backend_selection(self, tmp_path):
        assert isinstance(
            create_store(StorageConfig(backend="sqlite", db_path=str(tmp_path / "x.db"))),
            SQLiteStore,
        )
        assert isinstance(
            create_store(StorageConfig(backend="filesystem", root_dir=str(tmp_path))),
            FileSystemStore,
        )

    def test_unknown_backend_falls_back(self, tmp_path):
        store = create_store(StorageConfig(backend="s3", root_dir=str(tmp_path)))
        assert isinstance(store, FileSystemStore)


class TestFileSystemStore:
    """파일시스템 백엔드 전용 테스트"""

    @pytest.mark.asyncio
    async def test_rejects_escaping_keys(self, tmp_path):
        store = FileSystemStore(tmp_path / "root")
        await store.initialize()
        with pytest.raises(ValueError):
            await store.put("../outside.txt", b"x")


class TestSQLiteStore:
    """SQLite 백엔드 전용 테스트"""

    @pytest.mark.asyncio
    async def test_in_memory(self):
        store = SQLiteStore(":memory:")
        await store.initialize()
        try:
            await store.put("k", b"v")
            assert await store.get("k") == b"v"
        finally:
            await store.close()

    @pytest.mark.asyncio
    async def test_requires_initialize(self):
        store = SQLiteStore(":memory:")
        with pytest.raises(RuntimeError):
            await store.get("k")
