"""Shared pytest fixtures for all tests."""

import pytest

from common.types import Identity
from kvfs.exceptions import StoreError
from kvfs.memory_store import MemoryKVStore
from kvfs.repositories.chunk_repository import ChunkRepository
from kvfs.repositories.metadata_repository import MetadataRepository
from kvfs.services.filesystem_service import FileSystemService

FIXED_TIME = 1700000000


class FlakyStore(MemoryKVStore):
    """
    Memory store that fails selected operations.

    Set ``fail_get``, ``fail_put``, ``fail_delete`` or ``fail_list`` to a
    predicate on the key (or prefix) to make matching calls raise StoreError.
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.fail_get = None
        self.fail_put = None
        self.fail_delete = None
        self.fail_list = None
        self.deleted = []

    async def get(self, key):
        if self.fail_get and self.fail_get(key):
            raise StoreError(f"get failed for {key}", status_code=500)
        return await super().get(key)

    async def put(self, key, value):
        if self.fail_put and self.fail_put(key):
            raise StoreError(f"put failed for {key}", status_code=500)
        await super().put(key, value)

    async def delete(self, key):
        if self.fail_delete and self.fail_delete(key):
            raise StoreError(f"delete failed for {key}", status_code=500)
        self.deleted.append(key)
        return await super().delete(key)

    async def list(self, prefix, delimiter=None, marker=None):
        if self.fail_list and self.fail_list(prefix):
            raise StoreError(f"list failed for {prefix}", status_code=500)
        return await super().list(prefix, delimiter=delimiter, marker=marker)


class TickingClock:
    """Clock returning a settable fixed time."""

    def __init__(self, now=FIXED_TIME):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def identity():
    return Identity(uid=1000, gid=1000)


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def store():
    """Empty in-memory store with a small page size to force pagination."""
    return MemoryKVStore(page_size=3)


@pytest.fixture
def flaky_store():
    return FlakyStore(page_size=3)


@pytest.fixture
def metadata_repo(store, identity):
    return MetadataRepository(store, identity)


@pytest.fixture
def chunk_repo(store):
    return ChunkRepository(store)


@pytest.fixture
def fs(store, identity, clock):
    """
    Filesystem service over the in-memory store.

    Args:
        store: In-memory store fixture
        identity: Owner identity fixture
        clock: Controllable clock fixture

    Returns:
        FileSystemService instance
    """
    return FileSystemService(store, identity=identity, clock=clock)


@pytest.fixture
def flaky_fs(flaky_store, identity, clock):
    return FileSystemService(flaky_store, identity=identity, clock=clock)
