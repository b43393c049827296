"""Filesystem service: the operations exposed to the HTTP layer."""

import time
from typing import Callable, List, Optional

from common.constants import STORE_CONCURRENCY
from common.logging_config import get_logger
from common.types import DirEntry, Identity, Metadata
from kvfs import key_codec
from kvfs.exceptions import NotFoundError
from kvfs.kv_store import KVStore
from kvfs.repositories.chunk_repository import ChunkRepository
from kvfs.repositories.metadata_repository import MetadataRepository, new_directory_metadata
from kvfs.services.directory_service import DirectoryService
from kvfs.services.path_deleter import PathDeleter
from kvfs.services.range_reader import RangeReader
from kvfs.services.range_writer import RangeWriter

logger = get_logger(__name__)


class FileSystemService:
    """
    Entry point wiring the repositories and range/directory services.

    Every public method validates its path before touching the store.
    """

    def __init__(
        self,
        store: KVStore,
        identity: Optional[Identity] = None,
        clock: Callable[[], float] = time.time,
        resolve_types: bool = True,
        max_concurrency: int = STORE_CONCURRENCY,
    ):
        self.store = store
        self.identity = identity or Identity()
        self.clock = clock

        self.metadata_repo = MetadataRepository(store, self.identity)
        self.chunk_repo = ChunkRepository(store)

        self.writer = RangeWriter(self.metadata_repo, self.chunk_repo, self.identity, clock)
        self.reader = RangeReader(self.metadata_repo, self.chunk_repo)
        self.directories = DirectoryService(
            store,
            self.metadata_repo,
            self.identity,
            clock,
            resolve_types=resolve_types,
            max_concurrency=max_concurrency,
        )
        self.deleter = PathDeleter(store, self.metadata_repo, self.chunk_repo, max_concurrency)

    async def get_metadata(self, path: str) -> Metadata:
        """
        Get the metadata record of a path.

        The root always exists; a default directory record is returned when
        none has been stored for it.

        Raises:
            InvalidArgumentError: If path is malformed
            NotFoundError: If path has no metadata
        """
        key_codec.validate_path(path)
        metadata = await self.metadata_repo.get(path)
        if metadata is not None:
            return metadata
        if key_codec.is_root(path):
            return new_directory_metadata(self.identity, int(self.clock()))
        raise NotFoundError(f"Metadata not found for {path}")

    async def list_directory(self, path: str) -> List[DirEntry]:
        key_codec.validate_path(path)
        return await self.directories.list(path)

    async def make_directory(self, path: str) -> bool:
        key_codec.validate_path(path)
        return await self.directories.make_directory(path)

    async def read(self, path: str, offset: int, size: int) -> bytes:
        key_codec.validate_path(path)
        return await self.reader.read(path, offset, size)

    async def write(self, path: str, offset: int, data: bytes) -> int:
        key_codec.validate_path(path)
        return await self.writer.write(path, offset, data)

    async def delete(self, path: str) -> None:
        key_codec.validate_path(path)
        await self.deleter.delete(path)
