"""Path deleter: cascading file removal and empty-directory removal."""

import asyncio
from typing import List

from common.constants import STORE_CONCURRENCY
from common.logging_config import get_logger
from kvfs import key_codec
from kvfs.exceptions import DirectoryNotEmptyError, InvalidArgumentError, StoreError
from kvfs.kv_store import KVStore, iter_keys
from kvfs.repositories.chunk_repository import ChunkRepository
from kvfs.repositories.metadata_repository import MetadataRepository

logger = get_logger(__name__)


class PathDeleter:
    def __init__(
        self,
        store: KVStore,
        metadata_repo: MetadataRepository,
        chunk_repo: ChunkRepository,
        max_concurrency: int = STORE_CONCURRENCY,
    ):
        self.store = store
        self.metadata_repo = metadata_repo
        self.chunk_repo = chunk_repo
        self.max_concurrency = max_concurrency

    async def delete(self, path: str) -> None:
        """
        Delete a file with all of its chunks, or an empty directory.

        Missing metadata is tolerated: any chunk keys left under the path
        are still removed. Deletion is not atomic; keys already removed stay
        removed when another deletion fails.

        Args:
            path: Validated path

        Raises:
            InvalidArgumentError: If path is the root
            DirectoryNotEmptyError: If path is a directory with keys below it
            CorruptMetadataError: If the metadata record is malformed
            StoreError: If a listing or deletion fails (first failure observed)
        """
        if key_codec.is_root(path):
            raise InvalidArgumentError("Path parameter is required and cannot be root (/)")

        metadata = await self.metadata_repo.get(path)
        if metadata is None:
            logger.warning(f"Metadata not found for {path} during delete. Attempting chunk cleanup.")

        if metadata is not None and metadata.is_dir:
            async for child_key in iter_keys(self.store, key_codec.directory_prefix(path)):
                raise DirectoryNotEmptyError(f"Directory not empty: {path} (contains {child_key})")
            await self._delete_keys(path, [key_codec.metadata_key(path)])
            logger.info(f"Deleted directory {path}")
            return

        keys = [key_codec.metadata_key(path)]
        keys.extend(await self.chunk_repo.list_chunk_keys(path))
        await self._delete_keys(path, keys)
        logger.info(f"Deleted {path} ({len(keys) - 1} chunk keys)")

    async def _delete_keys(self, path: str, keys: List[str]) -> None:
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def delete_one(key: str) -> None:
            async with semaphore:
                await self.store.delete(key)

        tasks = [asyncio.ensure_future(delete_one(key)) for key in keys]

        first_error = None
        for finished in asyncio.as_completed(tasks):
            try:
                await finished
            except Exception as e:
                if first_error is None:
                    first_error = e
                else:
                    logger.warning(f"Additional delete failure for {path}: {e}")

        if first_error is None:
            return
        if isinstance(first_error, StoreError):
            raise StoreError(
                f"Failed to delete one or more keys for {path}: {first_error}",
                status_code=first_error.status_code,
            ) from first_error
        raise first_error
