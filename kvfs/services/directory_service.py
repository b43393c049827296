"""Directory service: prefix-scan listing and directory creation."""

import asyncio
import time
from typing import Callable, Dict, List, Optional

from common.constants import STORE_CONCURRENCY, PATH_SEPARATOR
from common.logging_config import get_logger
from common.types import DirEntry, Identity
from kvfs import key_codec
from kvfs.exceptions import ConflictError, InvalidArgumentError, NotDirectoryError
from kvfs.kv_store import KVStore, iter_keys
from kvfs.repositories.metadata_repository import MetadataRepository, new_directory_metadata

logger = get_logger(__name__)


class DirectoryService:
    """
    Infers directory membership from key prefixes.

    The store has no directories: a name is a child of ``D`` if some key
    starts with ``D + "/" + name``. Direct children are discovered from their
    metadata keys, deeper keys imply a sub-directory.
    """

    def __init__(
        self,
        store: KVStore,
        metadata_repo: MetadataRepository,
        identity: Optional[Identity] = None,
        clock: Callable[[], float] = time.time,
        resolve_types: bool = True,
        max_concurrency: int = STORE_CONCURRENCY,
    ):
        self.store = store
        self.metadata_repo = metadata_repo
        self.identity = identity or Identity()
        self.clock = clock
        self.resolve_types = resolve_types
        self.max_concurrency = max_concurrency

    async def list(self, path: str) -> List[DirEntry]:
        """
        List the direct children of a directory.

        Args:
            path: Validated directory path

        Returns:
            One entry per child name, in key order

        Raises:
            NotDirectoryError: If path is a regular file
            CorruptMetadataError: If a needed metadata record is malformed
            StoreError: If a store call fails
        """
        metadata = await self.metadata_repo.get(path)
        if metadata is not None and not metadata.is_dir:
            raise NotDirectoryError(f"Path is not a directory: {path}")

        prefix = key_codec.directory_prefix(path)
        entries: Dict[str, bool] = {}

        async for key in iter_keys(self.store, prefix):
            rest = key[len(prefix):]
            if PATH_SEPARATOR in rest:
                name = rest.split(PATH_SEPARATOR, 1)[0]
                if name:
                    entries[name] = True
                continue

            # Chunk keys and the root's own ".__meta__" yield no name here.
            name = key_codec.path_from_metadata_key(rest)
            if name:
                entries.setdefault(name, False)

        if self.resolve_types:
            await self._resolve_types(prefix, entries)

        logger.debug(f"Listed {path}: {len(entries)} entries")
        return [DirEntry(name=name, is_dir=is_dir) for name, is_dir in entries.items()]

    async def _resolve_types(self, prefix: str, entries: Dict[str, bool]) -> None:
        unresolved = [name for name, is_dir in entries.items() if not is_dir]
        if not unresolved:
            return

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def fetch(name: str):
            async with semaphore:
                return await self.metadata_repo.get(f"{prefix}{name}")

        results = await asyncio.gather(*(fetch(name) for name in unresolved))
        for name, metadata in zip(unresolved, results):
            if metadata is None:
                logger.debug(f"Metadata for {prefix}{name} disappeared during listing")
                continue
            entries[name] = metadata.is_dir

    async def make_directory(self, path: str) -> bool:
        """
        Create a directory record.

        Args:
            path: Validated directory path

        Returns:
            True if the directory was created, False if it already existed

        Raises:
            InvalidArgumentError: If path is the root
            ConflictError: If path exists and is not a directory
            StoreError: If a store call fails
        """
        if key_codec.is_root(path):
            raise InvalidArgumentError("Path parameter is required and cannot be root (/)")

        metadata = await self.metadata_repo.get(path)
        if metadata is not None:
            if metadata.is_dir:
                logger.debug(f"Directory {path} already exists")
                return False
            raise ConflictError(f"Path exists but is not a directory: {path}")

        await self.metadata_repo.put(path, new_directory_metadata(self.identity, int(self.clock())))
        logger.info(f"Created directory {path}")
        return True
