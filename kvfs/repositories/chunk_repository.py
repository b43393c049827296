"""Chunk repository: fixed-size byte segments stored one per key."""

from typing import List, Optional

from common.constants import CHUNK_VALUE_ENCODING, MAX_CHUNK_SIZE
from common.logging_config import get_logger
from kvfs import key_codec
from kvfs.exceptions import InvalidArgumentError
from kvfs.kv_store import KVStore, iter_keys

logger = get_logger(__name__)


def encode_chunk(data: bytes) -> str:
    return data.decode(CHUNK_VALUE_ENCODING)


def decode_chunk(value: str) -> bytes:
    return value.encode(CHUNK_VALUE_ENCODING)


class ChunkRepository:
    """
    Reads and writes the chunks of a file.

    A chunk that is not in the store is sparse: callers treat it as empty
    and reads fill it with zeros.
    """

    def __init__(self, store: KVStore):
        self.store = store

    async def get(self, path: str, index: int) -> Optional[bytes]:
        """
        Fetch one chunk.

        Args:
            path: File path
            index: Chunk index

        Returns:
            Chunk bytes, or None if the chunk was never written

        Raises:
            StoreError: If the store call fails
        """
        value = await self.store.get(key_codec.chunk_key(path, index))
        if value is None:
            return None
        return decode_chunk(value)

    async def put(self, path: str, index: int, data: bytes) -> None:
        """
        Store one chunk.

        Raises:
            InvalidArgumentError: If data is longer than MAX_CHUNK_SIZE
            StoreError: If the store call fails
        """
        if len(data) > MAX_CHUNK_SIZE:
            raise InvalidArgumentError(
                f"Chunk {index} of {path} is {len(data)} bytes, limit is {MAX_CHUNK_SIZE}"
            )
        await self.store.put(key_codec.chunk_key(path, index), encode_chunk(data))

    async def delete(self, path: str, index: int) -> None:
        deleted = await self.store.delete(key_codec.chunk_key(path, index))
        if not deleted:
            logger.debug(f"Chunk {index} of {path} was already absent")

    async def list_chunk_keys(self, path: str) -> List[str]:
        """
        Find every stored chunk key of a file.

        The prefix scan is filtered down to keys of the exact form
        ``<path>.chunk<index>``.

        Raises:
            StoreError: If a listing call fails
        """
        prefix = key_codec.chunk_key_prefix(path)
        return [
            key
            async for key in iter_keys(self.store, prefix)
            if key_codec.chunk_index_from_key(path, key) is not None
        ]
