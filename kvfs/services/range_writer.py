"""Range writer: read-modify-write of the chunks covering a byte range."""

import time
from typing import Callable, Optional

from common.constants import MAX_CHUNK_SIZE
from common.logging_config import get_logger
from common.types import Identity, Metadata, chunk_count
from kvfs import key_codec
from kvfs.exceptions import (
    InvalidArgumentError,
    IsDirectoryError,
    MetadataUpdateError,
    StoreError,
)
from kvfs.repositories.chunk_repository import ChunkRepository
from kvfs.repositories.metadata_repository import MetadataRepository, new_file_metadata

logger = get_logger(__name__)


def splice_chunk(existing: bytes, start: int, payload: bytes) -> bytes:
    """
    Overlay ``payload`` onto ``existing`` at ``start``.

    Bytes of ``existing`` outside the window are kept; a gap between the
    end of ``existing`` and ``start`` is zero-filled.

    Args:
        existing: Current chunk content (empty for a sparse chunk)
        start: Offset of the write window inside the chunk
        payload: Bytes to place at ``start``

    Returns:
        New chunk content of length max(len(existing), start + len(payload))
    """
    end = start + len(payload)
    return existing[:start].ljust(start, b"\0") + payload + existing[end:]


class RangeWriter:
    def __init__(
        self,
        metadata_repo: MetadataRepository,
        chunk_repo: ChunkRepository,
        identity: Optional[Identity] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.metadata_repo = metadata_repo
        self.chunk_repo = chunk_repo
        self.identity = identity or Identity()
        self.clock = clock

    async def write(self, path: str, offset: int, data: bytes) -> int:
        """
        Write ``data`` at byte ``offset`` of ``path``, creating the file if needed.

        Chunks are updated in ascending index order before the metadata
        record. Any chunk failure aborts the write; a metadata failure after
        the chunks landed raises MetadataUpdateError. Nothing is rolled back.

        Args:
            path: Validated file path
            offset: Byte offset to write at
            data: Bytes to write (may be empty)

        Returns:
            Number of bytes written

        Raises:
            InvalidArgumentError: If offset is negative
            IsDirectoryError: If path is a directory
            CorruptMetadataError: If the existing metadata is malformed
            StoreError: If a chunk read or write fails
            MetadataUpdateError: If the final metadata write fails
        """
        if offset < 0:
            raise InvalidArgumentError(f"Invalid offset {offset}")
        if key_codec.is_root(path):
            raise IsDirectoryError(f"Path is a directory: {path}")

        now = int(self.clock())
        metadata = await self.metadata_repo.get(path)
        created = metadata is None
        if created:
            metadata = new_file_metadata(self.identity, now)
            logger.info(f"Creating file {path}")
        elif metadata.is_dir:
            raise IsDirectoryError(f"Path is a directory: {path}")

        if not data:
            if created:
                await self.metadata_repo.put(path, metadata)
            return 0

        write_end = offset + len(data)
        start_chunk = offset // MAX_CHUNK_SIZE
        end_chunk = (write_end - 1) // MAX_CHUNK_SIZE

        consumed = 0
        for index in range(start_chunk, end_chunk + 1):
            chunk_start = index * MAX_CHUNK_SIZE
            write_start_in_chunk = max(0, offset - chunk_start)
            write_end_in_chunk = min(MAX_CHUNK_SIZE, write_end - chunk_start)
            count = write_end_in_chunk - write_start_in_chunk

            try:
                existing = await self.chunk_repo.get(path, index) or b""
            except StoreError as e:
                raise StoreError(
                    f"Failed to get chunk {index} of {path}: {e}", status_code=e.status_code
                ) from e

            new_chunk = splice_chunk(existing, write_start_in_chunk, data[consumed:consumed + count])

            try:
                await self.chunk_repo.put(path, index, new_chunk)
            except StoreError as e:
                raise StoreError(
                    f"Failed to write chunk {index} of {path}: {e}", status_code=e.status_code
                ) from e

            consumed += count

        metadata.size = max(metadata.size, write_end)
        metadata.mtime = now
        metadata.atime = now
        if created:
            metadata.ctime = now
        metadata.num_chunks = chunk_count(metadata.size)

        await self._store_metadata(path, metadata)

        logger.debug(
            f"Wrote {len(data)} bytes to {path} at offset {offset} "
            f"[chunks {start_chunk}-{end_chunk}, size={metadata.size}]"
        )
        return len(data)

    async def _store_metadata(self, path: str, metadata: Metadata) -> None:
        try:
            await self.metadata_repo.put(path, metadata)
        except StoreError as e:
            logger.error(f"Chunks written but metadata update failed for {path}: {e}")
            raise MetadataUpdateError(
                f"Write succeeded but failed to update metadata: {e}", status_code=e.status_code
            ) from e
