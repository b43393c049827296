"""Range reader: stitches the chunks covering a byte range."""

from typing import AsyncIterator, Tuple

from common.constants import MAX_CHUNK_SIZE
from common.logging_config import get_logger
from common.types import Metadata
from kvfs import key_codec
from kvfs.exceptions import InvalidArgumentError, IsDirectoryError, NotFoundError, StoreError
from kvfs.repositories.chunk_repository import ChunkRepository
from kvfs.repositories.metadata_repository import MetadataRepository

logger = get_logger(__name__)


class RangeReader:
    def __init__(self, metadata_repo: MetadataRepository, chunk_repo: ChunkRepository):
        self.metadata_repo = metadata_repo
        self.chunk_repo = chunk_repo

    async def open(self, path: str, offset: int, size: int) -> Tuple[Metadata, int, AsyncIterator[bytes]]:
        """
        Resolve a read request and return a lazy stream of its bytes.

        Metadata checks happen here, before any chunk is fetched, so callers
        can report errors before they start streaming.

        Args:
            path: Validated file path
            offset: First byte to read
            size: Requested number of bytes

        Returns:
            Tuple of (metadata, clipped read size, async iterator of byte slices)

        Raises:
            InvalidArgumentError: If offset or size is negative
            NotFoundError: If path has no metadata
            IsDirectoryError: If path is a directory
        """
        if offset < 0 or size < 0:
            raise InvalidArgumentError(f"Invalid offset or size: offset={offset}, size={size}")
        if key_codec.is_root(path):
            raise IsDirectoryError(f"Path is a directory: {path}")

        metadata = await self.metadata_repo.get(path)
        if metadata is None:
            raise NotFoundError(f"Metadata not found for {path}")
        if metadata.is_dir:
            raise IsDirectoryError(f"Path is a directory: {path}")

        if size == 0 or offset >= metadata.size:
            read_size = 0
        else:
            read_size = min(size, metadata.size - offset)

        return metadata, read_size, self._iter_range(path, offset, read_size)

    async def _iter_range(self, path: str, offset: int, read_size: int) -> AsyncIterator[bytes]:
        if read_size <= 0:
            return

        read_end = offset + read_size
        start_chunk = offset // MAX_CHUNK_SIZE
        end_chunk = (read_end - 1) // MAX_CHUNK_SIZE

        produced = 0
        for index in range(start_chunk, end_chunk + 1):
            chunk_start = index * MAX_CHUNK_SIZE

            try:
                chunk = await self.chunk_repo.get(path, index) or b""
            except StoreError as e:
                raise StoreError(
                    f"Failed to get chunk {index} of {path}: {e}", status_code=e.status_code
                ) from e

            read_start_in_chunk = max(offset, chunk_start) - chunk_start
            read_end_in_chunk = min(read_end, chunk_start + MAX_CHUNK_SIZE) - chunk_start
            wanted = read_end_in_chunk - read_start_in_chunk

            # Bytes past the physical end of a chunk are sparse zeros.
            piece = chunk[read_start_in_chunk:read_end_in_chunk].ljust(wanted, b"\0")
            piece = piece[: read_size - produced]

            produced += len(piece)
            yield piece

            if produced >= read_size:
                break

    async def read(self, path: str, offset: int, size: int) -> bytes:
        """
        Read up to ``size`` bytes of ``path`` starting at ``offset``.

        Reads past end of file are clipped; never-written ranges read as zeros.

        Returns:
            The requested bytes (empty when offset is at or past end of file)
        """
        _, read_size, pieces = await self.open(path, offset, size)
        data = b"".join([piece async for piece in pieces])
        return data[:read_size]
