"""Repository layer for data access."""

from kvfs.repositories.metadata_repository import MetadataRepository
from kvfs.repositories.chunk_repository import ChunkRepository

__all__ = [
    "MetadataRepository",
    "ChunkRepository",
]
