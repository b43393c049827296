"""Metadata repository: one JSON record per file or directory path."""

import json
from typing import Any, Dict, Optional

from common.constants import DEFAULT_DIR_MODE, DEFAULT_FILE_MODE
from common.logging_config import get_logger
from common.types import Identity, Metadata, chunk_count
from kvfs import key_codec
from kvfs.exceptions import CorruptMetadataError
from kvfs.kv_store import KVStore

logger = get_logger(__name__)

OPTIONAL_TIME_FIELDS = ("atime", "mtime", "ctime")


def new_file_metadata(identity: Identity, now: int) -> Metadata:
    return Metadata(
        mode=DEFAULT_FILE_MODE,
        uid=identity.uid,
        gid=identity.gid,
        size=0,
        atime=now,
        mtime=now,
        ctime=now,
        num_chunks=0,
    )


def new_directory_metadata(identity: Identity, now: int) -> Metadata:
    return Metadata(
        mode=DEFAULT_DIR_MODE,
        uid=identity.uid,
        gid=identity.gid,
        size=0,
        atime=now,
        mtime=now,
        ctime=now,
        num_chunks=0,
    )


def _int_field(record: Dict[str, Any], name: str, default: Optional[int] = None) -> int:
    value = record.get(name)
    if value is None:
        if default is None:
            raise CorruptMetadataError(f"Metadata is missing required field {name!r}")
        return default
    if isinstance(value, bool):
        raise CorruptMetadataError(f"Metadata field {name!r} must be an integer, got {value!r}")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if not isinstance(value, int):
        raise CorruptMetadataError(f"Metadata field {name!r} must be an integer, got {value!r}")
    return value


class MetadataRepository:
    """
    Reads and writes metadata records through the key-value store.

    Records are stored as JSON objects with the fields
    ``mode, uid, gid, size, atime, mtime, ctime, num_chunks``.
    """

    def __init__(self, store: KVStore, identity: Optional[Identity] = None):
        self.store = store
        self.identity = identity or Identity()

    def parse(self, path: str, raw: str) -> Metadata:
        """
        Deserialize a stored metadata value.

        ``num_chunks`` is always recomputed from ``size``; older records may
        not carry it and a stale value is never trusted.

        Args:
            path: Path the record belongs to (for error messages)
            raw: Stored JSON text

        Returns:
            Normalized Metadata

        Raises:
            CorruptMetadataError: If the value is not a well-formed record
        """
        try:
            record = json.loads(raw)
        except ValueError as e:
            raise CorruptMetadataError(f"Failed to parse metadata JSON for {path}: {e}") from e

        if not isinstance(record, dict):
            raise CorruptMetadataError(f"Metadata for {path} is not a JSON object")

        size = _int_field(record, "size")
        if size < 0:
            raise CorruptMetadataError(f"Metadata for {path} has negative size {size}")

        metadata = Metadata(
            mode=_int_field(record, "mode"),
            uid=_int_field(record, "uid", self.identity.uid),
            gid=_int_field(record, "gid", self.identity.gid),
            size=size,
            atime=_int_field(record, "atime", 0),
            mtime=_int_field(record, "mtime", 0),
            ctime=_int_field(record, "ctime", 0),
            num_chunks=chunk_count(size),
        )

        stored_chunks = record.get("num_chunks")
        if stored_chunks is not None and stored_chunks != metadata.num_chunks:
            logger.warning(
                f"Metadata for {path} has num_chunks={stored_chunks} but size={size} "
                f"implies {metadata.num_chunks}; using {metadata.num_chunks}"
            )

        return metadata

    @staticmethod
    def serialize(metadata: Metadata) -> str:
        metadata.num_chunks = chunk_count(metadata.size)
        return json.dumps(metadata.to_dict(), separators=(",", ":"))

    async def get(self, path: str) -> Optional[Metadata]:
        """
        Fetch the metadata record for a path.

        Args:
            path: Validated filesystem path

        Returns:
            Metadata, or None if the path has no record

        Raises:
            CorruptMetadataError: If the stored value is malformed
            StoreError: If the store call fails
        """
        raw = await self.store.get(key_codec.metadata_key(path))
        if raw is None:
            return None
        return self.parse(path, raw)

    async def put(self, path: str, metadata: Metadata) -> None:
        """
        Store a metadata record, overwriting any existing one.

        Raises:
            StoreError: If the store call fails
        """
        await self.store.put(key_codec.metadata_key(path), self.serialize(metadata))
        logger.debug(f"Stored metadata for {path} [size={metadata.size}, num_chunks={metadata.num_chunks}]")

    async def exists(self, path: str) -> bool:
        return await self.store.get(key_codec.metadata_key(path)) is not None
