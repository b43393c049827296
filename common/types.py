"""Shared data type definitions (Metadata, DirEntry, Identity)."""

import math
import stat
from dataclasses import asdict, dataclass
from typing import Any, Dict

from common.constants import DEFAULT_GID, DEFAULT_UID, MAX_CHUNK_SIZE


def chunk_count(size: int) -> int:
    """
    Number of chunks needed to hold ``size`` bytes.

    Args:
        size: Logical file size in bytes

    Returns:
        ceil(size / MAX_CHUNK_SIZE), 0 for empty files
    """
    if size <= 0:
        return 0
    return math.ceil(size / MAX_CHUNK_SIZE)


@dataclass(frozen=True)
class Identity:
    """
    Owner ids stamped on newly created metadata records.
    """
    uid: int = DEFAULT_UID
    gid: int = DEFAULT_GID


@dataclass
class Metadata:
    """
    Side-band record describing a file or directory.

    Field order matches the stored JSON layout.
    """
    mode: int
    uid: int
    gid: int
    size: int
    atime: int
    mtime: int
    ctime: int
    num_chunks: int = 0

    @property
    def is_dir(self) -> bool:
        return stat.S_ISDIR(self.mode)

    @property
    def is_file(self) -> bool:
        return stat.S_ISREG(self.mode)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DirEntry:
    """
    A direct child of a listed directory.
    """
    name: str
    is_dir: bool
