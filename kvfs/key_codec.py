"""Derives store keys from filesystem paths."""

import re
from typing import Optional

from common.constants import (
    CHUNK_SUFFIX,
    METADATA_SUFFIX,
    PATH_SEPARATOR,
    ROOT_METADATA_KEY,
    ROOT_PATH,
)
from kvfs.exceptions import InvalidArgumentError

RESERVED_SUFFIXES = (METADATA_SUFFIX, CHUNK_SUFFIX)


def is_root(path: str) -> bool:
    return path == ROOT_PATH


def validate_path(path: Optional[str]) -> str:
    """
    Check that a user-supplied path can be mapped onto store keys.

    Paths are absolute, have no trailing separator (except the root), no
    empty, '.' or '..' segments, and no segment containing a reserved key
    suffix. The last rule keeps one file's chunk prefix scan from matching
    another file's keys.

    Args:
        path: Path as received from the caller

    Returns:
        The same path, unchanged

    Raises:
        InvalidArgumentError: If the path violates any rule above
    """
    if not path:
        raise InvalidArgumentError("Path parameter is required")
    if not path.startswith(PATH_SEPARATOR):
        raise InvalidArgumentError(f"Path must be absolute: {path!r}")
    if is_root(path):
        return path
    if path.endswith(PATH_SEPARATOR):
        raise InvalidArgumentError(f"Path must not end with a slash: {path!r}")

    for segment in path[1:].split(PATH_SEPARATOR):
        if segment in ("", ".", ".."):
            raise InvalidArgumentError(f"Invalid path segment {segment!r} in {path!r}")
        for suffix in RESERVED_SUFFIXES:
            if suffix in segment:
                raise InvalidArgumentError(
                    f"Path segment {segment!r} contains reserved sequence {suffix!r}"
                )
    return path


def metadata_key(path: str) -> str:
    if is_root(path):
        return ROOT_METADATA_KEY
    return f"{path}{METADATA_SUFFIX}"


def chunk_key_prefix(path: str) -> str:
    return f"{path}{CHUNK_SUFFIX}"


def chunk_key(path: str, index: int) -> str:
    """
    Key of chunk ``index`` of ``path`` (decimal, 0-based, no padding).

    Raises:
        InvalidArgumentError: If index is negative
    """
    if index < 0:
        raise InvalidArgumentError(f"Chunk index must be non-negative, got {index}")
    return f"{chunk_key_prefix(path)}{index}"


def chunk_index_from_key(path: str, key: str) -> Optional[int]:
    """
    Parse the chunk index back out of a key belonging to ``path``.

    Returns:
        The index, or None if ``key`` is not one of this path's chunk keys
    """
    prefix = chunk_key_prefix(path)
    if not key.startswith(prefix):
        return None
    digits = key[len(prefix):]
    if not re.fullmatch(r"0|[1-9][0-9]*", digits):
        return None
    return int(digits)


def directory_prefix(path: str) -> str:
    """Prefix shared by every key stored below directory ``path``."""
    if path.endswith(PATH_SEPARATOR):
        return path
    return f"{path}{PATH_SEPARATOR}"


def path_from_metadata_key(key: str) -> Optional[str]:
    if not key.endswith(METADATA_SUFFIX):
        return None
    return key[: -len(METADATA_SUFFIX)]
