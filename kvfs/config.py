"""Configuration settings for the KVFS server."""

import os

from common.constants import (
    DEFAULT_GID,
    DEFAULT_UID,
    STORE_CONCURRENCY,
    HPKV_MAX_RETRIES,
    HPKV_RETRY_BACKOFF_MULTIPLIER,
    HPKV_TIMEOUT_SECONDS,
    MEMORY_STORE_PAGE_SIZE,
)


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


KVFS_HOST = os.environ.get("KVFS_HOST", "0.0.0.0")

KVFS_PORT = int(os.environ.get("KVFS_PORT", "8000"))

# "hpkv" talks to a remote HPKV endpoint, "memory" keeps everything in-process.
STORE_BACKEND = os.environ.get("KVFS_STORE_BACKEND", "hpkv")

HPKV_API_URL = os.environ.get("KVFS_HPKV_API_URL")
HPKV_API_KEY = os.environ.get("KVFS_HPKV_API_KEY")
HPKV_TIMEOUT = float(os.environ.get("KVFS_HPKV_TIMEOUT", str(HPKV_TIMEOUT_SECONDS)))
HPKV_MAX_RETRIES = int(os.environ.get("KVFS_HPKV_MAX_RETRIES", str(HPKV_MAX_RETRIES)))
HPKV_RETRY_BACKOFF = float(os.environ.get("KVFS_HPKV_RETRY_BACKOFF", str(HPKV_RETRY_BACKOFF_MULTIPLIER)))

DEFAULT_OWNER_UID = int(os.environ.get("KVFS_DEFAULT_UID", str(DEFAULT_UID)))
DEFAULT_OWNER_GID = int(os.environ.get("KVFS_DEFAULT_GID", str(DEFAULT_GID)))

STORE_MAX_CONCURRENCY = int(os.environ.get("KVFS_STORE_CONCURRENCY", str(STORE_CONCURRENCY)))

LIST_RESOLVE_TYPES = _env_bool("KVFS_LIST_RESOLVE_TYPES", True)

MEMORY_PAGE_SIZE = int(os.environ.get("KVFS_MEMORY_PAGE_SIZE", str(MEMORY_STORE_PAGE_SIZE)))
