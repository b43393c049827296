"""FastAPI dependencies resolving the store and filesystem service per request."""

from typing import AsyncIterator, Optional

from fastapi import Depends, Header

from common.constants import HPKV_API_KEY_HEADER, HPKV_API_URL_HEADER
from common.logging_config import get_logger
from common.types import Identity
from kvfs import config
from kvfs.exceptions import KVFSException, UnauthorizedError
from kvfs.hpkv_client import HPKVClient
from kvfs.kv_store import KVStore
from kvfs.service_locator import get_memory_store
from kvfs.services.filesystem_service import FileSystemService

logger = get_logger(__name__)


async def get_kv_store(
    hpkv_api_key: Optional[str] = Header(None, alias=HPKV_API_KEY_HEADER),
    hpkv_api_url: Optional[str] = Header(None, alias=HPKV_API_URL_HEADER),
) -> AsyncIterator[KVStore]:
    """
    Resolve the key-value store for this request.

    With the hpkv backend, credentials come from the request headers and
    fall back to the configured ones.

    Raises:
        UnauthorizedError: If the hpkv backend has no API key or URL
    """
    if config.STORE_BACKEND == "memory":
        yield get_memory_store()
        return

    if config.STORE_BACKEND != "hpkv":
        raise KVFSException(f"Unsupported store backend: {config.STORE_BACKEND}")

    api_key = hpkv_api_key or config.HPKV_API_KEY
    api_url = hpkv_api_url or config.HPKV_API_URL
    if not api_key or not api_url:
        raise UnauthorizedError("API key and API URL headers are required")

    client = HPKVClient(
        api_url=api_url,
        api_key=api_key,
        timeout=config.HPKV_TIMEOUT,
        max_retries=config.HPKV_MAX_RETRIES,
        retry_backoff=config.HPKV_RETRY_BACKOFF,
    )
    try:
        yield client
    finally:
        await client.close()


def get_identity() -> Identity:
    return Identity(uid=config.DEFAULT_OWNER_UID, gid=config.DEFAULT_OWNER_GID)


def get_filesystem(
    store: KVStore = Depends(get_kv_store),
    identity: Identity = Depends(get_identity),
) -> FileSystemService:
    return FileSystemService(
        store,
        identity=identity,
        resolve_types=config.LIST_RESOLVE_TYPES,
        max_concurrency=config.STORE_MAX_CONCURRENCY,
    )
