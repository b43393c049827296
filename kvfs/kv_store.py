"""Key-value store interface consumed by the filesystem layer."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import AsyncIterator, List, Optional

from common.constants import STORE_MAX_VALUE_SIZE
from common.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ListItem:
    key: str
    version: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class ListPage:
    """
    One page of a prefix listing.

    ``next_marker`` is None on the last page.
    """
    items: List[ListItem] = field(default_factory=list)
    next_marker: Optional[str] = None


class KVStore(ABC):
    """
    Flat string-valued store with prefix listing.

    Values longer than ``max_value_size`` are rejected by the store.
    """

    max_value_size: int = STORE_MAX_VALUE_SIZE

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Fetch a value.

        Returns:
            The stored value, or None if the key does not exist

        Raises:
            StoreError: If the store call fails
        """

    @abstractmethod
    async def put(self, key: str, value: str) -> None:
        """
        Upsert a value.

        Raises:
            StoreError: If the value is too large or the store call fails
        """

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Delete a key.

        Returns:
            True if the key existed, False if it was already gone

        Raises:
            StoreError: If the store call fails
        """

    @abstractmethod
    async def list(
        self,
        prefix: str,
        delimiter: Optional[str] = None,
        marker: Optional[str] = None,
    ) -> ListPage:
        """
        List one page of keys starting with ``prefix``.

        Args:
            prefix: Key prefix to match
            delimiter: Optional delimiter for grouping keys
            marker: Continuation marker from the previous page

        Raises:
            StoreError: If the store call fails
        """

    async def close(self) -> None:
        """Release any underlying connections."""
        return None


async def iter_keys(store: KVStore, prefix: str) -> AsyncIterator[str]:
    """
    Yield every key under ``prefix``, following pagination markers.

    Args:
        store: Store to scan
        prefix: Key prefix to match

    Yields:
        Matching keys in store order
    """
    marker = None
    pages = 0
    while True:
        page = await store.list(prefix, marker=marker)
        pages += 1
        for item in page.items:
            yield item.key
        if not page.next_marker:
            break
        marker = page.next_marker
    logger.debug(f"Scanned prefix {prefix!r} in {pages} page(s)")


async def list_all_keys(store: KVStore, prefix: str) -> List[str]:
    return [key async for key in iter_keys(store, prefix)]
