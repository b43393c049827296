"""In-process key-value store with the same contract as the HPKV client."""

import bisect
from typing import Dict, List, Optional

from common.constants import MEMORY_STORE_PAGE_SIZE, STORE_MAX_VALUE_SIZE
from common.logging_config import get_logger
from kvfs.exceptions import StoreError
from kvfs.kv_store import KVStore, ListItem, ListPage

logger = get_logger(__name__)


class MemoryKVStore(KVStore):
    """
    Sorted in-memory store.

    Listing is paginated by ``page_size`` and resumes after the marker key,
    so callers exercise the same marker loop they need against HPKV.
    """

    def __init__(
        self,
        page_size: int = MEMORY_STORE_PAGE_SIZE,
        max_value_size: int = STORE_MAX_VALUE_SIZE,
    ):
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.page_size = page_size
        self.max_value_size = max_value_size
        self._data: Dict[str, str] = {}
        self._keys: List[str] = []

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def keys(self) -> List[str]:
        return list(self._keys)

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def put(self, key: str, value: str) -> None:
        if len(value) > self.max_value_size:
            raise StoreError(
                f"Value for {key} is {len(value)} characters, "
                f"store limit is {self.max_value_size}",
                status_code=413,
            )
        if key not in self._data:
            bisect.insort(self._keys, key)
        self._data[key] = value

    async def delete(self, key: str) -> bool:
        if key not in self._data:
            return False
        del self._data[key]
        self._keys.remove(key)
        return True

    async def list(
        self,
        prefix: str,
        delimiter: Optional[str] = None,
        marker: Optional[str] = None,
    ) -> ListPage:
        start = bisect.bisect_left(self._keys, prefix)
        if marker is not None:
            start = max(start, bisect.bisect_right(self._keys, marker))

        items: List[ListItem] = []
        last_key = None
        seen_groups = set()
        index = start
        while index < len(self._keys) and len(items) < self.page_size:
            key = self._keys[index]
            if not key.startswith(prefix):
                break
            last_key = key
            index += 1

            if delimiter:
                rest = key[len(prefix):]
                cut = rest.find(delimiter)
                if cut >= 0:
                    group = prefix + rest[: cut + len(delimiter)]
                    if group not in seen_groups:
                        seen_groups.add(group)
                        items.append(ListItem(key=group))
                    continue
            items.append(ListItem(key=key))

        has_more = index < len(self._keys) and self._keys[index].startswith(prefix)
        return ListPage(items=items, next_marker=last_key if has_more else None)
