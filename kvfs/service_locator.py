"""Service locator for process-wide components."""

from typing import Optional

from kvfs import config
from kvfs.memory_store import MemoryKVStore

_memory_store: Optional[MemoryKVStore] = None


def set_memory_store(store: Optional[MemoryKVStore]):
    """Set global in-memory store instance"""
    global _memory_store
    _memory_store = store


def get_memory_store() -> MemoryKVStore:
    """Get global in-memory store instance, creating it on first use"""
    global _memory_store
    if _memory_store is None:
        _memory_store = MemoryKVStore(page_size=config.MEMORY_PAGE_SIZE)
    return _memory_store
