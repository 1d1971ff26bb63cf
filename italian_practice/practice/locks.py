"""Item lock manager for serializing statistic writes"""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Hashable
from dataclasses import dataclass, field
from datetime import datetime

logger = logging.getLogger(__name__)


@dataclass
class LockInfo:
    """Information about an item lock"""

    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    operation: str | None = None
    locked_at: datetime | None = None
    waiters: int = 0


class ItemLockManager:
    """Keeps at most one mutating request per item in flight.

    Requests for the same key queue behind each other; distinct keys proceed
    independently. Entries are dropped once nobody holds or waits for them.
    """

    def __init__(self):
        self._locks: dict[Hashable, LockInfo] = {}

    def is_locked(self, key: Hashable) -> bool:
        """
        Check if an item currently has a mutation in flight

        Args:
            key: Item key (kind and id, or a conjugation key)

        Returns:
            True if a request holds the item lock
        """
        info = self._locks.get(key)
        return info is not None and info.lock.locked()

    def get_lock_info(self, key: Hashable) -> LockInfo | None:
        return self._locks.get(key)

    def get_active_locks_count(self) -> int:
        """Get number of items with a mutation in flight"""
        return sum(1 for info in self._locks.values() if info.lock.locked())

    @contextlib.asynccontextmanager
    async def hold(self, key: Hashable, operation: str) -> AsyncIterator[LockInfo]:
        """
        Hold the lock for an item for the duration of the block

        Args:
            key: Item key
            operation: Name of the operation, for logging
        """
        info = self._locks.setdefault(key, LockInfo())
        info.waiters += 1
        if info.lock.locked():
            logger.debug(f"Waiting for lock on {key}, held by {info.operation}")

        try:
            async with info.lock:
                info.operation = operation
                info.locked_at = datetime.now()
                logger.debug(f"Acquired lock on {key}, operation: {operation}")
                try:
                    yield info
                finally:
                    info.operation = None
                    info.locked_at = None
                    logger.debug(f"Released lock on {key}, operation: {operation}")
        finally:
            info.waiters -= 1
            if info.waiters == 0 and self._locks.get(key) is info:
                del self._locks[key]
