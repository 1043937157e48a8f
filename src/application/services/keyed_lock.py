"""Per-key asyncio locks with bounded acquisition.

Serializes writers of one aggregate (a workflow instance, a grantor's
proxy set, a session item) without any global lock: work on different keys
proceeds in parallel. Acquisition is bounded by a timeout so no operation
blocks indefinitely.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog

from src.domain.errors.concurrent_modification import LockTimeoutError

logger = structlog.get_logger()


class KeyedLockRegistry:
    """Registry of asyncio.Lock objects created on demand per key.

    Locks are dropped once no task holds or waits for them.
    """

    def __init__(self, timeout_seconds: float = 10.0) -> None:
        self._timeout_seconds = timeout_seconds
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        """Hold the lock for `key` for the duration of the block.

        Raises:
            LockTimeoutError: If the lock is not acquired in time.
        """
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            try:
                await asyncio.wait_for(lock.acquire(), timeout=self._timeout_seconds)
            except asyncio.TimeoutError:
                logger.warning(
                    "keyed_lock_timeout", key=key, timeout_seconds=self._timeout_seconds
                )
                raise LockTimeoutError(key, self._timeout_seconds) from None
            try:
                yield
            finally:
                lock.release()
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def is_locked(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()
