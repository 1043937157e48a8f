"""Unit tests for KeyedLockRegistry."""

from __future__ import annotations

import asyncio

import pytest

from src.application.services.keyed_lock import KeyedLockRegistry
from src.domain.errors.concurrent_modification import LockTimeoutError


class TestKeyedLockRegistry:
    """Tests for per-key lock acquisition."""

    @pytest.mark.asyncio
    async def test_same_key_serializes(self) -> None:
        """Two holders of one key never overlap."""
        locks = KeyedLockRegistry(timeout_seconds=1.0)
        order: list[str] = []

        async def worker(name: str) -> None:
            async with locks.hold("workflow:1"):
                order.append(f"{name}-in")
                await asyncio.sleep(0.01)
                order.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))

        assert order in (
            ["a-in", "a-out", "b-in", "b-out"],
            ["b-in", "b-out", "a-in", "a-out"],
        )

    @pytest.mark.asyncio
    async def test_different_keys_do_not_block(self) -> None:
        locks = KeyedLockRegistry(timeout_seconds=0.05)

        async with locks.hold("workflow:1"):
            async with locks.hold("workflow:2"):
                assert locks.is_locked("workflow:1")
                assert locks.is_locked("workflow:2")

    @pytest.mark.asyncio
    async def test_timeout_raises(self) -> None:
        """A waiter gives up after the configured timeout."""
        locks = KeyedLockRegistry(timeout_seconds=0.05)

        async with locks.hold("item:1"):
            with pytest.raises(LockTimeoutError) as exc_info:
                async with locks.hold("item:1"):
                    pass

        assert exc_info.value.http_status == 503
        assert exc_info.value.key == "item:1"

    @pytest.mark.asyncio
    async def test_lock_released_after_error(self) -> None:
        """An exception inside the block releases the lock and drops the entry."""
        locks = KeyedLockRegistry(timeout_seconds=0.05)

        with pytest.raises(RuntimeError):
            async with locks.hold("session:1"):
                raise RuntimeError("boom")

        assert not locks.is_locked("session:1")
        async with locks.hold("session:1"):
            assert locks.is_locked("session:1")
