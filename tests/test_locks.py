"""
Tests for the per-item lock manager
"""

import asyncio

import pytest

from italian_practice.practice.locks import ItemLockManager


class TestItemLockManager:
    """Test ItemLockManager"""

    @pytest.mark.asyncio
    async def test_hold_and_release(self):
        manager = ItemLockManager()

        async with manager.hold(("verb", 1), "record_attempt") as info:
            assert manager.is_locked(("verb", 1))
            assert info.operation == "record_attempt"
            assert manager.get_active_locks_count() == 1

        assert not manager.is_locked(("verb", 1))
        assert manager.get_lock_info(("verb", 1)) is None

    @pytest.mark.asyncio
    async def test_same_key_is_serialized(self):
        manager = ItemLockManager()
        events = []

        async def worker(name):
            async with manager.hold(("verb", 1), name):
                events.append(f"{name}-start")
                await asyncio.sleep(0.01)
                events.append(f"{name}-end")

        await asyncio.gather(worker("a"), worker("b"))

        assert events == ["a-start", "a-end", "b-start", "b-end"]

    @pytest.mark.asyncio
    async def test_distinct_keys_run_independently(self):
        manager = ItemLockManager()
        events = []

        async def worker(key):
            async with manager.hold(key, "record_attempt"):
                events.append(f"{key[1]}-start")
                await asyncio.sleep(0.01)
                events.append(f"{key[1]}-end")

        await asyncio.gather(worker(("verb", 1)), worker(("verb", 2)))

        assert events[:2] == ["1-start", "2-start"]

    @pytest.mark.asyncio
    async def test_lock_released_on_error(self):
        manager = ItemLockManager()

        with pytest.raises(RuntimeError):
            async with manager.hold(("noun", 5), "reset_statistic"):
                raise RuntimeError("write failed")

        assert not manager.is_locked(("noun", 5))
        assert manager.get_active_locks_count() == 0
