"""Tests for per-volume locks."""

import asyncio

from csi_cbs.core.lock import KeyedLock, NullLock


class TestKeyedLock:
    """Tests for KeyedLock."""

    async def test_same_key_serializes(self) -> None:
        """Second holder of a key waits for the first to release."""
        locks = KeyedLock()
        order: list[str] = []
        first_inside = asyncio.Event()
        release_first = asyncio.Event()

        async def first() -> None:
            async with locks.hold("id:disk-1"):
                order.append("first-in")
                first_inside.set()
                await release_first.wait()
                order.append("first-out")

        async def second() -> None:
            await first_inside.wait()
            async with locks.hold("id:disk-1"):
                order.append("second-in")

        task1 = asyncio.create_task(first())
        task2 = asyncio.create_task(second())
        await first_inside.wait()
        await asyncio.sleep(0)
        assert order == ["first-in"]

        release_first.set()
        await asyncio.gather(task1, task2)

        assert order == ["first-in", "first-out", "second-in"]

    async def test_different_keys_do_not_block(self) -> None:
        locks = KeyedLock()

        async with locks.hold("id:disk-1"):
            async with locks.hold("id:disk-2"):
                assert len(locks) == 2

    async def test_registry_cleaned_up(self) -> None:
        """Locks are dropped once nobody holds or waits on them."""
        locks = KeyedLock()

        async with locks.hold("name:pvc-1"):
            assert len(locks) == 1

        assert len(locks) == 0

    async def test_released_on_exception(self) -> None:
        locks = KeyedLock()

        try:
            async with locks.hold("id:disk-1"):
                raise ValueError("boom")
        except ValueError:
            pass

        assert len(locks) == 0
        async with locks.hold("id:disk-1"):
            pass


class TestNullLock:
    async def test_never_blocks(self) -> None:
        locks = NullLock()

        async with locks.hold("id:disk-1"):
            async with locks.hold("id:disk-1"):
                pass
