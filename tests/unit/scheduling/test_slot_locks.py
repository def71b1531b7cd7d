import asyncio

import pytest

from src.scheduling.application.services.slot_locks import SlotLockRegistry
from src.scheduling.domain.value_objects import SlotKey

A = SlotKey.of(1, "2024-01-10", "10:00")
B = SlotKey.of(1, "2024-01-11", "11:00")


@pytest.mark.asyncio
async def test_same_key_is_serialised():
    locks = SlotLockRegistry()
    order = []

    async def worker(name: str):
        async with locks.hold(A):
            order.append(f"{name}-in")
            await asyncio.sleep(0.01)
            order.append(f"{name}-out")

    await asyncio.gather(worker("w1"), worker("w2"))
    assert order == ["w1-in", "w1-out", "w2-in", "w2-out"]


@pytest.mark.asyncio
async def test_opposite_order_pairs_do_not_deadlock():
    locks = SlotLockRegistry()

    async def move(src, dst):
        async with locks.hold(src, dst):
            await asyncio.sleep(0.01)

    await asyncio.wait_for(asyncio.gather(move(A, B), move(B, A)), timeout=1)


@pytest.mark.asyncio
async def test_entries_are_dropped_after_use():
    locks = SlotLockRegistry()
    async with locks.hold(A, B, A):
        assert len(locks) == 2
    assert len(locks) == 0


@pytest.mark.asyncio
async def test_lock_released_when_body_raises():
    locks = SlotLockRegistry()
    with pytest.raises(RuntimeError):
        async with locks.hold(A):
            raise RuntimeError("boom")
    async with locks.hold(A):
        pass
    assert len(locks) == 0


@pytest.mark.asyncio
async def test_no_keys_is_a_no_op():
    locks = SlotLockRegistry()
    async with locks.hold():
        assert len(locks) == 0
