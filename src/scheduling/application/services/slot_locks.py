from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List

from src.scheduling.domain.value_objects.slot_key import SlotKey


class SlotLockRegistry:
    """
    Per-slot asyncio locks for this process.

    `hold()` takes the locks of all given keys in sorted order, so two
    operations touching the same pair of slots (a reschedule A->B and one
    B->A) cannot deadlock. Entries are dropped once nobody holds or waits.
    Cross-process safety comes from the database (conditional claim and the
    live-appointment unique index), not from here.
    """

    def __init__(self) -> None:
        self._locks: Dict[SlotKey, asyncio.Lock] = {}
        self._users: Dict[SlotKey, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, *keys: SlotKey) -> AsyncIterator[None]:
        ordered = sorted(set(keys))
        for key in ordered:
            self._users[key] = self._users.get(key, 0) + 1
            self._locks.setdefault(key, asyncio.Lock())

        acquired: List[SlotKey] = []
        try:
            for key in ordered:
                await self._locks[key].acquire()
                acquired.append(key)
            yield
        finally:
            for key in reversed(acquired):
                self._locks[key].release()
            for key in ordered:
                self._users[key] -= 1
                if self._users[key] == 0:
                    del self._users[key]
                    del self._locks[key]
