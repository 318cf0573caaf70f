"""Keyed asyncio locks that serialize read-then-write filing steps.

Sequence numbers, firm lookup-or-create and the content dedup check are all
computed from current table contents. Holding a lock keyed by what is being
counted, from the read until the commit, keeps two uploads in this process
from reading the same state. Locks are process-local: deployments running
several workers still race across processes.
"""

import asyncio
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Hashable, Tuple

from tender_filing.utils.logging import get_logger

LOGGER = get_logger(__name__)

LockKey = Tuple[Hashable, ...]


class FilingLockRegistry:
    """Hands out one ``asyncio.Lock`` per key and forgets idle ones."""

    def __init__(self) -> None:
        self._locks: Dict[LockKey, asyncio.Lock] = {}
        self._waiters: Dict[LockKey, int] = defaultdict(int)

    @asynccontextmanager
    async def hold(self, *key: Hashable) -> AsyncIterator[None]:
        """Hold the lock for ``key`` for the duration of the block.

        Locks are not reentrant; callers acquire in the order
        checksum → path → firm → firm-order.
        """
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] += 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                self._locks.pop(key, None)

    def __len__(self) -> int:
        return len(self._locks)


filing_locks = FilingLockRegistry()
