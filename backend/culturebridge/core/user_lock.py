"""Per-user asyncio locks for serializing check-then-act sequences."""

import asyncio
import threading
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator
from uuid import UUID

from culturebridge.core.logging import get_logger

logger = get_logger(__name__)

# Per-process registry; entries vanish once no coroutine holds or waits on the lock
_registry_lock = threading.Lock()
_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()


def _get_lock(key: str) -> asyncio.Lock:
    with _registry_lock:
        lock = _locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            _locks[key] = lock
        return lock


@asynccontextmanager
async def user_lock(user_id: UUID | str, scope: str = "rewards") -> AsyncIterator[None]:
    """
    Serialize critical sections for one user.

    Usage:
        async with user_lock(user_id):
            total = await ledger.daily_total(user_id, since)
            await ledger.credit(...)

    Locks are keyed by (scope, user_id), so different users never block each
    other. Only coroutines in this process are serialized; multi-process
    deployments need a storage-level guard as well.
    """
    key = f"{scope}:{user_id}"
    lock = _get_lock(key)
    if lock.locked():
        logger.debug("Waiting for user lock", extra={"lock_key": key})
    async with lock:
        yield


def active_lock_count() -> int:
    """Number of live lock entries (for diagnostics and tests)."""
    with _registry_lock:
        return len(_locks)
