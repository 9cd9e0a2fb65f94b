"""Fire-and-forget synchronization of profiles into the remote store."""

import asyncio
import logging

from hajjcare.schemas.profile import PilgrimProfile
from hajjcare.services.remote_store import RemoteProfileStore

logger = logging.getLogger(__name__)


async def put_best_effort(store: RemoteProfileStore, profile: PilgrimProfile) -> bool:
    """Upsert ``profile`` under its own id; return False instead of raising."""
    try:
        return await store.put(profile.id, profile)
    except Exception as e:
        logger.warning("Best-effort sync of profile %s failed: %s", profile.id, e)
        return False


class BackgroundSync:
    """Launches best-effort store writes as detached tasks.

    Outcomes are discarded: a failed write is logged and never reaches the
    caller. Tasks are held until they finish so they are not garbage
    collected mid-flight. Writes for the same id run one at a time, in the
    order they were scheduled, so the last save is the one that lands.
    """

    def __init__(self, store: RemoteProfileStore):
        self.store = store
        self._tasks: set[asyncio.Task] = set()
        self._locks: dict[str, asyncio.Lock] = {}

    def schedule_put(self, profile: PilgrimProfile) -> asyncio.Task:
        """Start an upsert of ``profile`` under its own id without awaiting it."""
        lock = self._locks.setdefault(profile.id, asyncio.Lock())
        task = asyncio.create_task(self._put_in_order(lock, profile))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _put_in_order(self, lock: asyncio.Lock, profile: PilgrimProfile) -> bool:
        async with lock:
            return await put_best_effort(self.store, profile)

    @property
    def pending(self) -> int:
        """Number of writes still in flight."""
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for all in-flight writes to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
