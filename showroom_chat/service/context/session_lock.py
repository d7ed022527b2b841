"""
Serializes chat turns per session token.

Two messages for the same token would otherwise both read the same session
row and post to the same thread. The in-process lock covers a single worker;
the Redis lock covers several workers sharing one database.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from redis import Redis

import showroom_chat.config.config as configs
from showroom_chat.client.db.redis import build_redis_client
from showroom_chat.service.chat.errors import SessionBusyError

logger = logging.getLogger(__name__)


# Compare-and-delete in one server-side step
RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


def _lock_key(session_id: str) -> str:
    return f"chat:session:lock:{session_id}"


class InProcessSessionLocks:
    def __init__(self, wait_seconds: Optional[float] = None):
        self.wait_seconds = configs.SESSION_LOCK_WAIT_SEC if wait_seconds is None else wait_seconds
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, session_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(session_id, asyncio.Lock())
        self._waiters[session_id] = self._waiters.get(session_id, 0) + 1
        try:
            try:
                await asyncio.wait_for(lock.acquire(), timeout=self.wait_seconds)
            except asyncio.TimeoutError as exc:
                raise SessionBusyError(f"session {session_id} is busy") from exc
            try:
                yield
            finally:
                lock.release()
        finally:
            self._waiters[session_id] -= 1
            if not self._waiters[session_id]:
                del self._waiters[session_id]
                self._locks.pop(session_id, None)

    def is_locked(self, session_id: str) -> bool:
        lock = self._locks.get(session_id)
        return lock is not None and lock.locked()


class RedisSessionLocks:
    def __init__(
        self,
        redis_client: Redis,
        ttl_seconds: Optional[int] = None,
        wait_seconds: Optional[float] = None,
        retry_interval: float = 0.2,
    ):
        self.redis_client = redis_client
        self.ttl_seconds = configs.SESSION_LOCK_TTL_SEC if ttl_seconds is None else ttl_seconds
        self.wait_seconds = configs.SESSION_LOCK_WAIT_SEC if wait_seconds is None else wait_seconds
        self.retry_interval = retry_interval
        self._release = redis_client.register_script(RELEASE_SCRIPT)

    @asynccontextmanager
    async def hold(self, session_id: str) -> AsyncIterator[None]:
        key = _lock_key(session_id)
        token = str(uuid.uuid4())
        deadline = time.monotonic() + self.wait_seconds
        while not self.redis_client.set(key, token, nx=True, ex=self.ttl_seconds):
            if time.monotonic() >= deadline:
                raise SessionBusyError(f"session {session_id} is busy")
            await asyncio.sleep(self.retry_interval)
        try:
            yield
        finally:
            # Only release our own lock; it may have expired and been taken over
            if not self._release(keys=[key], args=[token]):
                logger.warning("session lock expired before release session_id=%s", session_id)


def build_session_locks():
    if configs.SESSION_LOCK_BACKEND == "redis":
        return RedisSessionLocks(build_redis_client())
    return InProcessSessionLocks()
