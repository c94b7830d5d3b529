"""Session store for in-progress games.

Sessions live from the moment a game is started until it is resolved or its
time-to-live runs out. Every read-modify-write on a session must happen
inside `store.lock(key)`; resolution goes through `compare_and_delete` so a
session is consumed exactly once.
"""

import asyncio
import logging
import uuid
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from upstash_redis.asyncio import Redis

from app.config import get_settings
from app.schemas.game import GameSession

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionBusyError(Exception):
    """Raised when a session lock cannot be acquired in time."""

    def __init__(self, key: str):
        super().__init__(f"Session {key} is busy")
        self.key = key


class SessionStore(ABC):
    """Associative store mapping a session key to a GameSession."""

    def __init__(self, ttl_seconds: int, lock_timeout: float = 5.0, clock: Clock = _utcnow):
        self.ttl = timedelta(seconds=ttl_seconds)
        self.lock_timeout = lock_timeout
        self._clock = clock

    def is_expired(self, session: GameSession) -> bool:
        return self._clock() - session.created_at >= self.ttl

    @abstractmethod
    async def create(self, key: str, session: GameSession) -> None:
        """Store a new session, replacing any previous one under the key.

        The session's `created_at` is stamped by the store's clock.
        """

    def _stamped(self, session: GameSession) -> GameSession:
        return session.model_copy(update={"created_at": self._clock()}, deep=True)

    @abstractmethod
    async def get(self, key: str) -> GameSession | None:
        """Return the live session for a key, or None if absent or expired."""

    @abstractmethod
    async def save(self, key: str, session: GameSession) -> None:
        """Persist changes to an existing session."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a session. Returns False if nothing was deleted."""

    @abstractmethod
    async def compare_and_delete(self, key: str, expected: GameSession) -> bool:
        """Delete a session only if it still equals `expected`."""

    @abstractmethod
    def lock(self, key: str) -> AbstractAsyncContextManager[None]:
        """Serialize mutations of a single session key."""

    @abstractmethod
    async def purge_expired(self) -> int:
        """Remove expired sessions. Returns the number removed."""


@dataclass
class _KeyLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    holders: int = 0


class InMemorySessionStore(SessionStore):
    """Process-local store. Sessions are copied in and out."""

    def __init__(self, ttl_seconds: int = 900, lock_timeout: float = 5.0, clock: Clock = _utcnow):
        super().__init__(ttl_seconds, lock_timeout, clock)
        self._sessions: dict[str, GameSession] = {}
        self._locks: dict[str, _KeyLock] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, key: str) -> bool:
        return key in self._sessions

    async def create(self, key: str, session: GameSession) -> None:
        if key in self._sessions:
            logger.debug("Replacing existing session %s", key)
        self._sessions[key] = self._stamped(session)
        logger.debug("Session %s created (%s)", key, session.kind.value)

    async def get(self, key: str) -> GameSession | None:
        session = self._sessions.get(key)
        if session is None:
            return None
        if self.is_expired(session):
            logger.info("Session %s expired on lookup", key)
            self._sessions.pop(key, None)
            return None
        return session.model_copy(deep=True)

    async def save(self, key: str, session: GameSession) -> None:
        if key not in self._sessions:
            logger.warning("Saving session %s that no longer exists", key)
        self._sessions[key] = session.model_copy(deep=True)

    async def delete(self, key: str) -> bool:
        deleted = self._sessions.pop(key, None) is not None
        if deleted:
            logger.debug("Session %s deleted", key)
        return deleted

    async def compare_and_delete(self, key: str, expected: GameSession) -> bool:
        current = self._sessions.get(key)
        if current is None or current != expected:
            return False
        del self._sessions[key]
        logger.debug("Session %s consumed", key)
        return True

    @asynccontextmanager
    async def lock(self, key: str) -> AsyncIterator[None]:
        entry = self._locks.get(key)
        if entry is None:
            entry = self._locks[key] = _KeyLock()
        entry.holders += 1
        try:
            try:
                await asyncio.wait_for(entry.lock.acquire(), timeout=self.lock_timeout)
            except TimeoutError:
                raise SessionBusyError(key) from None
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            entry.holders -= 1
            if entry.holders == 0:
                self._locks.pop(key, None)

    async def purge_expired(self) -> int:
        # Snapshot to avoid mutating the dict while iterating
        expired = [key for key, session in list(self._sessions.items()) if self.is_expired(session)]
        for key in expired:
            self._sessions.pop(key, None)
        if expired:
            logger.info("Purged %d expired sessions", len(expired))
        return len(expired)


class RedisSessionStore(SessionStore):
    """Upstash Redis backed store.

    Redis keys:
        - game:session:{key} (String) - session JSON, expires with the session TTL
        - game:session:{key}:lock (String) - lock token, expires after SESSION_LOCK_TTL
    """

    LOCK_RETRY_INTERVAL = 0.05

    # Delete the lock only while it still holds our token
    RELEASE_LOCK_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""

    def __init__(
        self,
        redis_client: Redis,
        ttl_seconds: int = 900,
        lock_timeout: float = 5.0,
        lock_ttl: float = 5.0,
        clock: Clock = _utcnow,
    ):
        super().__init__(ttl_seconds, lock_timeout, clock)
        self._redis = redis_client
        self.lock_ttl_ms = max(1, int(lock_ttl * 1000))

    def _redis_session_key(self, key: str) -> str:
        return f"game:session:{key}"

    def _redis_lock_key(self, key: str) -> str:
        return f"game:session:{key}:lock"

    def _remaining_seconds(self, session: GameSession) -> int:
        remaining = self.ttl - (self._clock() - session.created_at)
        return max(1, int(remaining.total_seconds()))

    async def create(self, key: str, session: GameSession) -> None:
        session = self._stamped(session)
        await self._redis.set(
            self._redis_session_key(key),
            session.model_dump_json(),
            ex=self._remaining_seconds(session),
        )
        logger.debug("Session %s created in Redis (%s)", key, session.kind.value)

    async def get(self, key: str) -> GameSession | None:
        raw = await self._redis.get(self._redis_session_key(key))
        if not raw:
            return None
        session = GameSession.model_validate_json(raw)
        if self.is_expired(session):
            await self._redis.delete(self._redis_session_key(key))
            return None
        return session

    async def save(self, key: str, session: GameSession) -> None:
        if self.is_expired(session):
            logger.info("Not saving expired session %s", key)
            await self._redis.delete(self._redis_session_key(key))
            return
        await self._redis.set(
            self._redis_session_key(key),
            session.model_dump_json(),
            ex=self._remaining_seconds(session),
        )

    async def delete(self, key: str) -> bool:
        count = await self._redis.delete(self._redis_session_key(key))
        return bool(count)

    async def compare_and_delete(self, key: str, expected: GameSession) -> bool:
        # Only atomic when called under lock(key)
        current = await self.get(key)
        if current is None or current != expected:
            return False
        return await self.delete(key)

    @asynccontextmanager
    async def lock(self, key: str) -> AsyncIterator[None]:
        lock_key = self._redis_lock_key(key)
        token = uuid.uuid4().hex
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.lock_timeout

        while not await self._redis.set(lock_key, token, nx=True, px=self.lock_ttl_ms):
            if loop.time() >= deadline:
                raise SessionBusyError(key)
            await asyncio.sleep(self.LOCK_RETRY_INTERVAL)

        try:
            yield
        finally:
            try:
                await self._redis.eval(self.RELEASE_LOCK_SCRIPT, keys=[lock_key], args=[token])
            except Exception as e:
                logger.error("Failed to release lock for session %s: %s", key, e)

    async def purge_expired(self) -> int:
        # Redis expires keys on its own
        return 0


class SessionReaper:
    """Periodically purges expired sessions from a store."""

    def __init__(self, store: SessionStore, interval: float):
        self._store = store
        self._interval = interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self._task is not None:
            logger.warning("Session reaper already running")
            return

        async def reap_loop():
            logger.info("Starting session reaper with interval %ss", self._interval)
            while True:
                try:
                    await asyncio.sleep(self._interval)
                    await self._store.purge_expired()
                except asyncio.CancelledError:
                    logger.info("Session reaper cancelled")
                    break
                except Exception as e:
                    logger.error("Error in session reaper: %s", e)

        self._task = asyncio.create_task(reap_loop())

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("Session reaper stopped")


# Global store instance (initialized in lifespan)
_session_store: SessionStore | None = None


def get_session_store() -> SessionStore:
    """Get the global SessionStore, building it from settings on first use."""
    global _session_store
    if _session_store is None:
        settings = get_settings()
        if settings.SESSION_BACKEND == "redis":
            from app.dependencies.redis import get_redis_client

            _session_store = RedisSessionStore(
                get_redis_client(),
                ttl_seconds=settings.SESSION_TTL_SECONDS,
                lock_timeout=settings.SESSION_LOCK_TIMEOUT,
                lock_ttl=settings.SESSION_LOCK_TTL,
            )
        else:
            _session_store = InMemorySessionStore(
                ttl_seconds=settings.SESSION_TTL_SECONDS,
                lock_timeout=settings.SESSION_LOCK_TIMEOUT,
            )
        logger.info("Session store initialized: %s", type(_session_store).__name__)
    return _session_store


def set_session_store(store: SessionStore | None) -> None:
    """Set the global SessionStore instance."""
    global _session_store
    _session_store = store
