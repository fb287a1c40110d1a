import asyncio
import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, Optional

from ..models.session import SessionRecord, SessionUser
from .session_persister import SessionPersister

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Lifecycle states of the installation's single session"""
    NO_SESSION = "no_session"
    ACTIVE = "active"
    EXPIRED = "expired"


class SessionAuthority:
    """
    In-memory owner of the current session.

    The durable record held by the SessionPersister is the source of truth
    across restarts; this object is the source of truth within a process and
    re-checks the durable record against the wall clock on every trust-sensitive
    query. All state transitions happen under one asyncio lock, so a login racing
    a logout ends in exactly one of the two terminal states.

    Expiry is sliding: validity is `now - created_at < ttl`, and every refresh
    re-anchors created_at (and expires_at with it) at the current time.

    File I/O runs in the default thread pool so the event loop stays free while
    the lock is held.
    """

    def __init__(
        self,
        persister: SessionPersister,
        ttl: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = datetime.now
    ):
        self.persister = persister
        self.ttl = ttl
        self.clock = clock
        self._record: Optional[SessionRecord] = None
        self._state = SessionState.NO_SESSION
        self._lock = asyncio.Lock()

    @property
    def state(self) -> SessionState:
        return self._state

    def is_active(self) -> bool:
        return self._state == SessionState.ACTIVE

    def _set_state(self, new_state: SessionState):
        if new_state == self._state:
            return
        logger.info(f"Session state changed: {self._state.value} -> {new_state.value}")
        self._state = new_state

    async def _io(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    def _reset(self):
        self._record = None
        self._set_state(SessionState.NO_SESSION)

    async def _expire(self):
        self._set_state(SessionState.EXPIRED)
        await self._io(self.persister.clear)
        self._reset()

    async def _restore_locked(self) -> bool:
        record = await self._io(self.persister.load)
        if record is None:
            self._reset()
            return False

        if record.is_valid(self.clock(), self.ttl):
            self._record = record
            self._set_state(SessionState.ACTIVE)
            return True

        logger.info(f"Session expired for user: {record.user.email}, clearing")
        await self._expire()
        return False

    async def _establish_locked(self, user: SessionUser) -> SessionRecord:
        """Persist first; a session that cannot be saved is not started"""
        record = SessionRecord.start(user, self.clock(), self.ttl)
        await self._io(self.persister.save, record)
        self._record = record
        self._set_state(SessionState.ACTIVE)
        return record

    async def _rewrite_locked(self, user: SessionUser) -> SessionRecord:
        """Re-anchor a live session; a failed save is logged and the cache keeps the update"""
        record = SessionRecord.start(user, self.clock(), self.ttl)
        self._record = record
        try:
            await self._io(self.persister.save, record)
        except OSError as e:
            logger.error(f"Error saving session for {user.email}: {e}")
        return record

    async def _check_cached_locked(self) -> bool:
        """True when the cached session exists and is still within the TTL"""
        if self._record is None:
            return False
        if self._record.is_valid(self.clock(), self.ttl):
            return True
        logger.info(f"Session expired for user: {self._record.user.email}, clearing")
        await self._expire()
        return False

    async def restore(self) -> bool:
        """Re-establish the session from durable storage, honouring expiry"""
        async with self._lock:
            restored = await self._restore_locked()
            if restored:
                logger.info(f"Session restored for user: {self._record.user.email}")
            return restored

    async def establish(self, user: SessionUser) -> SessionUser:
        """Start a fresh session for `user` (used after a successful login)"""
        async with self._lock:
            record = await self._establish_locked(user)
            return record.user.model_copy(deep=True)

    async def refresh(self) -> bool:
        """Slide the expiry window forward; no-op without a live session"""
        async with self._lock:
            if not await self._check_cached_locked():
                return False
            await self._rewrite_locked(self._record.user)
            return True

    async def update_preferences(self, patch: Dict[str, Any]) -> bool:
        """Shallow-merge `patch` into the user's preferences and persist"""
        async with self._lock:
            if not await self._check_cached_locked():
                logger.warning("No authenticated user to save preferences for")
                return False
            await self._rewrite_locked(self._record.user.with_preferences(patch))
            logger.info(f"User preferences saved: {sorted(patch)}")
            return True

    async def current_user(self) -> Optional[SessionUser]:
        """Return the signed-in user after re-validating against storage and the clock"""
        async with self._lock:
            cached = self._record
            if cached is None:
                return None
            if not await self._restore_locked():
                return None
            # Keep a newer cached write that could not reach the disk
            if cached.user.id == self._record.user.id and cached.created_at > self._record.created_at:
                self._record = cached
            record = await self._rewrite_locked(self._record.user)
            return record.user.model_copy(deep=True)

    async def validate(self) -> bool:
        """Explicit validity check against durable storage (does not extend the session)"""
        return await self.restore()

    async def terminate(self):
        """End the session; safe to call when there is none"""
        async with self._lock:
            await self._io(self.persister.clear)
            self._reset()

    def snapshot(self) -> Optional[SessionRecord]:
        """Copy of the cached record, for diagnostics"""
        if self._record is None:
            return None
        return self._record.model_copy(deep=True)
