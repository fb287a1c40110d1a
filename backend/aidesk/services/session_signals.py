"""
Fire-and-forget session signals (activity pings and preference updates)
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from .session_authority import SessionAuthority

logger = logging.getLogger(__name__)


class SignalType(str, Enum):
    """Session signal kinds"""
    ACTIVITY = "activity"
    PREFERENCES = "preferences"


@dataclass
class SessionSignal:
    """A one-way message for the session authority"""
    type: SignalType
    payload: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.now)


class SessionSignalQueue:
    """Applies posted signals to the session authority, one at a time, in arrival order"""

    def __init__(self, authority: SessionAuthority):
        self.authority = authority
        self._queue: asyncio.Queue = asyncio.Queue()
        self._worker_task: Optional[asyncio.Task] = None
        self._processed = 0
        self._failed = 0

    async def start(self):
        """Start the signal worker"""
        if self._worker_task is None or self._worker_task.done():
            self._worker_task = asyncio.create_task(self._worker())
            logger.info("Session signal worker started")

    async def stop(self):
        """Stop the signal worker"""
        if self._worker_task and not self._worker_task.done():
            self._worker_task.cancel()
            try:
                await self._worker_task
            except asyncio.CancelledError:
                pass
        self._worker_task = None
        logger.info("Session signal worker stopped")

    def _ensure_worker(self):
        if self._worker_task is None or self._worker_task.done():
            self._worker_task = asyncio.get_running_loop().create_task(self._worker())

    def post(self, signal: SessionSignal):
        """Enqueue a signal without waiting for it to be applied"""
        self._queue.put_nowait(signal)
        self._ensure_worker()

    def post_activity(self):
        self.post(SessionSignal(type=SignalType.ACTIVITY))

    def post_preferences(self, patch: Dict[str, Any]):
        self.post(SessionSignal(type=SignalType.PREFERENCES, payload=dict(patch)))

    async def drain(self):
        """Wait until every posted signal has been applied"""
        self._ensure_worker()
        await self._queue.join()

    def get_status(self) -> Dict[str, Any]:
        return {
            "pending": self._queue.qsize(),
            "processed": self._processed,
            "failed": self._failed,
            "worker_active": self._worker_task is not None and not self._worker_task.done()
        }

    async def _apply(self, signal: SessionSignal):
        if signal.type == SignalType.ACTIVITY:
            await self.authority.refresh()
        elif signal.type == SignalType.PREFERENCES:
            await self.authority.update_preferences(signal.payload)

    async def _worker(self):
        """Background worker applying signals"""
        while True:
            signal = await self._queue.get()
            try:
                await self._apply(signal)
                self._processed += 1
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._failed += 1
                logger.error(f"Session signal '{signal.type.value}' failed: {e}", exc_info=True)
            finally:
                self._queue.task_done()
