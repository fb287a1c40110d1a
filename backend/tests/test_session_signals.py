import asyncio

from conftest import TTL

from aidesk.models.session import SessionUser
from aidesk.services.session_authority import SessionAuthority
from aidesk.services.session_persister import SessionPersister
from aidesk.services.session_signals import SessionSignalQueue


class FlakyPersister(SessionPersister):
    """Fails the first N saves"""

    def __init__(self, session_path, failures: int):
        super().__init__(session_path)
        self.failures = failures

    def save(self, record):
        if self.failures:
            self.failures -= 1
            raise OSError("disk full")
        super().save(record)


def _alice() -> SessionUser:
    return SessionUser(id=1, name="Alice", email="a@x.com", preferences={"darkMode": False})


def test_activity_signal_refreshes_session(persister, clock):
    authority = SessionAuthority(persister, ttl=TTL, clock=clock)
    queue = SessionSignalQueue(authority)

    async def run():
        await authority.establish(_alice())
        clock.advance(hours=5)
        queue.post_activity()
        await queue.drain()
        await queue.stop()

    asyncio.run(run())

    assert persister.load().created_at == clock()
    assert queue.get_status()["processed"] == 1


def test_preference_signals_apply_in_order(persister, clock):
    authority = SessionAuthority(persister, ttl=TTL, clock=clock)
    queue = SessionSignalQueue(authority)

    async def run():
        await queue.start()
        await authority.establish(_alice())
        queue.post_preferences({"lastUsedAI": "gpt"})
        queue.post_preferences({"lastUsedAI": "claude", "darkMode": True})
        queue.post_preferences({"zoom": 1.25})
        await queue.drain()
        await queue.stop()

    asyncio.run(run())

    assert persister.load().user.preferences == {"darkMode": True, "lastUsedAI": "claude", "zoom": 1.25}


def test_post_does_not_wait_for_the_authority(persister, clock):
    authority = SessionAuthority(persister, ttl=TTL, clock=clock)
    queue = SessionSignalQueue(authority)

    async def run():
        await authority.establish(_alice())
        queue.post_preferences({"darkMode": True})
        pending = persister.load().user.preferences["darkMode"]
        await queue.drain()
        await queue.stop()
        return pending

    assert asyncio.run(run()) is False
    assert persister.load().user.preferences["darkMode"] is True


def test_signals_without_session_are_ignored(persister, clock, session_path):
    authority = SessionAuthority(persister, ttl=TTL, clock=clock)
    queue = SessionSignalQueue(authority)

    async def run():
        queue.post_activity()
        queue.post_preferences({"darkMode": True})
        await queue.drain()
        await queue.stop()

    asyncio.run(run())

    assert not session_path.exists()


def test_failed_save_keeps_preferences_in_the_session(session_path, clock):
    persister = FlakyPersister(session_path, failures=0)
    authority = SessionAuthority(persister, ttl=TTL, clock=clock)
    queue = SessionSignalQueue(authority)

    async def run():
        await authority.establish(_alice())
        persister.failures = 1
        queue.post_preferences({"darkMode": True})
        queue.post_preferences({"zoom": 2})
        await queue.drain()
        status = queue.get_status()
        await queue.stop()
        return status

    status = asyncio.run(run())

    assert status["failed"] == 0
    assert status["processed"] == 2
    assert authority.snapshot().user.preferences == {"darkMode": True, "zoom": 2}
    assert persister.load().user.preferences == {"darkMode": True, "zoom": 2}


class BrokenAuthority(SessionAuthority):
    """Raises on the first preference update"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.broken = True

    async def update_preferences(self, patch):
        if self.broken:
            self.broken = False
            raise RuntimeError("boom")
        return await super().update_preferences(patch)


def test_failed_signal_does_not_stop_the_worker(persister, clock):
    authority = BrokenAuthority(persister, ttl=TTL, clock=clock)
    queue = SessionSignalQueue(authority)

    async def run():
        await authority.establish(_alice())
        queue.post_preferences({"darkMode": True})
        queue.post_preferences({"zoom": 2})
        await queue.drain()
        status = queue.get_status()
        await queue.stop()
        return status

    status = asyncio.run(run())

    assert status["failed"] == 1
    assert status["processed"] == 1
    assert status["worker_active"] is True
    assert persister.load().user.preferences == {"darkMode": False, "zoom": 2}

def test_stop_cancels_worker(persister, clock):
    queue = SessionSignalQueue(SessionAuthority(persister, ttl=TTL, clock=clock))

    async def run():
        await queue.start()
        running = queue.get_status()["worker_active"]
        await queue.stop()
        return running, queue.get_status()["worker_active"]

    assert asyncio.run(run()) == (True, False)
