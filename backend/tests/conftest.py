from datetime import datetime, timedelta
from pathlib import Path

import pytest

from aidesk.core.config import Settings
from aidesk.services.password_hasher import PasswordHasher
from aidesk.services.session_persister import SessionPersister

TTL = timedelta(hours=24)
START = datetime(2026, 3, 1, 9, 0, 0)


class FakeClock:
    """Wall clock the tests can move by hand"""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now

    def set(self, when: datetime) -> datetime:
        self.now = when
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def hasher() -> PasswordHasher:
    # Minimum bcrypt cost keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture()
def session_path(tmp_path: Path) -> Path:
    return tmp_path / "user-session.json"


@pytest.fixture()
def persister(session_path: Path) -> SessionPersister:
    return SessionPersister(session_path)


@pytest.fixture()
def test_settings(tmp_path: Path) -> Settings:
    return Settings(DATA_DIR=str(tmp_path / "app_data"), BCRYPT_ROUNDS=4)


@pytest.fixture()
def blocked_dir(tmp_path: Path) -> Path:
    """A path whose parent is a regular file, so nothing can be created beneath it"""
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    return blocker / "data"
