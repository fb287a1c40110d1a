from .auth_exceptions import (
    AuthError,
    DuplicateEmailError,
    StorageUnavailableError,
    CorruptSessionError,
    MalformedHashError
)
from .password_hasher import PasswordHasher
from .session_persister import SessionPersister
from .session_authority import SessionAuthority, SessionState
from .session_signals import SessionSignalQueue, SignalType

__all__ = [
    "AuthError",
    "DuplicateEmailError",
    "StorageUnavailableError",
    "CorruptSessionError",
    "MalformedHashError",
    "PasswordHasher",
    "SessionPersister",
    "SessionAuthority",
    "SessionState",
    "SessionSignalQueue",
    "SignalType"
]
