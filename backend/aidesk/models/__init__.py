from .user import UserRecord
from .session import SessionUser, SessionRecord

__all__ = [
    "UserRecord",
    "SessionUser",
    "SessionRecord"
]
