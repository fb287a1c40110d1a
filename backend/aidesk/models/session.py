from datetime import datetime, timedelta
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SessionUser(BaseModel):
    """User portion of the session record (what the shell sees as the current user)"""
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    email: str
    preferences: Dict[str, Any] = Field(default_factory=dict)

    def with_preferences(self, patch: Dict[str, Any]) -> "SessionUser":
        """Return a copy with `patch` shallow-merged over the current preferences"""
        merged = {**self.preferences, **patch}
        return self.model_copy(update={"preferences": merged})


class SessionRecord(BaseModel):
    """The single durable session of this installation"""
    model_config = ConfigDict(populate_by_name=True)

    user: SessionUser
    created_at: datetime = Field(alias="createdAt")
    expires_at: datetime = Field(alias="expiresAt")

    @field_validator("created_at", "expires_at")
    @classmethod
    def to_local_naive(cls, value: datetime) -> datetime:
        """Stored times are compared with the naive local clock; convert aware ones (ISO offsets, epoch numbers)"""
        if value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value

    @classmethod
    def start(cls, user: SessionUser, now: datetime, ttl: timedelta) -> "SessionRecord":
        """Create a record anchored at `now`; expires_at is always created_at + ttl"""
        return cls(user=user, created_at=now, expires_at=now + ttl)

    def age(self, now: datetime) -> timedelta:
        return now - self.created_at

    def is_valid(self, now: datetime, ttl: timedelta) -> bool:
        """A session is valid while its age is strictly below the TTL"""
        return self.age(now) < ttl

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)

    @classmethod
    def from_json(cls, raw: str) -> "SessionRecord":
        return cls.model_validate_json(raw)
