from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class UserRecord:
    """Registered local user as stored in the credential database"""
    id: int
    name: str
    email: str
    password_hash: str = field(repr=False)
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserRecord":
        """Create UserRecord from database row"""
        created_at = data.get("created_at")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)

        return cls(
            id=data["id"],
            name=data["name"],
            email=data["email"],
            password_hash=data["password_hash"],
            created_at=created_at
        )

    def to_public_dict(self) -> Dict[str, Any]:
        """Identity fields safe to hand to callers (no password hash)"""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "created_at": self.created_at.isoformat() if self.created_at else None
        }
