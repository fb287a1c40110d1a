import copy
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, Optional

import aiosqlite

from ..core.config import Settings, settings as default_settings
from ..db.credential_store import CredentialStore, open_credential_store
from ..models.session import SessionUser
from .auth_exceptions import DuplicateEmailError
from .password_hasher import PasswordHasher
from .session_authority import SessionAuthority
from .session_persister import SessionPersister
from .session_signals import SessionSignalQueue

logger = logging.getLogger(__name__)


class AuthFailureReason(str, Enum):
    """Reason codes for failed register/login attempts"""
    DUPLICATE_EMAIL = "duplicate-email"
    NOT_FOUND = "not-found"
    BAD_CREDENTIALS = "bad-credentials"
    STORAGE_ERROR = "storage-error"


@dataclass
class AuthResult:
    """Outcome of a register or login request"""
    success: bool
    message: str
    reason: Optional[AuthFailureReason] = None
    user_id: Optional[int] = None
    user: Optional[SessionUser] = None

    @classmethod
    def ok(cls, message: str, user_id: Optional[int] = None,
           user: Optional[SessionUser] = None) -> "AuthResult":
        return cls(success=True, message=message, user_id=user_id, user=user)

    @classmethod
    def fail(cls, reason: AuthFailureReason, message: str) -> "AuthResult":
        return cls(success=False, message=message, reason=reason)


class AuthenticationService:
    """Registration, login and session access for the desktop shell"""

    def __init__(
        self,
        config: Settings = default_settings,
        store: Optional[CredentialStore] = None,
        hasher: Optional[PasswordHasher] = None,
        persister: Optional[SessionPersister] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.config = config
        self.store = store
        self.hasher = hasher or PasswordHasher(rounds=config.BCRYPT_ROUNDS)
        self.persister = persister or SessionPersister(config.session_path)
        self.authority = SessionAuthority(
            self.persister,
            ttl=timedelta(hours=config.SESSION_TIMEOUT_HOURS),
            clock=clock
        )
        self.signals = SessionSignalQueue(self.authority)

    async def initialize(self) -> bool:
        """Open the credential store and restore any saved session; returns True if one was restored"""
        if self.store is None:
            self.store = await open_credential_store(self.config.database_path)
        await self.signals.start()
        return await self.authority.restore()

    async def shutdown(self):
        await self.signals.stop()
        if self.store is not None:
            await self.store.close()
            self.store = None

    def _require_store(self) -> CredentialStore:
        if self.store is None:
            raise RuntimeError("AuthenticationService.initialize() has not been called")
        return self.store

    def _default_preferences(self) -> Dict[str, Any]:
        return copy.deepcopy(self.config.DEFAULT_PREFERENCES)

    async def register(self, name: str, email: str, password: str) -> AuthResult:
        """Create an account; the hash is stored, never returned"""
        store = self._require_store()
        try:
            # Fast path only: the UNIQUE constraint in insert() is what actually decides
            if await store.find_by_email(email):
                return AuthResult.fail(AuthFailureReason.DUPLICATE_EMAIL, "Email already registered")

            password_hash = await self.hasher.hash(password)
            user_id = await store.insert(name, email, password_hash)
        except DuplicateEmailError:
            return AuthResult.fail(AuthFailureReason.DUPLICATE_EMAIL, "Email already registered")
        except (aiosqlite.Error, OSError) as e:
            logger.error(f"Registration error for {email}: {e}", exc_info=True)
            return AuthResult.fail(AuthFailureReason.STORAGE_ERROR, "Registration failed")

        logger.info(f"Registered user {user_id} ({email})")
        return AuthResult.ok("Registration successful", user_id=user_id)

    async def login(self, email: str, password: str) -> AuthResult:
        """Check credentials and, on success, start the session"""
        store = self._require_store()
        try:
            user = await store.find_by_email(email)
            if not user:
                return AuthResult.fail(AuthFailureReason.NOT_FOUND, "User not found")

            if not await self.hasher.verify(password, user.password_hash):
                logger.info(f"Failed login for {email}")
                return AuthResult.fail(AuthFailureReason.BAD_CREDENTIALS, "Invalid password")

            session_user = SessionUser(
                id=user.id,
                name=user.name,
                email=user.email,
                preferences=self._default_preferences()
            )
            established = await self.authority.establish(session_user)
        except (aiosqlite.Error, OSError) as e:
            logger.error(f"Login error for {email}: {e}", exc_info=True)
            return AuthResult.fail(AuthFailureReason.STORAGE_ERROR, "Login failed")

        logger.info(f"User {established.id} logged in ({email})")
        return AuthResult.ok("Login successful", user_id=established.id, user=established)

    async def logout(self):
        """End current session"""
        await self.authority.terminate()
        logger.info("Logout completed")

    async def get_current_user(self) -> Optional[SessionUser]:
        return await self.authority.current_user()

    async def validate_session(self) -> bool:
        return await self.authority.validate()

    def save_user_preferences(self, patch: Dict[str, Any]):
        """Fire-and-forget preference update"""
        self.signals.post_preferences(patch)

    def session_activity(self):
        """Fire-and-forget activity ping"""
        self.signals.post_activity()

    async def get_user(self, user_id: int) -> Optional[Dict[str, Any]]:
        """Public identity fields of a registered user"""
        user = await self._require_store().find_by_id(user_id)
        return user.to_public_dict() if user else None


# Singleton instance
_auth_service = None

def get_auth_service() -> AuthenticationService:
    """Get singleton AuthenticationService instance"""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthenticationService()
    return _auth_service
