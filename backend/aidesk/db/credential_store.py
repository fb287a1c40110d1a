import asyncio
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Optional, Union

import aiosqlite

from aidesk.db.credential_schema import CREDENTIAL_SCHEMA
from aidesk.models.user import UserRecord
from aidesk.services.auth_exceptions import DuplicateEmailError, StorageUnavailableError

logger = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"


class StorageMode(str, Enum):
    """How the credential store is backed"""
    DURABLE = "durable"
    EPHEMERAL = "ephemeral"


class CredentialStore:
    """Durable table of user identity records keyed by unique email"""

    def __init__(self, connection: aiosqlite.Connection, mode: StorageMode,
                 db_path: str, fallback_reason: Optional[str] = None):
        self._connection = connection
        self._write_lock = asyncio.Lock()
        self.mode = mode
        self.db_path = db_path
        self.fallback_reason = fallback_reason

    @property
    def is_durable(self) -> bool:
        return self.mode == StorageMode.DURABLE

    @classmethod
    async def open_durable(cls, db_path: Union[str, Path]) -> "CredentialStore":
        """Open (and lazily create) the on-disk database, raising StorageUnavailableError on failure"""
        db_path = str(db_path)
        connection = None
        try:
            directory = os.path.dirname(db_path)
            if directory:
                os.makedirs(directory, exist_ok=True)

            connection = await aiosqlite.connect(db_path)
            connection.row_factory = aiosqlite.Row
            await connection.execute("PRAGMA journal_mode = WAL")
            await connection.executescript(CREDENTIAL_SCHEMA)
            await connection.commit()
        except (OSError, aiosqlite.Error) as e:
            if connection is not None:
                await connection.close()
            raise StorageUnavailableError(f"Cannot open credential database at {db_path}: {e}") from e

        logger.info(f"Credential database connected at: {db_path}")
        return cls(connection, StorageMode.DURABLE, db_path)

    @classmethod
    async def open_ephemeral(cls, reason: Optional[str] = None) -> "CredentialStore":
        """Open an in-memory database that disappears with the process"""
        connection = await aiosqlite.connect(MEMORY_DATABASE)
        connection.row_factory = aiosqlite.Row
        await connection.executescript(CREDENTIAL_SCHEMA)
        await connection.commit()
        return cls(connection, StorageMode.EPHEMERAL, MEMORY_DATABASE, fallback_reason=reason)

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        """Get user by email (exact match)"""
        cursor = await self._connection.execute(
            "SELECT * FROM user WHERE email = ?", (email,)
        )
        row = await cursor.fetchone()
        return UserRecord.from_dict(dict(row)) if row else None

    async def find_by_id(self, user_id: int) -> Optional[UserRecord]:
        """Get user by ID"""
        cursor = await self._connection.execute(
            "SELECT * FROM user WHERE id = ?", (user_id,)
        )
        row = await cursor.fetchone()
        return UserRecord.from_dict(dict(row)) if row else None

    async def insert(self, name: str, email: str, password_hash: str) -> int:
        """Insert a new user and return its id; the UNIQUE constraint is the authority on duplicates"""
        async with self._write_lock:
            try:
                cursor = await self._connection.execute(
                    "INSERT INTO user (name, email, password_hash) VALUES (?, ?, ?)",
                    (name, email, password_hash)
                )
                await self._connection.commit()
            except aiosqlite.IntegrityError as e:
                await self._connection.rollback()
                if "UNIQUE" in str(e) and "email" in str(e):
                    raise DuplicateEmailError(email) from e
                raise
            return cursor.lastrowid

    async def count_users(self) -> int:
        cursor = await self._connection.execute("SELECT COUNT(*) FROM user")
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def close(self):
        """Close database connection"""
        await self._connection.close()
        logger.info("Credential database connection closed")


async def open_credential_store(db_path: Union[str, Path]) -> CredentialStore:
    """
    Open the credential store, degrading to an in-memory database when the
    durable location is unusable. Callers inspect `store.mode` to tell the two apart.
    """
    try:
        return await CredentialStore.open_durable(db_path)
    except StorageUnavailableError as e:
        logger.warning(
            f"{e}. Falling back to an in-memory credential store; "
            f"accounts created now will not survive a restart"
        )
        return await CredentialStore.open_ephemeral(reason=str(e))
