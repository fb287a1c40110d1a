import asyncio
import logging

import bcrypt

from .auth_exceptions import MalformedHashError

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """
    One-way password hashing with bcrypt.

    Every call to `hash` draws a fresh salt. The returned string carries the
    algorithm version, work factor and salt ("$2b$10$<salt><digest>"), so
    verification needs nothing but the string itself.

    Hashing is slow on purpose; the async methods run it in the default thread
    pool so one login does not stall the event loop.
    """

    def __init__(self, rounds: int = 10):
        self.rounds = rounds

    @staticmethod
    def _encode(plaintext: str) -> bytes:
        return plaintext.encode('utf-8')[:BCRYPT_MAX_PASSWORD_BYTES]

    def hash_sync(self, plaintext: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(self._encode(plaintext), salt)
        return hashed.decode('utf-8')

    def _check(self, plaintext: str, hash_string: str) -> bool:
        if not hash_string:
            raise MalformedHashError("Empty password hash")
        try:
            hashed = hash_string.encode('ascii')
        except UnicodeEncodeError as e:
            raise MalformedHashError("Password hash is not ASCII") from e
        try:
            return bcrypt.checkpw(self._encode(plaintext), hashed)
        except ValueError as e:
            raise MalformedHashError(str(e)) from e

    def verify_sync(self, plaintext: str, hash_string: str) -> bool:
        """Verify password against hash; malformed hashes fail closed"""
        try:
            return self._check(plaintext, hash_string)
        except MalformedHashError as e:
            logger.warning(f"Rejecting malformed password hash: {e}")
            return False

    async def hash(self, plaintext: str) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.hash_sync, plaintext)

    async def verify(self, plaintext: str, hash_string: str) -> bool:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.verify_sync, plaintext, hash_string)
