"""
Custom exceptions for the session and credential services
"""


class AuthError(Exception):
    """Base exception for authentication and session storage"""
    pass


class DuplicateEmailError(AuthError):
    """Raised when the credential store already holds the email"""

    def __init__(self, email: str):
        super().__init__(f"Email already registered: {email}")
        self.email = email


class StorageUnavailableError(AuthError):
    """Raised when the durable credential database cannot be opened"""
    pass


class CorruptSessionError(AuthError):
    """Raised when the persisted session record cannot be parsed"""
    pass


class MalformedHashError(AuthError):
    """Raised when a stored password hash is not a valid bcrypt string"""
    pass
