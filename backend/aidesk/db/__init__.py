from .credential_store import CredentialStore, StorageMode, open_credential_store

__all__ = [
    "CredentialStore",
    "StorageMode",
    "open_credential_store"
]
