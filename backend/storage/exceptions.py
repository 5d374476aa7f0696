"""
Storage exception hierarchy.

All storage failures derive from StorageError. KeyNotFoundError is not a
fault: callers branch on it (e.g. fetch from origin instead).
"""


class StorageError(Exception):
    """Base exception for backing store and cache failures."""


class KeyNotFoundError(StorageError, LookupError):
    """Raised when a key is absent from the store."""

    def __init__(self, key: str):
        super().__init__(f"key not found: {key}")
        self.key = key


class EvictionError(StorageError):
    """
    Raised when deleting an evicted entry from the store fails.

    The operation that triggered the eviction has already committed its own
    write or read; the store may still hold the evicted key.
    """

    def __init__(self, cause: BaseException, key: str = ""):
        super().__init__(f"failed to delete from storage: {cause}")
        self.key = key
        self.cause = cause
