"""
Storage Module

Backing stores for the image cache:
- MemoryStorage: in-process dict, lost on restart
- FileStorage: one file per key under a base directory, survives restarts

Both implement the Storage interface and take an OperationContext as the
first argument of every operation.
"""

from .base import Storage
from .context import (
    ContextCancelledError,
    ContextError,
    DeadlineExceededError,
    OperationContext,
)
from .exceptions import EvictionError, KeyNotFoundError, StorageError
from .file_store import FileStorage, sanitize_key
from .memory_store import MemoryStorage

__all__ = [
    "Storage",
    "OperationContext",
    "ContextError",
    "ContextCancelledError",
    "DeadlineExceededError",
    "StorageError",
    "KeyNotFoundError",
    "EvictionError",
    "MemoryStorage",
    "FileStorage",
    "sanitize_key",
]
