"""
Memory Storage

Unbounded in-memory backing store. Thread-safe: reads share a
ReadWriteLock, writes take it exclusively.
"""

import io
from typing import BinaryIO, Dict

from .base import Storage
from .context import OperationContext
from .exceptions import KeyNotFoundError
from .rwlock import ReadWriteLock


class MemoryStorage(Storage):
    """
    Dict-backed storage.

    Values are kept as-is; get() returns a fresh BytesIO over the stored
    bytes so callers never share a stream position.
    """

    def __init__(self):
        self._data: Dict[str, bytes] = {}
        self._lock = ReadWriteLock()

    def get(self, ctx: OperationContext, key: str) -> BinaryIO:
        ctx.check()

        with self._lock.read_locked():
            data = self._data.get(key)
            if data is None:
                raise KeyNotFoundError(key)
            return io.BytesIO(data)

    def set(self, ctx: OperationContext, key: str, data: bytes) -> None:
        ctx.check()

        with self._lock.write_locked():
            self._data[key] = bytes(data or b"")

    def delete(self, ctx: OperationContext, key: str) -> None:
        ctx.check()

        with self._lock.write_locked():
            self._data.pop(key, None)

    def size(self) -> int:
        with self._lock.read_locked():
            return len(self._data)
