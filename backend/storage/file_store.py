"""
File Storage

Filesystem-backed store: one file per key under a base directory.

Features:
- Key sanitization (no path separators, no traversal)
- Write-access probing at construction
- Live entry count kept in memory, seeded from the directory listing
- ReadWriteLock over all operations (reads shared, writes exclusive)

Cache structure:
base_dir/
├── example.com_images_cat.jpg
└── ...
"""

import logging
import os
from pathlib import Path
from typing import BinaryIO, Union

from .base import Storage
from .context import OperationContext
from .exceptions import KeyNotFoundError, StorageError
from .rwlock import ReadWriteLock

logger = logging.getLogger(__name__)

PROBE_FILENAME = "test_write_access"


def sanitize_key(key: str) -> str:
    """
    Convert a cache key into a safe file name.

    - ':', '/' and '\\' become '_'
    - a '..' segment between separators collapses into '__'
    - any other '..' becomes '__'
    - leading underscores are stripped
    - an empty or "." result becomes "empty"

    Example:
        sanitize_key("host:8080/path/../file") -> "host_8080_path__file"
    """
    if not key:
        return "empty"
    for sep in (":", "/", "\\"):
        key = key.replace(sep, "_")
    key = key.replace("_.._", "__")
    key = key.replace("..", "__")
    key = key.lstrip("_")
    # "." would resolve to the base directory itself
    if key in ("", "."):
        return "empty"
    return key


def _probe_write_access(directory: Path) -> None:
    """Write and remove a probe file; raises OSError if not writable."""
    probe = directory / PROBE_FILENAME
    with open(probe, "wb") as f:
        f.write(b"test")
    probe.unlink()


class FileStorage(Storage):
    """
    Stores each value in ``base_dir / sanitize_key(key)``.

    Raises StorageError at construction when the base directory cannot be
    used: empty path, missing parent, or no write access to the parent or
    the base directory itself.
    """

    def __init__(self, base_dir: Union[str, Path]):
        if not str(base_dir):
            raise StorageError("base directory cannot be empty")

        self.base_dir = Path(base_dir)
        self._lock = ReadWriteLock()

        parent_dir = self.base_dir.parent
        if not parent_dir.exists():
            raise StorageError(f"parent directory does not exist: {parent_dir}")

        try:
            _probe_write_access(parent_dir)
        except OSError as e:
            raise StorageError(f"no write access to parent directory: {e}") from e

        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"failed to create base directory: {e}") from e

        try:
            _probe_write_access(self.base_dir)
        except OSError as e:
            raise StorageError(f"no write access to base directory: {e}") from e

        try:
            self._size = len(os.listdir(self.base_dir))
        except OSError as e:
            raise StorageError(f"failed to read base directory: {e}") from e

        logger.info(f"[FileStorage] Base directory: {self.base_dir} ({self._size} existing entries)")

    def _path_for(self, key: str) -> Path:
        return self.base_dir / sanitize_key(key)

    def get(self, ctx: OperationContext, key: str) -> BinaryIO:
        ctx.check()

        with self._lock.read_locked():
            path = self._path_for(key)
            try:
                return open(path, "rb")
            except FileNotFoundError:
                raise KeyNotFoundError(key)
            except OSError as e:
                raise StorageError(f"failed to open file: {e}") from e

    def set(self, ctx: OperationContext, key: str, data: bytes) -> None:
        ctx.check()

        with self._lock.write_locked():
            path = self._path_for(key)
            exists = path.exists()

            try:
                path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageError(f"failed to create directories: {e}") from e

            try:
                with open(path, "wb") as f:
                    f.write(data or b"")
            except OSError as e:
                raise StorageError(f"failed to write file: {e}") from e

            if not exists:
                self._size += 1

    def delete(self, ctx: OperationContext, key: str) -> None:
        ctx.check()

        with self._lock.write_locked():
            path = self._path_for(key)
            if not path.exists():
                return

            try:
                path.unlink()
            except FileNotFoundError:
                return
            except OSError as e:
                raise StorageError(f"failed to delete file: {e}") from e

            self._size -= 1

    def size(self) -> int:
        with self._lock.read_locked():
            return self._size
