"""
Backing store interface.

Every operation takes an OperationContext as its first argument and fails
fast if the context is already cancelled or expired.
"""

from abc import ABC, abstractmethod
from typing import BinaryIO

from .context import OperationContext


class Storage(ABC):
    """Key -> bytes system of record used behind the LRU cache."""

    @abstractmethod
    def get(self, ctx: OperationContext, key: str) -> BinaryIO:
        """
        Open the value stored under key.

        Returns:
            A readable binary stream; the caller is responsible for closing it.

        Raises:
            KeyNotFoundError: if the key is absent.
        """
        ...

    @abstractmethod
    def set(self, ctx: OperationContext, key: str, data: bytes) -> None:
        """Store data under key, replacing any previous value."""
        ...

    @abstractmethod
    def delete(self, ctx: OperationContext, key: str) -> None:
        """Remove key. Deleting an absent key is not an error."""
        ...

    @abstractmethod
    def size(self) -> int:
        """Number of live entries in the store."""
        ...
