"""
Abstract Storage Interface

The ledger persists through a plain key-value store. Each key holds one
whole JSON-compatible value and is rewritten wholesale; there are no
partial updates and no transactions spanning several keys.

Keeping the interface this small lets us:
1. Use an in-memory store for testing
2. Keep a JSON file per key on disk for the real app
3. Keep business logic decoupled from the storage medium
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class KeyValueStore(ABC):
    """
    Abstract interface for the persistence collaborator.

    Values are JSON-compatible structures (dicts, lists, strings,
    numbers, None).
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """
        Read a key.

        Returns:
            The stored value, or None if the key was never written

        Raises:
            StorageError: If the stored value cannot be read
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """
        Write a key, replacing any previous value.

        Raises:
            StorageError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptValueError(StorageError):
    """A stored value exists but cannot be decoded."""

    def __init__(self, key: str, reason: str):
        self.key = key
        super().__init__(f"Stored value for {key!r} is unreadable: {reason}")
