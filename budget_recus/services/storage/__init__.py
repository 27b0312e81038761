"""
Storage Services Package

A minimal key-value persistence interface with an in-memory and a
JSON-file implementation, plus the repository that maps ledger state
onto the persisted keys.
"""

from budget_recus.services.storage.interface import (
    CorruptValueError,
    KeyValueStore,
    StorageError,
)
from budget_recus.services.storage.json_file import JsonFileKeyValueStore
from budget_recus.services.storage.memory import InMemoryKeyValueStore
from budget_recus.services.storage.repository import (
    PERSISTED_KEYS,
    LedgerRepository,
    fill_missing_start_months,
)

__all__ = [
    # Interface
    "KeyValueStore",
    # Exceptions
    "CorruptValueError",
    "StorageError",
    # Implementations
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    # Repository
    "PERSISTED_KEYS",
    "LedgerRepository",
    "fill_missing_start_months",
]
