"""In-memory key-value store, used by tests and for throwaway sessions."""

import copy
from typing import Any, Optional

from budget_recus.services.storage.interface import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """
    Dict-backed store.

    Values are deep-copied on the way in and out so callers can never
    mutate what was "persisted".
    """

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: dict[str, Any] = copy.deepcopy(initial or {})
        self.write_log: list[str] = []

    async def get(self, key: str) -> Optional[Any]:
        return copy.deepcopy(self._data.get(key))

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)
        self.write_log.append(key)
