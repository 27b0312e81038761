"""
JSON File Storage Implementation

One JSON file per key inside a data directory. Each write goes to a
temporary file that then replaces the real one, so a crash never leaves
a half-written key behind. Keys are still written one after another, so
a crash between two keys can leave the state partially updated; for a
single-user local ledger that is accepted.
"""

import asyncio
import json
import os
import re
from pathlib import Path
from typing import Any, Optional

import structlog

from budget_recus.services.storage.interface import (
    CorruptValueError,
    KeyValueStore,
    StorageError,
)

_KEY_RE = re.compile(r"^[A-Za-z0-9_-]+$")


class JsonFileKeyValueStore(KeyValueStore):
    """File-per-key store under a single directory."""

    def __init__(self, data_dir: Path):
        self._dir = Path(data_dir)
        self._logger = structlog.get_logger(__name__)

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._dir / f"{key}.json"

    def _read(self, key: str) -> Optional[Any]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as fh:
                return json.load(fh)
        except json.JSONDecodeError as e:
            raise CorruptValueError(key, str(e))
        except OSError as e:
            raise StorageError(f"Failed to read {key!r}: {e}")

    def _write(self, key: str, value: Any) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8") as fh:
                json.dump(value, fh, ensure_ascii=False, indent=2)
            os.replace(tmp, path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write {key!r}: {e}")

    async def get(self, key: str) -> Optional[Any]:
        return await asyncio.to_thread(self._read, key)

    async def set(self, key: str, value: Any) -> None:
        await asyncio.to_thread(self._write, key, value)
        self._logger.debug("storage_write", key=key, path=str(self._path(key)))
