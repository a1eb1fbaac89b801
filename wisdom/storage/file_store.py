"""JSON-file store: one document per key under a data directory."""

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from wisdom.core.interfaces import IPersistentStore, StorageError

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r'^[A-Za-z0-9_.\-]+$')


class JsonFileStore(IPersistentStore):
    """Stores each key as ``<data_dir>/<key>.json``.

    Writes go to a temporary file first and are moved into place, so a
    crash mid-write never leaves a truncated document behind.
    """

    def __init__(self, data_dir: str, key_prefix: str = ""):
        self.data_dir = Path(data_dir)
        self.key_prefix = key_prefix
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ValueError(f"Cannot use data directory {data_dir}: {e}")
        logger.info(f"File store initialized at {self.data_dir}")

    def _path(self, key: str) -> Path:
        name = f"{self.key_prefix}{key}"
        if not _SAFE_KEY.match(name):
            raise ValueError(f"Invalid storage key: {name!r}")
        return self.data_dir / f"{name}.json"

    async def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path, encoding='utf-8') as f:
                return f.read()
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}")

    async def set(self, key: str, value: str) -> None:
        path = self._path(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(value)
            os.replace(tmp_name, path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Failed to write {path}: {e}")

    async def remove(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to remove {path}: {e}")
