"""Process-local store, for tests and ephemeral sessions."""

import logging
from typing import Dict, Optional

from wisdom.core.interfaces import IPersistentStore

logger = logging.getLogger(__name__)


class InMemoryStore(IPersistentStore):
    """Keeps JSON documents in a dict. Nothing survives the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value

    async def remove(self, key: str) -> None:
        self.data.pop(key, None)
