"""Session and consolidated summaries, kept most-recent-first."""

import json
import logging
from typing import Iterable, List

from wisdom.core.interfaces import IPersistentStore, StorageError
from wisdom.core.results import attempt
from wisdom.memory.models import Summary, SummaryType, decode_records

logger = logging.getLogger(__name__)

SUMMARIES_KEY = "memory_summaries"


class SummaryStore:
    """Persists ``Summary`` records in most-recent-first order."""

    def __init__(self, store: IPersistentStore):
        self.store = store

    async def _load(self) -> List[Summary]:
        raw = await self.store.get(SUMMARIES_KEY)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupted summary data: {e}")
        return decode_records(data, Summary.from_dict, "summary")

    async def _write(self, summaries: List[Summary]) -> None:
        await self.store.set(
            SUMMARIES_KEY,
            json.dumps([summary.to_dict() for summary in summaries])
        )

    async def get_all(self) -> List[Summary]:
        result = await attempt("Loading summaries", self._load)
        return result.unwrap_or([])

    async def get_session_summaries(self) -> List[Summary]:
        return [s for s in await self.get_all() if s.type == SummaryType.SESSION]

    async def get_consolidated_summaries(self) -> List[Summary]:
        return [s for s in await self.get_all() if s.type == SummaryType.CONSOLIDATED]

    async def save(self, summary: Summary) -> None:
        """Insert at the front of the collection."""
        summaries = await self._load()
        summaries.insert(0, summary)
        await self._write(summaries)
        logger.debug(f"Stored {summary.type.value} summary {summary.id}")

    async def replace_with_consolidated(
        self,
        consolidated: Summary,
        replaced_ids: Iterable[str]
    ) -> int:
        """
        Add a consolidated summary and drop the summaries it folds in.

        Both changes land in a single write, so a failure leaves the
        stored collection untouched.

        Returns:
            Number of summaries removed
        """
        replaced = set(replaced_ids)
        summaries = await self._load()
        remaining = [s for s in summaries if s.id not in replaced]
        await self._write([consolidated] + remaining)
        return len(summaries) - len(remaining)

    async def prune(self, keep: int) -> int:
        """
        Keep only the ``keep`` most recent summaries.

        Returns:
            Number of summaries removed
        """
        summaries = await self._load()
        if len(summaries) <= keep:
            return 0
        await self._write(summaries[:keep])
        removed = len(summaries) - keep
        logger.info(f"Pruned {removed} old summaries")
        return removed
