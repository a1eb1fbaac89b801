"""Long-term insight collection with dedup and read-time expiry."""

import json
import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from wisdom.core.config import MemoryConfig
from wisdom.core.interfaces import IPersistentStore, StorageError
from wisdom.core.results import attempt
from wisdom.memory.models import Insight, InsightCategory, decode_records, utc_now
from wisdom.memory.similarity import SimilarityScorer

logger = logging.getLogger(__name__)

INSIGHTS_KEY = "memory_insights"


class InsightStore:
    """
    Persists ``Insight`` records under a single storage key.

    Expired insights are hidden from every read but stay in storage until
    ``prune`` rewrites the collection. Reads degrade to an empty list when
    storage is unavailable; writes raise so the caller decides what to do.
    """

    def __init__(
        self,
        store: IPersistentStore,
        config: MemoryConfig,
        scorer: Optional[SimilarityScorer] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.store = store
        self.max_age = timedelta(days=config.max_insight_age_days)
        self.scorer = scorer or SimilarityScorer(config.dedup_threshold)
        self.clock = clock

    async def _load(self) -> List[Insight]:
        """Read every stored insight, expired ones included."""
        raw = await self.store.get(INSIGHTS_KEY)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupted insight data: {e}")
        return decode_records(data, Insight.from_dict, "insight")

    async def _write(self, insights: List[Insight]) -> None:
        await self.store.set(
            INSIGHTS_KEY,
            json.dumps([insight.to_dict() for insight in insights])
        )

    def _active(self, insights: List[Insight]) -> List[Insight]:
        cutoff = self.clock() - self.max_age
        return [insight for insight in insights if insight.created_at > cutoff]

    async def get_all(self) -> List[Insight]:
        """Non-expired insights in insertion order."""
        result = await attempt("Loading insights", self._load)
        return self._active(result.unwrap_or([]))

    async def get_by_category(self, category: InsightCategory) -> List[Insight]:
        category = InsightCategory(category)
        return [i for i in await self.get_all() if i.category == category]

    def find_duplicate(
        self,
        insight: Insight,
        existing: List[Insight]
    ) -> Optional[Insight]:
        """Return the first same-category insight that says the same thing."""
        for candidate in existing:
            if (candidate.category == insight.category
                    and self.scorer.is_duplicate(candidate.content, insight.content)):
                return candidate
        return None

    async def save(self, insight: Insight) -> bool:
        """
        Append an insight unless an active duplicate exists.

        Returns:
            True if stored, False if dropped as a duplicate
        """
        stored = await self._load()

        duplicate = self.find_duplicate(insight, self._active(stored))
        if duplicate:
            logger.debug(
                f"Dropping duplicate {insight.category.value} insight "
                f"(matches {duplicate.id})"
            )
            return False

        stored.append(insight)
        await self._write(stored)
        logger.debug(f"Stored {insight.category.value} insight {insight.id}")
        return True

    async def prune(self) -> int:
        """
        Physically remove expired insights.

        Returns:
            Number of insights removed
        """
        stored = await self._load()
        active = self._active(stored)
        await self._write(active)

        removed = len(stored) - len(active)
        if removed:
            logger.info(f"Pruned {removed} expired insights")
        return removed
