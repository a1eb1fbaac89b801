"""Memory orchestration: extraction, summaries, consolidation, context."""

import asyncio
import json
import logging
from collections import Counter
from datetime import datetime
from typing import Callable, Dict, List, Optional

from wisdom.core.config import MemoryConfig
from wisdom.core.interfaces import (
    ChatMessage,
    ExtractionRequest,
    ILLMClient,
    IPersistentStore,
    TASK_CONSOLIDATE_SUMMARIES,
    TASK_EXTRACT_INSIGHTS,
    TASK_GENERATE_SUMMARY,
)
from wisdom.core.results import Err, attempt
from wisdom.memory.context_formatter import MemoryContextFormatter
from wisdom.memory.insight_store import INSIGHTS_KEY, InsightStore
from wisdom.memory.models import (
    ExtractionMetadata,
    ExtractionResult,
    Insight,
    InsightCategory,
    MemoryContext,
    MemoryStats,
    Summary,
    SummaryResult,
    SummaryType,
    new_id,
    utc_now,
)
from wisdom.memory.scheduler import ExtractionScheduler, count_user_messages
from wisdom.memory.summary_store import SUMMARIES_KEY, SummaryStore
from wisdom.utils.validation import validate_raw_insight

logger = logging.getLogger(__name__)

METADATA_KEY = "memory_extraction_metadata"
TRANSCRIPT_TYPES = ("user", "system")
CATEGORY_VALUES = frozenset(category.value for category in InsightCategory)

EMPTY_SESSION_SUMMARY = "Brief conversation session"


def session_fallback_text(user_count: int) -> str:
    return (
        f"Session covered {user_count} user exchanges focusing on personal "
        f"reflection and therapeutic dialogue."
    )


class MemoryService:
    """
    Turns chat sessions into durable memory.

    The service is passive: the owning chat flow calls ``extract_insights``
    as messages accumulate, ``generate_session_summary`` when a session ends,
    and ``consolidate_summaries`` once enough summaries exist. Failures of
    storage or of the analysis step never escape these calls; they degrade
    to empty results, fallback text, or ``None``.
    """

    def __init__(
        self,
        store: IPersistentStore,
        llm_client: ILLMClient,
        config: Optional[MemoryConfig] = None,
        metadata: Optional[ExtractionMetadata] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.config = config or MemoryConfig()
        self.store = store
        self.llm_client = llm_client
        self.clock = clock

        self.insights = InsightStore(store, self.config, clock=clock)
        self.summaries = SummaryStore(store)
        self.scheduler = ExtractionScheduler(self.config)
        self.formatter = MemoryContextFormatter()

        self.metadata = metadata or ExtractionMetadata()

        # Serialises read-modify-write cycles within this instance
        self._lock = asyncio.Lock()

        logger.info("Memory service initialized")

    @classmethod
    async def create(
        cls,
        store: IPersistentStore,
        llm_client: ILLMClient,
        config: Optional[MemoryConfig] = None,
        **kwargs
    ) -> "MemoryService":
        """Build a service and load its persisted extraction baseline."""
        service = cls(store, llm_client, config, **kwargs)
        await service.load_metadata()
        return service

    # Extraction metadata

    async def _read_metadata(self) -> Optional[ExtractionMetadata]:
        raw = await self.store.get(METADATA_KEY)
        if not raw:
            return None
        return ExtractionMetadata.from_dict(json.loads(raw))

    async def load_metadata(self) -> ExtractionMetadata:
        result = await attempt("Loading extraction metadata", self._read_metadata)
        loaded = result.unwrap_or(None)
        if loaded is not None:
            self.metadata = loaded
        return self.metadata

    async def _save_metadata(self) -> None:
        await attempt(
            "Saving extraction metadata",
            self.store.set,
            METADATA_KEY,
            json.dumps(self.metadata.to_dict())
        )

    # Extraction path

    async def should_extract_insights(self, messages: List[ChatMessage]) -> bool:
        return self.scheduler.should_extract(messages, self.metadata)

    def _build_transcript(self, messages: List[ChatMessage], limit: int) -> str:
        relevant = [
            msg for msg in messages
            if msg.type in TRANSCRIPT_TYPES and msg.body
        ][-limit:]
        return "\n".join(f"{msg.type}: {msg.body}" for msg in relevant)

    def _to_insights(
        self,
        raw_insights: list,
        messages: List[ChatMessage]
    ) -> List[Insight]:
        now = self.clock().isoformat()
        source_ids = [msg.id for msg in messages[-self.config.source_message_window:]]

        insights = []
        for raw in raw_insights:
            valid = validate_raw_insight(
                raw,
                CATEGORY_VALUES,
                min_length=self.config.min_insight_length,
                max_length=self.config.max_insight_length,
                min_confidence=self.config.min_confidence,
                default_confidence=self.config.default_confidence,
            )
            if valid is None:
                continue
            insights.append(Insight(
                id=new_id("insight"),
                category=InsightCategory(valid["category"]),
                content=valid["content"],
                date=now,
                source_message_ids=list(source_ids),
                confidence=valid["confidence"],
            ))
        return insights

    async def extract_insights(self, messages: List[ChatMessage]) -> ExtractionResult:
        """Run insight extraction if the scheduler allows it."""
        user_count = count_user_messages(messages)
        skipped = ExtractionResult(insights=[], should_extract=False, message_count=user_count)

        async with self._lock:
            if not await self.should_extract_insights(messages):
                return skipped

            window = messages[-self.config.extraction_window:]
            transcript = self._build_transcript(messages, self.config.extraction_window)
            logger.info(
                f"Requesting insight extraction "
                f"({len(transcript.splitlines())} transcript lines)"
            )

            request = ExtractionRequest(
                task=TASK_EXTRACT_INSIGHTS,
                messages=[msg.to_llm_message() for msg in window],
                session_id=new_id("session"),
            )
            result = await attempt("Insight extraction", self.llm_client.run, request)
            if isinstance(result, Err) or not isinstance(result.data, list):
                logger.warning("Insight extraction produced no usable result")
                return skipped

            stored = []
            for insight in self._to_insights(result.data, messages):
                saved = await attempt("Saving insight", self.insights.save, insight)
                if saved.unwrap_or(False):
                    stored.append(insight)

            self.metadata = ExtractionMetadata(
                last_extraction=self.clock().isoformat(),
                message_count=user_count,
            )
            await self._save_metadata()

        logger.info(
            f"Extracted {len(stored)} new insights "
            f"({len(result.data)} returned by analysis)"
        )
        return ExtractionResult(insights=stored, should_extract=True, message_count=user_count)

    # Session summary path

    async def generate_session_summary(
        self,
        session_id: str,
        messages: List[ChatMessage]
    ) -> SummaryResult:
        """Summarise a finished session and report whether to consolidate."""
        transcript = self._build_transcript(messages, self.config.summary_window)
        now = self.clock().isoformat()

        if not transcript.strip():
            logger.info(f"Session {session_id} has no text, using placeholder summary")
            return SummaryResult(
                summary=Summary(
                    id=new_id(f"{session_id}_summary"),
                    text=EMPTY_SESSION_SUMMARY,
                    date=now,
                    type=SummaryType.SESSION,
                    message_count=len(messages),
                ),
                should_consolidate=False,
            )

        request = ExtractionRequest(
            task=TASK_GENERATE_SUMMARY,
            messages=[msg.to_llm_message() for msg in messages[-self.config.summary_window:]],
            session_id=session_id,
        )
        result = await attempt("Session summary", self.llm_client.run, request)
        text = result.unwrap_or(None)
        if isinstance(text, str) and text.strip():
            text = text.strip()
        else:
            logger.warning(f"Using fallback summary for session {session_id}")
            text = session_fallback_text(count_user_messages(messages))

        summary = Summary(
            id=new_id(f"{session_id}_summary"),
            text=text,
            date=now,
            type=SummaryType.SESSION,
            message_count=len(messages),
        )

        saved = await attempt("Saving session summary", self.summaries.save, summary)
        if isinstance(saved, Err):
            return SummaryResult(summary=summary, should_consolidate=False)

        session_count = len(await self.summaries.get_session_summaries())
        should_consolidate = session_count >= self.config.summary_consolidation_threshold
        logger.info(
            f"Stored summary for session {session_id} "
            f"({session_count} session summaries, consolidate={should_consolidate})"
        )
        return SummaryResult(summary=summary, should_consolidate=should_consolidate)

    # Consolidation path

    async def consolidate_summaries(self) -> Optional[Summary]:
        """Fold the oldest session summaries into one consolidated summary."""
        threshold = self.config.summary_consolidation_threshold

        async with self._lock:
            session_summaries = await self.summaries.get_session_summaries()
            if len(session_summaries) < threshold:
                return None

            # Stored most-recent-first, so the tail holds the oldest
            selected = session_summaries[-threshold:]

            request = ExtractionRequest(
                task=TASK_CONSOLIDATE_SUMMARIES,
                summaries=[summary.text for summary in selected],
            )
            result = await attempt("Summary consolidation", self.llm_client.run, request)
            text = result.unwrap_or(None)
            if not isinstance(text, str) or not text.strip():
                logger.warning("Consolidation produced no text, keeping session summaries")
                return None

            consolidated = Summary(
                id=new_id("consolidated"),
                text=text.strip(),
                date=self.clock().isoformat(),
                type=SummaryType.CONSOLIDATED,
                message_count=sum(summary.message_count for summary in selected),
                session_ids=[summary.id for summary in selected],
            )

            replaced = await attempt(
                "Saving consolidated summary",
                self.summaries.replace_with_consolidated,
                consolidated,
                consolidated.session_ids
            )
            if isinstance(replaced, Err):
                return None

        logger.info(f"Consolidated {replaced.data} session summaries into {consolidated.id}")
        return consolidated

    # Context assembly

    def _rank_score(self, insight: Insight, now_ts: float) -> float:
        recency = insight.created_at.timestamp() / now_ts if now_ts > 0 else 0.0
        return insight.confidence * 0.7 + recency * 0.3

    async def get_memory_context(self) -> MemoryContext:
        insights = await self.insights.get_all()
        summaries = await self.summaries.get_all()

        now_ts = self.clock().timestamp()
        ranked = sorted(
            insights,
            key=lambda insight: self._rank_score(insight, now_ts),
            reverse=True
        )

        recent = summaries[:self.config.max_context_summaries]
        consolidated = next((s for s in summaries if s.is_consolidated), None)

        return MemoryContext(
            insights=ranked[:self.config.max_context_insights],
            summaries=[s for s in recent if s.is_session],
            consolidated_summary=consolidated,
        )

    def format_memory_for_context(self, context: MemoryContext) -> str:
        return self.formatter.format(context)

    async def build_prompt_context(self) -> str:
        """Shortcut for the chat prompt builder."""
        return self.format_memory_for_context(await self.get_memory_context())

    # Maintenance

    async def prune_old_data(self) -> Dict[str, int]:
        """Compact storage: drop expired insights and surplus summaries."""
        insights = await attempt("Pruning insights", self.insights.prune)
        summaries = await attempt(
            "Pruning summaries",
            self.summaries.prune,
            self.config.max_stored_summaries
        )
        return {
            "insights_removed": insights.unwrap_or(0),
            "summaries_removed": summaries.unwrap_or(0),
        }

    async def clear_all_memories(self) -> None:
        """Remove every stored memory. Storage errors propagate."""
        await self.store.remove_many([INSIGHTS_KEY, SUMMARIES_KEY, METADATA_KEY])
        self.metadata = ExtractionMetadata()
        logger.warning("Cleared all memories")

    async def get_memory_stats(self) -> MemoryStats:
        insights = await self.insights.get_all()
        summaries = await self.summaries.get_all()

        by_category = Counter(insight.category.value for insight in insights)
        return MemoryStats(
            total_insights=len(insights),
            insights_by_category=dict(by_category),
            session_summaries=sum(1 for s in summaries if s.is_session),
            consolidated_summaries=sum(1 for s in summaries if s.is_consolidated),
            last_extraction=self.metadata.last_extraction,
            total_message_count=self.metadata.message_count,
        )
