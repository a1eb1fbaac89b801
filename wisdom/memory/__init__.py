"""Long-term memory: insight extraction, session summaries, consolidation.

Lifecycle:
1. A chat session accumulates messages
2. ExtractionScheduler decides whether enough new content exists
3. MemoryService asks the analysis step for insights and stores them
   (deduplicated per category by SimilarityScorer)
4. At session end a summary is written; once enough pile up, the oldest
   are folded into one consolidated summary
5. get_memory_context + format_memory_for_context feed the chat prompt

Usage:
    from wisdom.memory import MemoryService

    memory = await MemoryService.create(store, llm_client, config.memory)
    await memory.extract_insights(messages)
    prompt_block = await memory.build_prompt_context()
"""

from wisdom.memory.memory_service import MemoryService
from wisdom.memory.insight_store import InsightStore
from wisdom.memory.summary_store import SummaryStore
from wisdom.memory.scheduler import ExtractionScheduler
from wisdom.memory.similarity import SimilarityScorer, similarity
from wisdom.memory.context_formatter import MemoryContextFormatter
from wisdom.memory.models import (
    Insight,
    InsightCategory,
    Summary,
    SummaryType,
    ExtractionMetadata,
    ExtractionResult,
    SummaryResult,
    MemoryContext,
    MemoryStats,
)

__all__ = [
    # Main Service
    "MemoryService",

    # Components
    "InsightStore",
    "SummaryStore",
    "ExtractionScheduler",
    "SimilarityScorer",
    "similarity",
    "MemoryContextFormatter",

    # Records
    "Insight",
    "InsightCategory",
    "Summary",
    "SummaryType",
    "ExtractionMetadata",
    "ExtractionResult",
    "SummaryResult",
    "MemoryContext",
    "MemoryStats",
]
