"""Renders selected memories as plain text for the chat prompt."""

import logging
from collections import defaultdict
from typing import Dict, List

from wisdom.memory.models import InsightCategory, MemoryContext

logger = logging.getLogger(__name__)

MEMORY_PREAMBLE = (
    "The following are long-term insights about the user. They represent "
    "important recurring patterns, values, and context, not transient states. "
    "Use them to better understand the user, recall past experiences, and "
    "provide continuity. Do not repeat them back verbatim unless directly "
    "relevant. Integrate them naturally into your guidance and reflections."
)

EMPTY_CATEGORY = "(no patterns identified yet)"


class MemoryContextFormatter:
    """Formats a ``MemoryContext`` into the block inserted into prompts."""

    def format(self, context: MemoryContext) -> str:
        sections = [
            MEMORY_PREAMBLE,
            self._format_insights(context),
        ]

        if context.summaries:
            sections.append(self._format_sessions(context))

        if context.consolidated_summary:
            sections.append(
                "**Consolidated Themes:**\n"
                f"- {context.consolidated_summary.text}"
            )

        text = "\n\n".join(sections) + "\n"
        logger.debug(f"Formatted memory context ({len(text)} chars)")
        return text

    def _format_insights(self, context: MemoryContext) -> str:
        grouped: Dict[InsightCategory, List[str]] = defaultdict(list)
        for insight in context.insights:
            grouped[insight.category].append(insight.content)

        lines = ["**Long-term Insights:**"]
        # Fixed category order, one line each even when empty
        for category in InsightCategory:
            contents = grouped.get(category)
            body = "; ".join(contents) if contents else EMPTY_CATEGORY
            lines.append(f"- **{category.label}:** {body}")
        return "\n".join(lines)

    def _format_sessions(self, context: MemoryContext) -> str:
        lines = ["**Recent Sessions:**"]
        for index, summary in enumerate(context.summaries, start=1):
            lines.append(f"- Session {index}: {summary.text}")
        return "\n".join(lines)
