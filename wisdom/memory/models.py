"""Memory records: insights, summaries, extraction metadata."""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class InsightCategory(str, Enum):
    """Fixed insight categories, in display order."""
    AUTOMATIC_THOUGHTS = "automatic_thoughts"
    EMOTIONS = "emotions"
    BEHAVIORS = "behaviors"
    VALUES_GOALS = "values_goals"
    STRENGTHS = "strengths"
    LIFE_CONTEXT = "life_context"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


CATEGORY_LABELS = {
    InsightCategory.AUTOMATIC_THOUGHTS: "Automatic Thoughts",
    InsightCategory.EMOTIONS: "Emotional Patterns",
    InsightCategory.BEHAVIORS: "Behavioral Patterns",
    InsightCategory.VALUES_GOALS: "Values & Goals",
    InsightCategory.STRENGTHS: "Strengths",
    InsightCategory.LIFE_CONTEXT: "Life Context",
}


class SummaryType(str, Enum):
    SESSION = "session"
    CONSOLIDATED = "consolidated"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, assuming UTC when naive."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def new_id(prefix: str = "") -> str:
    token = uuid.uuid4().hex
    return f"{prefix}_{token}" if prefix else token


@dataclass
class Insight:
    """A durable, categorised statement about a recurring pattern."""
    id: str
    category: InsightCategory
    content: str
    date: str
    source_message_ids: List[str] = field(default_factory=list)
    confidence: float = 0.7

    @property
    def created_at(self) -> datetime:
        return parse_timestamp(self.date)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category.value,
            "content": self.content,
            "date": self.date,
            "sourceMessageIds": list(self.source_message_ids),
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Insight":
        # Records with an unparseable date are rejected
        parse_timestamp(data["date"])
        return cls(
            id=str(data["id"]),
            category=InsightCategory(data["category"]),
            content=data["content"],
            date=data["date"],
            source_message_ids=list(data.get("sourceMessageIds") or []),
            confidence=float(data.get("confidence", 0.7)),
        )


@dataclass
class Summary:
    """Synopsis of one session, or a consolidation of several."""
    id: str
    text: str
    date: str
    type: SummaryType
    message_count: int
    session_ids: Optional[List[str]] = None

    @property
    def is_session(self) -> bool:
        return self.type == SummaryType.SESSION

    @property
    def is_consolidated(self) -> bool:
        return self.type == SummaryType.CONSOLIDATED

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "text": self.text,
            "date": self.date,
            "type": self.type.value,
            "messageCount": self.message_count,
        }
        if self.session_ids is not None:
            data["sessionIds"] = list(self.session_ids)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Summary":
        session_ids = data.get("sessionIds")
        return cls(
            id=str(data["id"]),
            text=data["text"],
            date=data["date"],
            type=SummaryType(data["type"]),
            message_count=int(data.get("messageCount", 0)),
            session_ids=list(session_ids) if session_ids is not None else None,
        )


@dataclass
class ExtractionMetadata:
    """Baseline for deciding when the next extraction is due."""
    last_extraction: str = ""
    message_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lastExtraction": self.last_extraction,
            "messageCount": self.message_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExtractionMetadata":
        return cls(
            last_extraction=data.get("lastExtraction") or "",
            message_count=int(data.get("messageCount") or 0),
        )


@dataclass
class MemoryContext:
    """Material selected for injection into the chat prompt."""
    insights: List[Insight] = field(default_factory=list)
    summaries: List[Summary] = field(default_factory=list)
    consolidated_summary: Optional[Summary] = None


@dataclass
class ExtractionResult:
    insights: List[Insight]
    should_extract: bool
    message_count: int


@dataclass
class SummaryResult:
    summary: Summary
    should_consolidate: bool


@dataclass
class MemoryStats:
    total_insights: int
    insights_by_category: Dict[str, int]
    session_summaries: int
    consolidated_summaries: int
    last_extraction: str
    total_message_count: int


def decode_records(raw: List[Dict[str, Any]], factory, kind: str) -> list:
    """Decode stored dicts, skipping records that no longer parse."""
    records = []
    for item in raw:
        try:
            records.append(factory(item))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed {kind} record: {e}")
    return records
