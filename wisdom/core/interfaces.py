"""Interface definitions for the memory subsystem's collaborators."""

from abc import ABC, abstractmethod
from typing import List, Dict, Optional, Any
from dataclasses import dataclass, field

TASK_EXTRACT_INSIGHTS = "extract_insights"
TASK_GENERATE_SUMMARY = "generate_summary"
TASK_CONSOLIDATE_SUMMARIES = "consolidate_summaries"
TASK_EXTRACT_PATTERNS = "extract_patterns"
TASK_EXTRACT_VISION = "extract_vision_insights"

EXTRACTION_TASKS = (
    TASK_EXTRACT_PATTERNS,
    TASK_EXTRACT_INSIGHTS,
    TASK_GENERATE_SUMMARY,
    TASK_CONSOLIDATE_SUMMARIES,
    TASK_EXTRACT_VISION,
)


@dataclass
class ChatMessage:
    """A single chat message as recorded by the session flow."""
    id: str
    type: str  # 'user', 'system', 'exercise'
    text: Optional[str] = None
    content: Optional[str] = None
    timestamp: Optional[str] = None

    @property
    def body(self) -> str:
        """Message text, falling back to content."""
        return self.text or self.content or ""

    @property
    def is_user(self) -> bool:
        return self.type == "user"

    def to_llm_message(self) -> Dict[str, str]:
        """Map to the role/content pair sent for analysis."""
        return {
            "role": "user" if self.is_user else "assistant",
            "content": self.body,
        }


@dataclass
class ExtractionRequest:
    """Logical request for the analysis step."""
    task: str
    messages: List[Dict[str, str]] = field(default_factory=list)
    summaries: List[str] = field(default_factory=list)
    session_id: Optional[str] = None

    def __post_init__(self):
        if self.task not in EXTRACTION_TASKS:
            raise ValueError(f"Unknown extraction task: {self.task}")

    def to_payload(self) -> Dict[str, Any]:
        """Wire body understood by the extraction function."""
        payload: Dict[str, Any] = {"action": self.task}
        if self.task == TASK_CONSOLIDATE_SUMMARIES:
            payload["summaries"] = list(self.summaries)
        else:
            payload["messages"] = list(self.messages)
        if self.session_id:
            payload["sessionId"] = self.session_id
        return payload


class StorageError(Exception):
    """Raised by stores when a read or write cannot complete."""
    pass


class IPersistentStore(ABC):
    """Durable key-value storage of JSON documents."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the stored value or None."""
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store a value, replacing any existing one."""
        pass

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Remove a key if present."""
        pass

    async def remove_many(self, keys: List[str]) -> None:
        """Remove several keys."""
        for key in keys:
            await self.remove(key)


class ILLMClient(ABC):
    """Analysis step interface: request in, tagged result out."""

    @abstractmethod
    async def run(self, request: ExtractionRequest):
        """Run an extraction task.

        Returns:
            ``Ok`` carrying the task payload, or ``Err`` with a reason
        """
        pass


class IAuthProvider(ABC):
    """Supplies credentials for the hosted extraction function."""

    @abstractmethod
    async def get_access_token(self) -> Optional[str]:
        """Return a bearer token, or None when signed out."""
        pass
