"""Cheap local gate deciding when insight extraction is worth running."""

import logging
import math
from typing import List

from wisdom.core.config import MemoryConfig
from wisdom.core.interfaces import ChatMessage
from wisdom.memory.models import ExtractionMetadata

logger = logging.getLogger(__name__)


def count_user_messages(messages: List[ChatMessage]) -> int:
    return sum(1 for msg in messages if msg.is_user)


class ExtractionScheduler:
    """
    Gates the analysis step on message volume and substance.

    Extraction runs only when enough new user messages arrived since the
    last extraction and most of them carry more than a few words, so that
    greetings and one-word replies never reach the language model.
    """

    def __init__(self, config: MemoryConfig):
        self.min_messages = config.min_message_threshold
        self.min_words = config.meaningful_min_words
        self.required_meaningful = math.ceil(
            config.min_message_threshold * config.meaningful_ratio
        )

    def new_message_count(
        self,
        messages: List[ChatMessage],
        metadata: ExtractionMetadata
    ) -> int:
        """User messages added since the metadata baseline."""
        return count_user_messages(messages) - metadata.message_count

    def is_meaningful(self, message: ChatMessage) -> bool:
        text = message.text.strip() if message.text else ""
        return len(text.split()) > self.min_words

    def should_extract(
        self,
        messages: List[ChatMessage],
        metadata: ExtractionMetadata
    ) -> bool:
        new_count = self.new_message_count(messages, metadata)
        if new_count < self.min_messages:
            logger.debug(
                f"Extraction skipped: {new_count} new user messages "
                f"(< {self.min_messages})"
            )
            return False

        meaningful = sum(
            1 for msg in messages
            if msg.is_user and self.is_meaningful(msg)
        )
        if meaningful < self.required_meaningful:
            logger.debug(
                f"Extraction skipped: {meaningful} meaningful messages "
                f"(< {self.required_meaningful})"
            )
            return False

        return True
