"""
WisdomWise Memory - long-term memory for a wellness chat companion.

Turns therapy-style chat sessions into durable, categorised insights and
session summaries, and renders them as context for future conversations.

Key Features:
    - Extraction gating: only substantive conversations reach the model
    - Deduplicated, self-expiring insights in six fixed categories
    - Session summaries folded into consolidated themes over time
    - Graceful degradation: storage or model failures never break chat

Usage:
    from wisdom import load_config, MemoryService, create_store, create_llm_client

    config = load_config()
    memory = await MemoryService.create(
        create_store(config.storage), create_llm_client(config), config.memory
    )
"""

__version__ = "1.0.0"
__license__ = "MIT"

from wisdom.core import SystemConfig, load_config, validate_config, ChatMessage
from wisdom.memory import MemoryService
from wisdom.storage import create_store
from wisdom.inference import create_llm_client
from wisdom.utils import setup_logging

__all__ = [
    "__version__",
    "__license__",

    "SystemConfig",
    "load_config",
    "validate_config",
    "ChatMessage",
    "MemoryService",
    "create_store",
    "create_llm_client",
    "setup_logging",
]