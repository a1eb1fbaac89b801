"""Core components shared by the memory subsystem.

This module contains:
- Configuration loading and validation
- Collaborator interfaces (storage, analysis step, auth)
- Tagged Ok/Err results and the attempt-with-fallback helper

Usage:
    from wisdom.core import SystemConfig, load_config, ChatMessage
"""

from wisdom.core.config import (
    SystemConfig,
    MemoryConfig,
    StorageConfig,
    LLMConfig,
    ChatModelConfig,
    ServerConfig,
    load_config,
    validate_config,
)
from wisdom.core.interfaces import (
    ChatMessage,
    ExtractionRequest,
    IPersistentStore,
    ILLMClient,
    IAuthProvider,
    StorageError,
    TASK_EXTRACT_INSIGHTS,
    TASK_GENERATE_SUMMARY,
    TASK_CONSOLIDATE_SUMMARIES,
    TASK_EXTRACT_PATTERNS,
    TASK_EXTRACT_VISION,
)
from wisdom.core.results import Ok, Err, Result, attempt

__all__ = [
    # Configuration
    "SystemConfig",
    "MemoryConfig",
    "StorageConfig",
    "LLMConfig",
    "ChatModelConfig",
    "ServerConfig",
    "load_config",
    "validate_config",

    # Interfaces & Models
    "ChatMessage",
    "ExtractionRequest",
    "IPersistentStore",
    "ILLMClient",
    "IAuthProvider",
    "StorageError",
    "TASK_EXTRACT_INSIGHTS",
    "TASK_GENERATE_SUMMARY",
    "TASK_CONSOLIDATE_SUMMARIES",
    "TASK_EXTRACT_PATTERNS",
    "TASK_EXTRACT_VISION",

    # Results
    "Ok",
    "Err",
    "Result",
    "attempt",
]
