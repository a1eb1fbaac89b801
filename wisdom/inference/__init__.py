"""Analysis step clients.

This module provides the two ``ILLMClient`` implementations:
- RemoteExtractionClient: calls the hosted extraction function over HTTP
- ExtractionEngine: runs the same tasks in-process against a chat model

Key Features:
- Retry logic with exponential backoff
- Tagged Ok/Err results instead of success flags
- Prompt templates overridable from config/prompts.yaml
- Fallback summary text when the model is unavailable

Usage:
    from wisdom.inference import create_llm_client
    from wisdom.core.config import load_config

    config = load_config()
    client = create_llm_client(config)
    result = await client.run(request)
"""

from wisdom.inference.chat_client import ChatCompletionClient, ChatConnectionError
from wisdom.inference.extraction_engine import ExtractionEngine
from wisdom.inference.remote_client import RemoteExtractionClient, ExtractionServiceError

__all__ = [
    "ChatCompletionClient",
    "ChatConnectionError",
    "ExtractionEngine",
    "RemoteExtractionClient",
    "ExtractionServiceError",
    "create_llm_client",
]


def create_llm_client(config, auth=None):
    """Factory function selecting remote or local extraction.

    Args:
        config: SystemConfig
        auth: Optional IAuthProvider for the hosted function

    Returns:
        Configured ILLMClient
    """
    if config.llm.mode == "local":
        return ExtractionEngine(ChatCompletionClient(config.chat_model))
    return RemoteExtractionClient(config.llm, auth=auth)
