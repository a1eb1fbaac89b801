"""Configuration models and loading."""

from dataclasses import dataclass, field, fields
from typing import List, Optional
from pathlib import Path
import logging
import yaml
import os
from dotenv import load_dotenv

from wisdom.utils.validation import validate_url

logger = logging.getLogger(__name__)

STORAGE_BACKENDS = ("memory", "file", "redis")
LLM_MODES = ("remote", "local")
CHAT_PROVIDERS = ("ollama", "openai")


@dataclass
class MemoryConfig:
    """Memory extraction and retention configuration."""
    # Extraction gate
    min_message_threshold: int = 5
    meaningful_ratio: float = 0.7
    meaningful_min_words: int = 3

    # Insights
    max_insight_age_days: int = 30
    dedup_threshold: float = 0.8
    default_confidence: float = 0.7
    min_confidence: float = 0.6
    min_insight_length: int = 20
    max_insight_length: int = 500

    # Summaries
    summary_consolidation_threshold: int = 10
    max_stored_summaries: int = 50

    # Transcript windows
    extraction_window: int = 20
    summary_window: int = 30
    source_message_window: int = 10

    # Context assembly
    max_context_insights: int = 20
    max_context_summaries: int = 3


@dataclass
class StorageConfig:
    """Persistent store configuration."""
    backend: str = "file"
    data_dir: str = "data/memory"
    redis_url: str = "redis://localhost:6379"
    key_prefix: str = ""


@dataclass
class LLMConfig:
    """Extraction client configuration."""
    mode: str = "remote"
    function_url: str = ""
    api_key: str = ""
    timeout_seconds: int = 60
    retry_attempts: int = 3


@dataclass
class ChatModelConfig:
    """Chat model used by the in-process extraction engine."""
    provider: str = "ollama"  # ollama | openai
    url: str = "http://localhost:11434"
    model: str = "mistral-nemo"
    api_key: str = ""
    timeout_seconds: int = 60
    temperature: float = 0.3
    retry_attempts: int = 3


@dataclass
class ServerConfig:
    """Extraction function HTTP server configuration."""
    host: str = "127.0.0.1"
    port: int = 8787


@dataclass
class SystemConfig:
    """Main system configuration."""
    debug_mode: bool = False
    log_level: str = "INFO"
    log_dir: str = "data/logs"

    memory: MemoryConfig = field(default_factory=MemoryConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    chat_model: ChatModelConfig = field(default_factory=ChatModelConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


def _apply_memory_overrides(config: MemoryConfig, overrides: dict) -> None:
    """Copy known keys from a YAML mapping onto the memory config."""
    known = {f.name for f in fields(MemoryConfig)}
    for key, value in overrides.items():
        if key not in known:
            logger.warning(f"Ignoring unknown memory setting: {key}")
            continue
        current = getattr(config, key)
        setattr(config, key, type(current)(value))


def load_config(memory_config_path: Optional[str] = None) -> SystemConfig:
    """Load configuration from environment and files."""
    load_dotenv()

    config = SystemConfig()

    config.debug_mode = os.getenv("DEBUG_MODE", "false").lower() == "true"
    config.log_level = os.getenv("LOG_LEVEL", "INFO")
    config.log_dir = os.getenv("WISDOM_LOG_DIR", config.log_dir)

    # Storage config
    config.storage.backend = os.getenv("WISDOM_STORAGE_BACKEND", config.storage.backend)
    config.storage.data_dir = os.getenv("WISDOM_DATA_DIR", config.storage.data_dir)
    config.storage.redis_url = os.getenv("REDIS_URL", config.storage.redis_url)
    config.storage.key_prefix = os.getenv("WISDOM_KEY_PREFIX", config.storage.key_prefix)

    # Extraction client config
    config.llm.mode = os.getenv("WISDOM_LLM_MODE", config.llm.mode)
    supabase_url = os.getenv("SUPABASE_URL", "")
    if supabase_url:
        config.llm.function_url = f"{supabase_url.rstrip('/')}/functions/v1/extract-insights"
    config.llm.function_url = os.getenv("WISDOM_FUNCTION_URL", config.llm.function_url)
    config.llm.api_key = os.getenv("SUPABASE_ANON_KEY", "")
    config.llm.timeout_seconds = int(
        os.getenv("WISDOM_LLM_TIMEOUT", str(config.llm.timeout_seconds))
    )

    # Chat model config (local mode)
    config.chat_model.provider = os.getenv("WISDOM_CHAT_PROVIDER", config.chat_model.provider)
    config.chat_model.url = os.getenv("WISDOM_CHAT_URL", config.chat_model.url)
    config.chat_model.model = os.getenv("WISDOM_CHAT_MODEL", config.chat_model.model)
    config.chat_model.api_key = os.getenv("WISDOM_CHAT_API_KEY", "")

    # Server config
    config.server.host = os.getenv("WISDOM_HOST", config.server.host)
    config.server.port = int(os.getenv("WISDOM_PORT", str(config.server.port)))

    # Memory thresholds from YAML if present
    memory_path = Path(memory_config_path or "config/memory.yaml")
    if memory_path.exists():
        with open(memory_path) as f:
            memory_data = yaml.safe_load(f) or {}
        if "memory" in memory_data:
            _apply_memory_overrides(config.memory, memory_data["memory"])

    return config


def validate_config(config: SystemConfig) -> List[str]:
    """Validate configuration and return errors."""
    errors = []
    memory = config.memory

    # Memory validation
    if memory.min_message_threshold < 1:
        errors.append("min_message_threshold must be at least 1")

    if not 0.0 < memory.meaningful_ratio <= 1.0:
        errors.append("meaningful_ratio must be between 0 (exclusive) and 1")

    for name in ("dedup_threshold", "default_confidence", "min_confidence"):
        value = getattr(memory, name)
        if value < 0 or value > 1:
            errors.append(f"{name} must be between 0 and 1")

    if memory.max_insight_age_days < 1:
        errors.append("max_insight_age_days must be at least 1")

    if memory.summary_consolidation_threshold < 2:
        errors.append("summary_consolidation_threshold must be at least 2")

    if memory.max_stored_summaries < memory.summary_consolidation_threshold:
        errors.append(
            f"max_stored_summaries ({memory.max_stored_summaries}) must be at least "
            f"summary_consolidation_threshold ({memory.summary_consolidation_threshold})"
        )

    if memory.min_insight_length >= memory.max_insight_length:
        errors.append("min_insight_length must be less than max_insight_length")

    # Storage validation
    if config.storage.backend not in STORAGE_BACKENDS:
        errors.append(
            f"Unknown storage backend '{config.storage.backend}' "
            f"(expected one of {', '.join(STORAGE_BACKENDS)})"
        )

    # Extraction client validation
    if config.llm.mode not in LLM_MODES:
        errors.append(f"Unknown LLM mode '{config.llm.mode}' (expected remote or local)")

    if config.llm.mode == "remote" and not config.llm.function_url:
        errors.append("SUPABASE_URL or WISDOM_FUNCTION_URL must be set for remote extraction")

    if config.llm.function_url and not validate_url(config.llm.function_url):
        errors.append(f"Invalid extraction function URL: {config.llm.function_url}")

    if config.llm.mode == "local" and not validate_url(config.chat_model.url):
        errors.append(f"Invalid chat model URL: {config.chat_model.url}")

    if config.chat_model.provider not in CHAT_PROVIDERS:
        errors.append(f"Unknown chat provider '{config.chat_model.provider}' (expected ollama or openai)")

    if config.chat_model.temperature < 0 or config.chat_model.temperature > 2:
        errors.append("Chat model temperature must be between 0 and 2")

    return errors
