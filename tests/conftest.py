"""Pytest configuration and fixtures."""

import pytest
from datetime import datetime, timezone

from wisdom.core.config import MemoryConfig, SystemConfig
from wisdom.core.interfaces import ChatMessage
from wisdom.storage.memory_store import InMemoryStore

FIXED_NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_messages(user_texts, reply="Thank you for sharing that with me."):
    """User messages interleaved with system replies, ids m0, m1, ..."""
    messages = []
    for text in user_texts:
        messages.append(ChatMessage(id=f"m{len(messages)}", type="user", text=text))
        messages.append(ChatMessage(id=f"m{len(messages)}", type="system", text=reply))
    return messages


MEANINGFUL_TEXTS = [
    "I keep worrying that my manager thinks I'm failing",
    "Deadlines make my chest feel tight every single week",
    "I stayed up until three finishing the quarterly report",
    "My partner says I never switch off from work anymore",
    "I think I need to stop assuming the worst outcome",
]


@pytest.fixture
def memory_config():
    return MemoryConfig()


@pytest.fixture
def test_config(tmp_path):
    config = SystemConfig()
    config.debug_mode = True
    config.log_level = "DEBUG"
    config.log_dir = str(tmp_path / "logs")
    config.storage.backend = "memory"
    config.llm.function_url = "http://localhost:8787/"
    return config


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def meaningful_messages():
    return make_messages(MEANINGFUL_TEXTS)


@pytest.fixture
def sample_messages():
    return [
        ChatMessage(id="a", type="user", text="Hello"),
        ChatMessage(id="b", type="system", text="Hi there! How are you feeling today?"),
        ChatMessage(id="c", type="user", text="Okay I guess"),
    ]
