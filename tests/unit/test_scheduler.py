"""Unit tests for the extraction gate."""

import pytest

from wisdom.core.config import MemoryConfig
from wisdom.core.interfaces import ChatMessage
from wisdom.memory.models import ExtractionMetadata
from wisdom.memory.scheduler import ExtractionScheduler
from tests.conftest import MEANINGFUL_TEXTS, make_messages


class TestExtractionScheduler:

    @pytest.fixture
    def scheduler(self):
        return ExtractionScheduler(MemoryConfig())

    def test_required_meaningful_is_ceiling_of_ratio(self, scheduler):
        assert scheduler.required_meaningful == 4

    def test_below_threshold(self, scheduler):
        messages = make_messages(MEANINGFUL_TEXTS[:4])
        assert scheduler.should_extract(messages, ExtractionMetadata()) is False

    def test_enough_meaningful_messages(self, scheduler):
        messages = make_messages(MEANINGFUL_TEXTS)
        assert scheduler.should_extract(messages, ExtractionMetadata()) is True

    def test_short_messages_fail_ratio(self, scheduler):
        messages = make_messages(["ok", "yes", "not really", "fine thanks", "hmm"])
        assert scheduler.should_extract(messages, ExtractionMetadata()) is False

    def test_exactly_three_words_is_not_meaningful(self, scheduler):
        assert not scheduler.is_meaningful(ChatMessage(id="x", type="user", text="I feel sad"))
        assert scheduler.is_meaningful(ChatMessage(id="x", type="user", text="I feel sad today"))

    def test_baseline_subtracts_previous_count(self, scheduler):
        messages = make_messages(MEANINGFUL_TEXTS)
        metadata = ExtractionMetadata(last_extraction="2025-01-01T00:00:00+00:00", message_count=1)
        assert scheduler.new_message_count(messages, metadata) == 4
        assert scheduler.should_extract(messages, metadata) is False

    def test_system_messages_do_not_count(self, scheduler):
        messages = [
            ChatMessage(id=str(i), type="system", text="This is a long therapist reflection")
            for i in range(10)
        ]
        assert scheduler.new_message_count(messages, ExtractionMetadata()) == 0
        assert scheduler.should_extract(messages, ExtractionMetadata()) is False

    def test_custom_threshold(self):
        scheduler = ExtractionScheduler(MemoryConfig(min_message_threshold=2))
        messages = make_messages(MEANINGFUL_TEXTS[:2])
        assert scheduler.should_extract(messages, ExtractionMetadata()) is True
