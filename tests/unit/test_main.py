"""Tests for the maintenance commands behind the CLI."""

import pytest

from main import run_command


@pytest.mark.asyncio
class TestRunCommand:

    async def test_stats_on_empty_store(self, test_config, capsys):
        assert await run_command(test_config, "stats") == 0

        out = capsys.readouterr().out
        assert "total_insights: 0" in out
        assert "session_summaries: 0" in out
        assert "total_message_count: 0" in out

    async def test_context_prints_prompt_block(self, test_config, capsys):
        assert await run_command(test_config, "context") == 0
        assert "**Long-term Insights:**" in capsys.readouterr().out

    async def test_prune_on_empty_store(self, test_config):
        assert await run_command(test_config, "prune") == 0

    async def test_clear_removes_stored_files(self, test_config, tmp_path):
        data_dir = tmp_path / "memory"
        data_dir.mkdir()
        (data_dir / "memory_insights.json").write_text("[]")
        (data_dir / "memory_summaries.json").write_text("[]")
        test_config.storage.backend = "file"
        test_config.storage.data_dir = str(data_dir)

        assert await run_command(test_config, "clear") == 0

        assert not (data_dir / "memory_insights.json").exists()
        assert not (data_dir / "memory_summaries.json").exists()
