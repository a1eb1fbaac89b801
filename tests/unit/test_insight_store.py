"""Unit tests for the insight store."""

import json
import pytest
from datetime import timedelta

from wisdom.core.config import MemoryConfig
from wisdom.memory.insight_store import INSIGHTS_KEY, InsightStore
from wisdom.memory.models import Insight, InsightCategory
from tests.conftest import FIXED_NOW
from tests.fixtures.mock_services import FailingStore


def make_insight(content, category=InsightCategory.EMOTIONS, age_days=0, insight_id=None):
    return Insight(
        id=insight_id or f"i-{abs(hash((content, category, age_days)))}",
        category=category,
        content=content,
        date=(FIXED_NOW - timedelta(days=age_days)).isoformat(),
        source_message_ids=["m1", "m2"],
        confidence=0.8,
    )


@pytest.mark.asyncio
class TestInsightStore:

    @pytest.fixture
    def insights(self, store, clock):
        return InsightStore(store, MemoryConfig(), clock=clock)

    async def test_empty_store(self, insights):
        assert await insights.get_all() == []

    async def test_save_and_read(self, insights):
        insight = make_insight("Feels anxious before presenting to senior leadership")
        assert await insights.save(insight) is True

        stored = await insights.get_all()
        assert [i.id for i in stored] == [insight.id]
        assert stored[0].source_message_ids == ["m1", "m2"]

    async def test_same_content_twice_is_stored_once(self, insights):
        content = "Feels anxious before presenting to senior leadership"
        await insights.save(make_insight(content, insight_id="first"))
        assert await insights.save(make_insight(content, insight_id="second")) is False

        assert [i.id for i in await insights.get_all()] == ["first"]

    async def test_near_duplicate_collapses(self, insights):
        await insights.save(make_insight(
            "Recurrent anxiety before work deadlines and project reviews", insight_id="a"
        ))
        # One extra token: 8 shared out of 9 total
        await insights.save(make_insight(
            "Recurrent anxiety before work deadlines and project reviews lately", insight_id="b"
        ))
        assert len(await insights.get_all()) == 1

    async def test_dedup_is_category_scoped(self, insights):
        content = "Holds high standards for work quality and reliability"
        await insights.save(make_insight(content, InsightCategory.VALUES_GOALS, insight_id="v"))
        await insights.save(make_insight(content, InsightCategory.STRENGTHS, insight_id="s"))

        assert {i.id for i in await insights.get_all()} == {"v", "s"}

    async def test_dissimilar_insights_are_kept(self, insights):
        await insights.save(make_insight("Worries about finances at the end of each month"))
        await insights.save(make_insight("Feels calmer after walking outside in the morning"))
        assert len(await insights.get_all()) == 2

    async def test_expired_insight_hidden_but_stored(self, insights, store):
        await insights.save(make_insight("Old pattern of avoiding phone calls with family", age_days=31))
        await insights.save(make_insight("Recent pattern of journaling before sleeping", age_days=2))

        visible = await insights.get_all()
        assert [i.content for i in visible] == ["Recent pattern of journaling before sleeping"]
        assert len(json.loads(store.data[INSIGHTS_KEY])) == 2

    async def test_prune_physically_removes_expired(self, insights, store):
        await insights.save(make_insight("Old pattern of avoiding phone calls with family", age_days=31))
        await insights.save(make_insight("Recent pattern of journaling before sleeping", age_days=2))

        assert await insights.prune() == 1

        raw = json.loads(store.data[INSIGHTS_KEY])
        assert [r["content"] for r in raw] == ["Recent pattern of journaling before sleeping"]

    async def test_expired_insight_does_not_block_new_one(self, insights):
        content = "Avoids conflict by agreeing to extra work"
        await insights.save(make_insight(content, age_days=40, insight_id="old"))
        assert await insights.save(make_insight(content, insight_id="new")) is True
        assert [i.id for i in await insights.get_all()] == ["new"]

    async def test_get_by_category(self, insights):
        await insights.save(make_insight("Tells self they are never good enough", InsightCategory.AUTOMATIC_THOUGHTS))
        await insights.save(make_insight("Feels anxious before presenting to leadership", InsightCategory.EMOTIONS))

        thoughts = await insights.get_by_category(InsightCategory.AUTOMATIC_THOUGHTS)
        assert [i.category for i in thoughts] == [InsightCategory.AUTOMATIC_THOUGHTS]
        assert len(await insights.get_by_category("emotions")) == 1

    async def test_stored_format_uses_camel_case(self, insights, store):
        await insights.save(make_insight("Feels anxious before presenting to leadership"))
        record = json.loads(store.data[INSIGHTS_KEY])[0]
        assert set(record) == {"id", "category", "content", "date", "sourceMessageIds", "confidence"}

    async def test_malformed_records_are_skipped(self, insights, store):
        good = make_insight("Feels anxious before presenting to leadership").to_dict()
        store.data[INSIGHTS_KEY] = json.dumps([{"id": "broken"}, good])
        assert len(await insights.get_all()) == 1

    async def test_read_failure_degrades_to_empty(self, memory_config, clock):
        insights = InsightStore(FailingStore(), memory_config, clock=clock)
        assert await insights.get_all() == []

    async def test_write_failure_raises(self, memory_config, clock):
        from wisdom.core.interfaces import StorageError

        insights = InsightStore(FailingStore(fail_reads=False), memory_config, clock=clock)
        with pytest.raises(StorageError):
            await insights.save(make_insight("Feels anxious before presenting to leadership"))

    async def test_corrupted_json_on_save_raises(self, insights, store):
        from wisdom.core.interfaces import StorageError

        store.data[INSIGHTS_KEY] = "{not json"
        with pytest.raises(StorageError):
            await insights.save(make_insight("Feels anxious before presenting to leadership"))
        assert store.data[INSIGHTS_KEY] == "{not json"

    @pytest.mark.parametrize("bad_date", ["yesterday", None, 20250301])
    async def test_unparseable_date_is_skipped(self, insights, store, bad_date):
        good = make_insight("Feels anxious before presenting to leadership", insight_id="good")
        broken = dict(good.to_dict(), id="broken", date=bad_date)
        store.data[INSIGHTS_KEY] = json.dumps([good.to_dict(), broken])

        assert [i.id for i in await insights.get_all()] == ["good"]
        assert [i.id for i in await insights.get_by_category(InsightCategory.EMOTIONS)] == ["good"]

    async def test_save_and_prune_survive_unparseable_date(self, insights, store):
        broken = dict(
            make_insight("Feels anxious before presenting to leadership").to_dict(),
            date="yesterday",
        )
        store.data[INSIGHTS_KEY] = json.dumps([broken])

        new = make_insight(
            "Reaches out to close friends when stress builds up",
            InsightCategory.STRENGTHS,
            insight_id="new",
        )
        assert await insights.save(new) is True
        assert [i.id for i in await insights.get_all()] == ["new"]

        await insights.prune()
        assert [r["id"] for r in json.loads(store.data[INSIGHTS_KEY])] == ["new"]
