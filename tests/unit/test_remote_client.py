"""Unit tests for the hosted extraction function client."""

import pytest
from tenacity import wait_none

from wisdom.core.config import LLMConfig
from wisdom.core.interfaces import (
    ExtractionRequest,
    TASK_EXTRACT_INSIGHTS,
    TASK_EXTRACT_PATTERNS,
    TASK_EXTRACT_VISION,
    TASK_GENERATE_SUMMARY,
)
from wisdom.core.results import Err, Ok
from wisdom.inference.remote_client import ExtractionServiceError, RemoteExtractionClient
from tests.fixtures.mock_services import StaticAuthProvider

MESSAGES = [{"role": "user", "content": "I can't stop thinking about work"}]


def make_client(response=None, error=None, auth=None):
    client = RemoteExtractionClient(
        LLMConfig(function_url="http://localhost:8787/", api_key="anon-key"),
        auth=auth,
    )
    client.payloads = []

    async def fake_post(payload):
        client.payloads.append(payload)
        if error:
            raise error
        return response

    client._post = fake_post
    return client


@pytest.mark.asyncio
class TestRemoteExtractionClient:

    async def test_insights_payload_and_result(self):
        insights = [{"category": "emotions", "content": "Work anxiety", "confidence": 0.8}]
        client = make_client({"success": True, "insights": insights, "processingTime": 12})

        result = await client.run(ExtractionRequest(
            task=TASK_EXTRACT_INSIGHTS, messages=MESSAGES, session_id="session-1"
        ))

        assert result == Ok(insights)
        assert client.payloads == [{
            "action": "extract_insights",
            "messages": MESSAGES,
            "sessionId": "session-1",
        }]

    async def test_empty_insight_list_is_ok(self):
        client = make_client({"success": True, "insights": []})
        result = await client.run(ExtractionRequest(task=TASK_EXTRACT_INSIGHTS, messages=MESSAGES))
        assert result == Ok([])

    async def test_unsuccessful_response(self):
        client = make_client({"success": False, "error": "Failed to extract insights"})
        result = await client.run(ExtractionRequest(task=TASK_GENERATE_SUMMARY, messages=MESSAGES))
        assert result == Err("Failed to extract insights")

    async def test_blank_summary_is_err(self):
        client = make_client({"success": True, "summary": "   "})
        result = await client.run(ExtractionRequest(task=TASK_GENERATE_SUMMARY, messages=MESSAGES))
        assert isinstance(result, Err)

    async def test_transport_failure_is_err(self):
        client = make_client(error=ExtractionServiceError("timed out"))
        result = await client.run(ExtractionRequest(task=TASK_GENERATE_SUMMARY, messages=MESSAGES))
        assert result == Err("timed out")

    async def test_patterns_and_vision_fields(self):
        patterns = [{"originalThought": "I always fail", "confidence": 0.7}]
        client = make_client({"success": True, "patterns": patterns})
        result = await client.run(ExtractionRequest(task=TASK_EXTRACT_PATTERNS, messages=MESSAGES))
        assert result == Ok(patterns)

        vision = {"coreQualities": ["calm"]}
        client = make_client({"success": True, "visionInsights": vision})
        result = await client.run(ExtractionRequest(task=TASK_EXTRACT_VISION, messages=MESSAGES))
        assert result == Ok(vision)

    async def test_no_vision_is_err(self):
        client = make_client({"success": False, "visionInsights": None, "processingTime": 3})
        result = await client.run(ExtractionRequest(task=TASK_EXTRACT_VISION, messages=MESSAGES))
        assert isinstance(result, Err)


@pytest.mark.asyncio
class TestRetries:

    @pytest.mark.parametrize("attempts", [1, 2, 4])
    async def test_configured_attempt_count(self, attempts):
        client = RemoteExtractionClient(LLMConfig(
            function_url="http://localhost:8787/", retry_attempts=attempts
        ))
        client.retry_wait = wait_none()
        calls = []

        async def failing_post(payload):
            calls.append(payload)
            raise ExtractionServiceError("Extraction function returned 503: unavailable")

        client._post_once = failing_post

        result = await client.run(ExtractionRequest(task=TASK_GENERATE_SUMMARY, messages=MESSAGES))

        assert isinstance(result, Err)
        assert len(calls) == attempts

    async def test_recovers_after_transient_failure(self):
        client = RemoteExtractionClient(LLMConfig(
            function_url="http://localhost:8787/", retry_attempts=3
        ))
        client.retry_wait = wait_none()
        calls = []

        async def flaky_post(payload):
            calls.append(payload)
            if len(calls) == 1:
                raise ExtractionServiceError("Extraction function request timed out")
            return {"success": True, "summary": "Talked about work."}

        client._post_once = flaky_post

        result = await client.run(ExtractionRequest(task=TASK_GENERATE_SUMMARY, messages=MESSAGES))

        assert result == Ok("Talked about work.")
        assert len(calls) == 2


@pytest.mark.asyncio
class TestHeaders:

    async def test_session_token_preferred(self):
        client = RemoteExtractionClient(
            LLMConfig(function_url="http://x", api_key="anon-key"),
            auth=StaticAuthProvider("user-token"),
        )
        headers = await client._headers()
        assert headers["Authorization"] == "Bearer user-token"

    async def test_falls_back_to_anon_key(self):
        client = RemoteExtractionClient(
            LLMConfig(function_url="http://x", api_key="anon-key"),
            auth=StaticAuthProvider(None),
        )
        assert (await client._headers())["Authorization"] == "Bearer anon-key"

    async def test_no_credentials(self):
        client = RemoteExtractionClient(LLMConfig(function_url="http://x"))
        assert "Authorization" not in await client._headers()


def test_unknown_task_rejected():
    with pytest.raises(ValueError):
        ExtractionRequest(task="summarize_everything")
