"""Client for the hosted extraction function."""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp
from tenacity import (
    AsyncRetrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type
)

from wisdom.core.config import LLMConfig
from wisdom.core.interfaces import (
    ExtractionRequest,
    IAuthProvider,
    ILLMClient,
    TASK_CONSOLIDATE_SUMMARIES,
    TASK_EXTRACT_INSIGHTS,
    TASK_EXTRACT_PATTERNS,
    TASK_EXTRACT_VISION,
    TASK_GENERATE_SUMMARY,
)
from wisdom.core.results import Err, Ok, Result

logger = logging.getLogger(__name__)

# Response field carrying each task's payload
RESPONSE_FIELDS = {
    TASK_EXTRACT_PATTERNS: "patterns",
    TASK_EXTRACT_INSIGHTS: "insights",
    TASK_GENERATE_SUMMARY: "summary",
    TASK_CONSOLIDATE_SUMMARIES: "consolidated_summary",
    TASK_EXTRACT_VISION: "visionInsights",
}


class ExtractionServiceError(Exception):
    pass


class RemoteExtractionClient(ILLMClient):
    """POSTs extraction requests to the serverless function."""

    retry_wait = wait_exponential(multiplier=1, min=1, max=8)

    def __init__(self, config: LLMConfig, auth: Optional[IAuthProvider] = None):
        self.config = config
        self.url = config.function_url
        self.auth = auth
        self.timeout = aiohttp.ClientTimeout(total=config.timeout_seconds)

    async def _headers(self) -> Dict[str, str]:
        token = None
        if self.auth is not None:
            token = await self.auth.get_access_token()
        token = token or self.config.api_key

        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _post_once(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        headers = await self._headers()
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(self.url, json=payload, headers=headers) as resp:
                    if resp.status >= 500:
                        error_text = await resp.text()
                        raise ExtractionServiceError(
                            f"Extraction function returned {resp.status}: {error_text}"
                        )
                    data = await resp.json(content_type=None)
                    return data if isinstance(data, dict) else {}

        except aiohttp.ClientError as e:
            logger.error(f"Extraction function connection error: {e}")
            raise ExtractionServiceError(f"Failed to reach extraction function: {e}")
        except asyncio.TimeoutError:
            logger.error("Extraction function request timed out")
            raise ExtractionServiceError("Extraction function request timed out")

    async def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(ExtractionServiceError),
            stop=stop_after_attempt(self.config.retry_attempts),
            wait=self.retry_wait,
            reraise=True
        ):
            with attempt:
                return await self._post_once(payload)

    async def run(self, request: ExtractionRequest) -> Result:
        try:
            data = await self._post(request.to_payload())
        except ExtractionServiceError as e:
            return Err(str(e))

        if not data.get("success"):
            return Err(data.get("error") or f"{request.task} was not successful")

        field = RESPONSE_FIELDS[request.task]
        value = data.get(field)
        if request.task in (TASK_EXTRACT_INSIGHTS, TASK_EXTRACT_PATTERNS):
            valid = isinstance(value, list)
        elif request.task == TASK_EXTRACT_VISION:
            valid = isinstance(value, dict)
        else:
            valid = isinstance(value, str) and bool(value.strip())
        if not valid:
            return Err(f"{request.task} response is missing '{field}'")

        return Ok(value)
