"""Chat-completion transport used by the in-process extraction engine."""

from typing import Any, Dict, List
import logging
import aiohttp
import asyncio
from tenacity import (
    AsyncRetrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type
)

from wisdom.core.config import ChatModelConfig

logger = logging.getLogger(__name__)

PROVIDER_OLLAMA = "ollama"
PROVIDER_OPENAI = "openai"


class ChatConnectionError(Exception):
    pass


class ChatCompletionClient:
    """
    Minimal chat client for Ollama (``/api/chat``) or any
    OpenAI-compatible endpoint (``/chat/completions``, e.g. OpenRouter).
    """

    def __init__(self, config: ChatModelConfig):
        self.config = config
        self.provider = config.provider
        self.base_url = config.url.rstrip('/')
        self.model = config.model
        self.timeout = aiohttp.ClientTimeout(total=config.timeout_seconds)

    def _request(
        self,
        messages: List[Dict[str, str]],
        temperature: float,
        max_tokens: int
    ) -> tuple:
        if self.provider == PROVIDER_OLLAMA:
            return f"{self.base_url}/api/chat", {}, {
                "model": self.model,
                "messages": messages,
                "stream": False,
                "options": {"temperature": temperature, "num_predict": max_tokens}
            }

        headers = {}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return f"{self.base_url}/chat/completions", headers, {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "stream": False
        }

    def _extract_content(self, data: Dict[str, Any]) -> str:
        if self.provider == PROVIDER_OLLAMA:
            return data.get('message', {}).get('content', '') or ''
        choices = data.get('choices') or [{}]
        return choices[0].get('message', {}).get('content', '') or ''

    async def _post(
        self,
        messages: List[Dict[str, str]],
        temperature: float,
        max_tokens: int
    ) -> str:
        url, headers, payload = self._request(messages, temperature, max_tokens)

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(url, json=payload, headers=headers) as resp:
                    if resp.status != 200:
                        error_text = await resp.text()
                        raise ChatConnectionError(
                            f"{self.provider} returned {resp.status}: {error_text}"
                        )
                    return self._extract_content(await resp.json()).strip()

        except aiohttp.ClientError as e:
            logger.error(f"Chat backend connection error: {e}")
            raise ChatConnectionError(f"Failed to reach {self.provider}: {e}")
        except asyncio.TimeoutError:
            logger.error("Chat backend request timed out")
            raise ChatConnectionError(f"{self.provider} request timed out")

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = 1000
    ) -> str:
        """Send one system+user exchange and return the reply text.

        Returns an empty string when the model answers with nothing;
        transport failures raise ``ChatConnectionError`` once retries
        are exhausted.
        """
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt}
        ]

        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(ChatConnectionError),
            stop=stop_after_attempt(self.config.retry_attempts),
            wait=wait_exponential(multiplier=1, min=2, max=10),
            reraise=True
        ):
            with attempt:
                return await self._post(messages, self.config.temperature, max_tokens)
