"""Unit tests for the chat-completion transport."""

from wisdom.core.config import ChatModelConfig
from wisdom.inference.chat_client import ChatCompletionClient

MESSAGES = [{"role": "user", "content": "hi"}]


def test_ollama_request_shape():
    client = ChatCompletionClient(ChatModelConfig(url="http://localhost:11434/"))
    url, headers, payload = client._request(MESSAGES, 0.3, 200)

    assert url == "http://localhost:11434/api/chat"
    assert headers == {}
    assert payload["options"] == {"temperature": 0.3, "num_predict": 200}
    assert client._extract_content({"message": {"content": "hello"}}) == "hello"


def test_openai_request_shape():
    client = ChatCompletionClient(ChatModelConfig(
        provider="openai",
        url="https://openrouter.ai/api/v1",
        model="gpt-4o-mini",
        api_key="sk-test",
    ))
    url, headers, payload = client._request(MESSAGES, 0.3, 300)

    assert url == "https://openrouter.ai/api/v1/chat/completions"
    assert headers == {"Authorization": "Bearer sk-test"}
    assert payload["max_tokens"] == 300
    assert client._extract_content({"choices": [{"message": {"content": "hello"}}]}) == "hello"
    assert client._extract_content({"choices": []}) == ""
