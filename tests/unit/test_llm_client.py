"""Tests for the narrative LLM client.

All tests are deterministic and do not make real network calls.
"""

from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from tripgen.config import ProviderConfig
from tripgen.llm.client import (
    OpenAINarrativeClient,
    UnavailableNarrativeClient,
    get_narrative_client,
)
from tripgen.orchestration.errors import ProviderError

REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def mock_openai(content: str | None = None, error: Exception | None = None) -> MagicMock:
    """AsyncOpenAI stand-in with a mocked chat.completions.create."""
    client = MagicMock()
    if error is not None:
        client.chat.completions.create = AsyncMock(side_effect=error)
    else:
        response = MagicMock()
        response.id = "chatcmpl-123"
        response.choices = [MagicMock(message=MagicMock(content=content))]
        client.chat.completions.create = AsyncMock(return_value=response)
    return client


async def generate(client: OpenAINarrativeClient) -> str:
    result = await client.generate_day_plans(
        system_prompt="system", user_prompt="plan rome", max_tokens=6000
    )
    return result.value


class TestOpenAINarrativeClient:
    """Test OpenAI-backed client."""

    @pytest.mark.asyncio
    async def test_returns_content(self) -> None:
        mock = mock_openai('{"dailyPlan": []}')
        client = OpenAINarrativeClient(api_key="test", model="gpt-4o-mini", client=mock)

        assert client.available
        assert await generate(client) == '{"dailyPlan": []}'

        kwargs = mock.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["max_tokens"] == 6000
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][0] == {"role": "system", "content": "system"}

    @pytest.mark.asyncio
    async def test_provenance(self) -> None:
        client = OpenAINarrativeClient(api_key="test", client=mock_openai("{}"))

        result = await client.generate_day_plans(system_prompt="s", user_prompt="u", max_tokens=10)

        assert result.provenance.source == "provider.openai"
        assert result.provenance.ref_id == "chatcmpl-123"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", [None, "", "   "])
    async def test_empty_content_raises(self, content: str | None) -> None:
        client = OpenAINarrativeClient(api_key="test", client=mock_openai(content))

        with pytest.raises(ProviderError) as exc_info:
            await generate(client)
        assert exc_info.value.reason == "empty"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("error", "reason"),
        [
            (openai.APITimeoutError(request=REQUEST), "timeout"),
            (openai.APIConnectionError(request=REQUEST), "network"),
            (
                openai.APIStatusError(
                    "rate limited", response=httpx.Response(429, request=REQUEST), body=None
                ),
                "http_429",
            ),
        ],
    )
    async def test_api_errors_mapped(self, error: Exception, reason: str) -> None:
        client = OpenAINarrativeClient(api_key="test", client=mock_openai(error=error))

        with pytest.raises(ProviderError) as exc_info:
            await generate(client)
        assert exc_info.value.reason == reason


class TestUnavailableNarrativeClient:
    @pytest.mark.asyncio
    async def test_raises_unavailable(self) -> None:
        client = UnavailableNarrativeClient()

        assert not client.available
        with pytest.raises(ProviderError) as exc_info:
            await generate(client)  # type: ignore[arg-type]
        assert exc_info.value.reason == "unavailable"


class TestGetNarrativeClient:
    def test_without_key(self) -> None:
        assert isinstance(get_narrative_client(ProviderConfig()), UnavailableNarrativeClient)

    def test_with_key(self) -> None:
        client = get_narrative_client(ProviderConfig(openai_api_key="sk-test"))
        assert isinstance(client, OpenAINarrativeClient)
        assert client.model == "gpt-4o-mini"
