"""Generative text client for day-by-day itinerary narratives.

Security: API key comes from ProviderConfig (environment), never hardcoded.
Without a key the unavailable client is used and the narrative stage goes
straight to its template fallback.
"""

import logging
from typing import Protocol

import openai
from openai import AsyncOpenAI

from tripgen.adapters.provenance import provenance_for_http
from tripgen.adapters.runner import ProviderOk
from tripgen.config import ProviderConfig
from tripgen.orchestration.errors import ProviderError

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"


class NarrativeClient(Protocol):
    """Protocol for generative narrative clients."""

    @property
    def available(self) -> bool:
        """Whether a live provider backs this client."""
        ...

    async def generate_day_plans(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int,
    ) -> ProviderOk[str]:
        """Request a JSON object holding the day-by-day plan.

        Args:
            system_prompt: Role and output-format instructions
            user_prompt: Trip-specific planning prompt
            max_tokens: Completion token budget

        Returns:
            ProviderOk wrapping the raw JSON text

        Raises:
            ProviderError: On provider failure or empty output
        """
        ...


class UnavailableNarrativeClient:
    """Client used when no generative provider is configured."""

    @property
    def available(self) -> bool:
        return False

    async def generate_day_plans(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int,
    ) -> ProviderOk[str]:
        raise ProviderError("unavailable", "no generative provider configured")


class OpenAINarrativeClient:
    """OpenAI-backed narrative client."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        client: AsyncOpenAI | None = None,
    ):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (read from environment)
            model: Model name to use (default: gpt-4o-mini for cost efficiency)
            client: Optional preconfigured AsyncOpenAI (for testing with mocks)
        """
        self.client = client or AsyncOpenAI(api_key=api_key)
        self.model = model

    @property
    def available(self) -> bool:
        return True

    async def generate_day_plans(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int,
    ) -> ProviderOk[str]:
        """Generate the day plan JSON using the chat completions API."""
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=0.7,
                max_tokens=max_tokens,
                response_format={"type": "json_object"},
            )
        except openai.APITimeoutError as e:
            logger.error(f"OpenAI API call timed out: {e}")
            raise ProviderError("timeout", str(e)) from e
        except openai.APIStatusError as e:
            logger.error(f"OpenAI API call failed: {e}")
            raise ProviderError(f"http_{e.status_code}", str(e)) from e
        except openai.APIConnectionError as e:
            logger.error(f"OpenAI API connection failed: {e}")
            raise ProviderError("network", str(e)) from e

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            logger.warning("OpenAI returned empty response")
            raise ProviderError("empty", "generative provider returned no content")

        return ProviderOk(
            value=content,
            provenance=provenance_for_http(
                "provider.openai", CHAT_COMPLETIONS_URL, ref_id=getattr(response, "id", None)
            ),
        )


def get_narrative_client(config: ProviderConfig) -> NarrativeClient:
    """Factory function to get the narrative client for a provider config.

    Returns:
        OpenAINarrativeClient if an API key is configured, UnavailableNarrativeClient otherwise
    """
    if config.live_narrative:
        logger.info("Using OpenAI client for itinerary narrative")
        return OpenAINarrativeClient(
            api_key=config.openai_api_key or "",
            model=config.openai_model,
        )

    logger.warning("No OpenAI API key configured, narrative will use template itinerary")
    return UnavailableNarrativeClient()
