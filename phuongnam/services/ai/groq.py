"""
Groq Chat Provider

Calls Groq's OpenAI-compatible chat completions endpoint with the system
prompt as the first message.
"""

import logging
from typing import Optional

import httpx

from phuongnam.services.ai.base import AIProviderError, BaseAIProvider, ChatMessage, GenerationOptions

logger = logging.getLogger(__name__)

GROQ_API_URL = "https://api.groq.com/openai/v1/chat/completions"


class GroqProvider(BaseAIProvider):
    """Production Groq provider."""

    def __init__(self, api_key: str, model: str, client: Optional[httpx.AsyncClient] = None):
        self._api_key = api_key
        self._model = model
        self._client = client or httpx.AsyncClient()
        logger.info(f"GroqProvider initialized (model={model})")

    @property
    def provider_name(self) -> str:
        return "groq"

    @property
    def model(self) -> str:
        return self._model

    async def generate(
        self,
        messages: list[ChatMessage],
        system_prompt: str,
        options: GenerationOptions,
    ) -> str:
        body = {
            "model": self._model,
            "messages": [{"role": "system", "content": system_prompt}]
            + [{"role": m.role, "content": m.content} for m in messages],
            "temperature": options.temperature,
            "max_tokens": options.max_tokens,
            "top_p": 1,
            "stream": False,
        }

        try:
            response = await self._client.post(
                GROQ_API_URL,
                headers={"Authorization": f"Bearer {self._api_key}"},
                json=body,
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise AIProviderError(f"Groq request failed: {e}") from e

        try:
            text = data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise AIProviderError("Groq returned no choices") from e

        logger.info(f"Groq response generated ({self._model})")
        return text

    async def aclose(self) -> None:
        await self._client.aclose()
