"""
Google Gemini Chat Provider

Calls the Gemini ``generateContent`` REST endpoint. Gemini takes a single
prompt, so the conversation is flattened into a transcript after the
system prompt.

API Documentation:
    https://ai.google.dev/api/generate-content
"""

import logging
from typing import Optional

import httpx

from phuongnam.services.ai.base import AIProviderError, BaseAIProvider, ChatMessage, GenerationOptions

logger = logging.getLogger(__name__)

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

SPEAKERS = {"user": "Khách hàng", "assistant": "Trợ lý"}


def build_prompt(messages: list[ChatMessage], system_prompt: str) -> str:
    """System prompt, then ``Speaker: text`` lines, ending on the assistant's cue."""
    lines = [system_prompt, ""]
    for msg in messages:
        speaker = SPEAKERS.get(msg.role)
        if speaker:
            lines.append(f"{speaker}: {msg.content}")
    lines.append("")
    lines.append(f"{SPEAKERS['assistant']}: ")
    return "\n".join(lines)


class GeminiProvider(BaseAIProvider):
    """Production Gemini provider."""

    def __init__(self, api_key: str, model: str, client: Optional[httpx.AsyncClient] = None):
        self._api_key = api_key
        self._model = model
        self._client = client or httpx.AsyncClient()
        logger.info(f"GeminiProvider initialized (model={model})")

    @property
    def provider_name(self) -> str:
        return "gemini"

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
            "contents": [{"parts": [{"text": build_prompt(messages, system_prompt)}]}],
            "generationConfig": {
                "temperature": options.temperature,
                "maxOutputTokens": options.max_tokens,
            },
        }

        try:
            response = await self._client.post(
                GEMINI_API_URL.format(model=self._model),
                params={"key": self._api_key},
                json=body,
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise AIProviderError(f"Gemini request failed: {e}") from e

        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise AIProviderError("Gemini returned no candidates") from e

        logger.info(f"Gemini response generated ({self._model})")
        return text

    async def aclose(self) -> None:
        await self._client.aclose()
