"""
Chat Service

Front door for the restaurant assistant. Picks a provider, trims the
conversation, enforces the hard timeout and, when anything goes wrong,
answers with the static menu instead of an error. A chat request
therefore always succeeds from the client's point of view.
"""

import asyncio
import logging
from typing import Any, Optional

from phuongnam.core.config import Settings
from phuongnam.services.ai.base import (
    AIProviderError,
    BaseAIProvider,
    ChatMessage,
    ChatResult,
    GenerationOptions,
)
from phuongnam.services.ai.content import (
    DESCRIPTION_PROMPT,
    FALLBACK_MENU,
    NO_INFO,
    RESTAURANT_CONTEXT,
)

logger = logging.getLogger(__name__)


def fallback_result(error: Optional[str] = None) -> ChatResult:
    return ChatResult(
        success=True,
        message=FALLBACK_MENU,
        provider="fallback",
        model="static",
        error=error,
    )


class ChatService:
    """
    Provider selection and failure policy for chat.

    Selection order: Groq when the caller asks for it (or Gemini is not
    configured), then Gemini, then the mock provider.
    """

    def __init__(self, settings: Settings, providers: dict[str, BaseAIProvider]):
        self.settings = settings
        self.providers = providers
        self.timeout = settings.ai_timeout_seconds
        self.max_history = settings.ai_max_history

    def choose_provider(self, use_groq: bool = False) -> Optional[BaseAIProvider]:
        if use_groq or "gemini" not in self.providers:
            if "groq" in self.providers:
                return self.providers["groq"]
        for name in ("gemini", "groq", "mock"):
            if name in self.providers:
                return self.providers[name]
        return None

    async def chat(
        self,
        messages: list[ChatMessage],
        use_groq: bool = False,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> ChatResult:
        """
        Generate the assistant's reply to a conversation.

        Only the last ``ai_max_history`` messages are forwarded. A timeout
        or provider error yields the static fallback with ``error`` set.
        """
        history = messages[-self.max_history:]
        provider = self.choose_provider(use_groq)
        if provider is None:
            logger.info("No AI provider configured, serving fallback menu")
            return fallback_result("AI service not configured")

        options = GenerationOptions(temperature=temperature, max_tokens=max_tokens)
        try:
            text = await asyncio.wait_for(
                provider.generate(history, RESTAURANT_CONTEXT, options),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"{provider.provider_name} timed out after {self.timeout}s, serving fallback menu")
            return fallback_result("AI service timed out")
        except AIProviderError as e:
            logger.warning(f"{provider.provider_name} failed: {e}; serving fallback menu")
            return fallback_result("AI service temporarily unavailable")

        return ChatResult(
            success=True,
            message=text,
            provider=provider.provider_name,
            model=provider.model,
        )

    async def generate_description(
        self,
        food_name: str,
        ingredients: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Optional[str]:
        """Marketing blurb for a dish; None when no provider produced one."""
        prompt = DESCRIPTION_PROMPT.format(
            food_name=food_name,
            ingredients=ingredients or NO_INFO,
            category=category or NO_INFO,
        )
        result = await self.chat([ChatMessage(role="user", content=prompt)], temperature=0.8)
        if result.is_fallback:
            return None
        return result.message.strip()

    def status(self) -> dict[str, Any]:
        services = {
            "gemini": {
                "available": "gemini" in self.providers,
                "model": self.settings.gemini_model,
                "configured": bool(self.settings.gemini_api_key),
            },
            "groq": {
                "available": "groq" in self.providers,
                "model": self.settings.groq_model,
                "configured": bool(self.settings.groq_api_key),
            },
        }
        if "mock" in self.providers:
            services["mock"] = {"available": True, "model": self.providers["mock"].model, "configured": True}

        primary = self.choose_provider()
        return {
            "services": services,
            "available": primary is not None,
            "primary": primary.provider_name if primary else "none",
        }

    async def aclose(self) -> None:
        for provider in self.providers.values():
            await provider.aclose()
