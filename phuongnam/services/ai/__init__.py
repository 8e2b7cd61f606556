"""
AI Chat Service Factory

Builds the ChatService with whichever providers are configured:

    - GEMINI_API_KEY set  -> GeminiProvider
    - GROQ_API_KEY set    -> GroqProvider
    - neither, development -> MockAIProvider
    - neither, otherwise   -> no provider; every reply is the static menu

Usage:
    from phuongnam.services.ai import create_chat_service

    chat = create_chat_service(settings)
    result = await chat.chat([ChatMessage(role="user", content="Xin chào")])
"""

import logging

import httpx

from phuongnam.core.config import Settings
from phuongnam.services.ai.base import (
    AIProviderError,
    BaseAIProvider,
    ChatMessage,
    ChatResult,
    GenerationOptions,
)
from phuongnam.services.ai.gemini import GeminiProvider
from phuongnam.services.ai.groq import GroqProvider
from phuongnam.services.ai.mock import MockAIProvider
from phuongnam.services.ai.service import ChatService, fallback_result

logger = logging.getLogger(__name__)


def create_chat_service(settings: Settings) -> ChatService:
    """Build the chat service for the given settings."""
    providers: dict[str, BaseAIProvider] = {}

    if settings.gemini_api_key:
        providers["gemini"] = GeminiProvider(
            settings.gemini_api_key,
            settings.gemini_model,
            client=httpx.AsyncClient(timeout=settings.ai_timeout_seconds),
        )
    if settings.groq_api_key:
        providers["groq"] = GroqProvider(
            settings.groq_api_key,
            settings.groq_model,
            client=httpx.AsyncClient(timeout=settings.ai_timeout_seconds),
        )

    if not providers:
        if settings.is_development:
            logger.info("Chat Service: Using MockAIProvider (development mode)")
            providers["mock"] = MockAIProvider()
        else:
            logger.warning("Chat Service: no AI provider configured, replies will use the static menu")
    else:
        logger.info(f"Chat Service: providers {sorted(providers)}")

    return ChatService(settings, providers)


__all__ = [
    "create_chat_service",
    "fallback_result",
    "AIProviderError",
    "BaseAIProvider",
    "ChatMessage",
    "ChatResult",
    "ChatService",
    "GenerationOptions",
    "GeminiProvider",
    "GroqProvider",
    "MockAIProvider",
]
