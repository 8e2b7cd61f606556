"""
Mock Chat Provider

Answers locally for development and tests. Replies are built from the
last user message; nothing leaves the process.
"""

import asyncio
import logging
import random

from phuongnam.services.ai.base import AIProviderError, BaseAIProvider, ChatMessage, GenerationOptions

logger = logging.getLogger(__name__)


class MockAIProvider(BaseAIProvider):
    """Mock chat provider with optional simulated latency and failures."""

    def __init__(self, failure_rate: float = 0.0, latency: float = 0.0):
        self.failure_rate = failure_rate
        self.latency = latency
        logger.info(f"MockAIProvider initialized (failure_rate={failure_rate:.0%})")

    @property
    def provider_name(self) -> str:
        return "mock"

    @property
    def model(self) -> str:
        return "mock-chat"

    def _should_fail(self) -> bool:
        return random.random() < self.failure_rate

    async def generate(
        self,
        messages: list[ChatMessage],
        system_prompt: str,
        options: GenerationOptions,
    ) -> str:
        if self.latency:
            await asyncio.sleep(self.latency)

        if self._should_fail():
            logger.warning("Mock chat failed (simulated)")
            raise AIProviderError("Simulated provider failure")

        question = next((m.content for m in reversed(messages) if m.role == "user"), "")
        return f"[mock] Cảm ơn bạn đã hỏi: \"{question[:200]}\". Mời bạn xem thực đơn của nhà hàng!"
