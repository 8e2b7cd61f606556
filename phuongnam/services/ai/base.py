"""
AI Chat Provider Abstract Base Class

Defines the interface every chat provider (Gemini, Groq, mock) implements.
Providers only talk to their API; history trimming, provider choice,
timeouts and the static fallback live in ChatService.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


class AIProviderError(Exception):
    """A provider call failed or returned an unusable response."""


@dataclass
class ChatMessage:
    """One turn of a conversation."""
    role: str  # user | assistant | system
    content: str


@dataclass
class ChatResult:
    """Reply produced for a chat request."""
    success: bool
    message: str
    provider: str
    model: str
    error: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.provider == "fallback"


@dataclass
class GenerationOptions:
    temperature: float = 0.7
    max_tokens: int = 1000


class BaseAIProvider(ABC):
    """Abstract base class for chat providers."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @property
    @abstractmethod
    def model(self) -> str:
        """Return the model identifier."""
        pass

    @abstractmethod
    async def generate(
        self,
        messages: list[ChatMessage],
        system_prompt: str,
        options: GenerationOptions,
    ) -> str:
        """
        Produce the assistant's next reply.

        Raises:
            AIProviderError: On any transport, HTTP or response-shape failure
        """
        pass

    async def aclose(self) -> None:
        """Release network resources."""
        return None
