"""
Abstract interface for streaming text-completion backends.
"""

from abc import ABC, abstractmethod
from typing import AsyncIterator, Dict, List

ChatMessage = Dict[str, str]


class LanguageModelClient(ABC):
    """A chat-completion service that streams its output as text deltas."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Identifier recorded with persisted results."""

    @abstractmethod
    def stream_completion(
            self,
            messages: List[ChatMessage],
            temperature: float,
            max_tokens: int
    ) -> AsyncIterator[str]:
        """
        Start one completion and yield its non-empty text deltas in order.

        Implementations are async generators. Any provider failure is raised
        from iteration as ExternalServiceError.
        """

    async def close(self) -> None:
        """Release network resources."""
