"""
OpenAI chat-completions backend.
"""

from typing import AsyncIterator, List, Optional

import openai
from openai import AsyncOpenAI
import structlog

from reply_stream.exceptions import ExternalServiceError
from .base_client import ChatMessage, LanguageModelClient

logger = structlog.get_logger(__name__)


class OpenAIStreamingClient(LanguageModelClient):
    """Streams chat completions from the OpenAI API"""

    SERVICE_NAME = "openai"

    def __init__(
            self,
            model: str,
            api_key: Optional[str] = None,
            organization: Optional[str] = None,
            client: Optional[AsyncOpenAI] = None
    ):
        self._model = model
        self._client = client or AsyncOpenAI(api_key=api_key, organization=organization)

    @property
    def model_name(self) -> str:
        return self._model

    async def stream_completion(
            self,
            messages: List[ChatMessage],
            temperature: float,
            max_tokens: int
    ) -> AsyncIterator[str]:
        try:
            stream = await self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                stream=True,
            )
            async for chunk in stream:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content
                if delta:
                    yield delta
        except openai.RateLimitError as e:
            raise ExternalServiceError(
                "OpenAI quota exceeded", service_name=self.SERVICE_NAME, caused_by=e
            )
        except openai.AuthenticationError as e:
            raise ExternalServiceError(
                "Invalid OpenAI API key", service_name=self.SERVICE_NAME, caused_by=e
            )
        except openai.OpenAIError as e:
            raise ExternalServiceError(
                f"OpenAI completion failed: {e}", service_name=self.SERVICE_NAME, caused_by=e
            )

    async def close(self) -> None:
        await self._client.close()
