"""
Variant Generator

Plans the N reply variants of one request. Each variant is a lazy stream of
text fragments backed by its own model call; nothing is sent to the model
until the stream is iterated. Metadata is derived from the text once the
stream is exhausted.
"""

import re
from typing import Any, AsyncIterator, Dict, List, Optional

from reply_stream.config.constants import (
    BASE_CONFIDENCE, MAX_CONFIDENCE, VARIANT_STYLES
)
from reply_stream.core.llm.base_client import ChatMessage, LanguageModelClient
from reply_stream.core.prompts import PromptBuilder
from reply_stream.models.events import VariantMetadata
from reply_stream.models.schemas import GenerationRequest
from reply_stream.services.base_service import BaseService

_GREETING_RE = re.compile(r"^(Hello|Hi|Dear)", re.IGNORECASE)
_SIGNOFF_RE = re.compile(r"(Best|Regards|Thanks|Sincerely)", re.IGNORECASE)


def extract_metadata(text: str, tone: str, length: str) -> VariantMetadata:
    """Score a finished variant on structure and length."""
    word_count = len(text.split())
    has_greeting = bool(_GREETING_RE.match(text.strip()))
    has_signoff = bool(_SIGNOFF_RE.search(text))

    confidence = BASE_CONFIDENCE
    if has_greeting:
        confidence += 0.1
    if has_signoff:
        confidence += 0.1
    if word_count > 20:
        confidence += 0.05
    if word_count > 50:
        confidence += 0.05

    reasoning = f"Generated {length} response with {tone} tone."
    if has_greeting and has_signoff:
        reasoning += " Includes proper greeting and sign-off."

    return VariantMetadata(
        tone=tone,
        length=length,
        confidence=round(min(confidence, MAX_CONFIDENCE), 2),
        reasoning=reasoning,
    )


class VariantStream:
    """One variant's model call. Iterate ``fragments()`` once, then read ``metadata()``."""

    def __init__(
            self,
            index: int,
            tone: str,
            length: str,
            temperature: float,
            messages: List[ChatMessage],
            client: LanguageModelClient,
            max_tokens: int
    ):
        self.index = index
        self.tone = tone
        self.length = length
        self.temperature = temperature
        self.messages = messages
        self.max_tokens = max_tokens
        self._client = client
        self._parts: List[str] = []

    @property
    def text(self) -> str:
        return "".join(self._parts)

    async def fragments(self) -> AsyncIterator[str]:
        async for delta in self._client.stream_completion(
                self.messages, self.temperature, self.max_tokens
        ):
            self._parts.append(delta)
            yield delta

    def metadata(self) -> VariantMetadata:
        return extract_metadata(self.text, self.tone, self.length)

    def __repr__(self) -> str:
        return f"VariantStream(index={self.index}, tone={self.tone!r}, length={self.length!r})"


class VariantGenerator(BaseService):
    """Turns a validated request into independent variant streams"""

    def __init__(
            self,
            client: LanguageModelClient,
            prompt_builder: Optional[PromptBuilder] = None,
            variant_count: int = 3,
            base_temperature: float = 0.7,
            temperature_step: float = 0.05,
            max_tokens: int = 500
    ):
        super().__init__()
        self.client = client
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.variant_count = variant_count
        self.base_temperature = base_temperature
        self.temperature_step = temperature_step
        self.max_tokens = max_tokens

    @property
    def model_name(self) -> str:
        return self.client.model_name

    def variant_count_for(self, request: GenerationRequest) -> int:
        """Refinement of fewer drafts than usual regenerates only that many."""
        if request.is_refinement:
            return max(1, min(self.variant_count, len(request.previous_responses)))
        return self.variant_count

    def plan(
            self,
            request: GenerationRequest,
            style_profile: Optional[Dict[str, Any]] = None
    ) -> List[VariantStream]:
        user_prompt = self.prompt_builder.build_user_prompt(request)
        count = self.variant_count_for(request)

        streams = []
        for index in range(count):
            tone, length = VARIANT_STYLES[index % len(VARIANT_STYLES)]
            streams.append(VariantStream(
                index=index,
                tone=tone,
                length=length,
                temperature=round(self.base_temperature + index * self.temperature_step, 4),
                messages=self.prompt_builder.build_messages(user_prompt, tone, length, style_profile),
                client=self.client,
                max_tokens=self.max_tokens,
            ))

        self.log_operation(
            "plan_variants",
            variant_count=count,
            refinement=request.is_refinement,
            styled=style_profile is not None
        )
        return streams
