"""
Domain records passed between repositories and services.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from reply_stream.models.events import VariantMetadata
from reply_stream.models.types import UserId


@dataclass(frozen=True)
class QuotaRecord:
    """Per-user usage counter and tier limit for the current billing period"""
    user_id: UserId
    tier: str
    usage_count: int
    monthly_limit: int

    @property
    def is_exhausted(self) -> bool:
        return self.usage_count >= self.monthly_limit

    @property
    def remaining(self) -> int:
        return max(0, self.monthly_limit - self.usage_count)


@dataclass(frozen=True)
class UserProfile:
    """Profile fields used to personalise generation"""
    user_id: UserId
    first_name: Optional[str] = None
    style_profile: Optional[Dict[str, Any]] = None


@dataclass
class AccumulatedVariant:
    """Server-side reconstruction of one variant, built from stream events"""
    variant_index: int
    text: str = ""
    tone: str = ""
    length: str = ""
    confidence: float = 0.0
    reasoning: str = ""
    completed: bool = False

    def apply_metadata(self, metadata: VariantMetadata) -> None:
        self.tone = metadata.tone
        self.length = metadata.length
        self.confidence = metadata.confidence
        self.reasoning = metadata.reasoning
        self.completed = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": self.text,
            "tone": self.tone,
            "length": self.length,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
        }


@dataclass(frozen=True)
class ResponseHistoryRecord:
    """Durable record of one completed generation"""
    user_id: UserId
    original_message: str
    context: Dict[str, Any]
    variants: List[AccumulatedVariant]
    model: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def mean_confidence(self) -> float:
        if not self.variants:
            return 0.0
        total = sum(v.confidence for v in self.variants)
        return round(total / len(self.variants), 4)

    def generated_options(self) -> List[Dict[str, Any]]:
        return [v.to_dict() for v in sorted(self.variants, key=lambda v: v.variant_index)]
