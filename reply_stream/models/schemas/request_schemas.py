"""
Pydantic schemas for API request validation.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from reply_stream.config.constants import (
    ORIGINAL_MESSAGE_MIN_LENGTH, ORIGINAL_MESSAGE_MAX_LENGTH
)
from reply_stream.models.types import (
    Urgency, MessageType, RelationshipStage, ProjectPhase
)


class ResponseContext(BaseModel):
    """Situational context the drafted replies must respect."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    urgency: Urgency
    message_type: MessageType = Field(..., alias="messageType")
    relationship_stage: RelationshipStage = Field(..., alias="relationshipStage")
    project_phase: ProjectPhase = Field(..., alias="projectPhase")
    custom_notes: Optional[str] = Field(default=None, alias="customNotes", max_length=2000)
    client_name: Optional[str] = Field(default=None, alias="clientName", max_length=200)
    user_name: Optional[str] = Field(default=None, alias="userName", max_length=200)

    def to_record(self) -> Dict[str, Any]:
        """Camel-cased dict as stored alongside response history."""
        return self.model_dump(by_alias=True, exclude_none=True)


class GenerationRequest(BaseModel):
    """Request body of the streaming generation endpoint. Immutable once validated."""

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        json_schema_extra={
            "example": {
                "originalMessage": "Hi, could you send me an update on the landing page?",
                "context": {
                    "urgency": "standard",
                    "messageType": "update",
                    "relationshipStage": "established",
                    "projectPhase": "active"
                }
            }
        }
    )

    original_message: str = Field(
        ...,
        alias="originalMessage",
        min_length=ORIGINAL_MESSAGE_MIN_LENGTH,
        max_length=ORIGINAL_MESSAGE_MAX_LENGTH
    )
    context: ResponseContext
    refinement_instructions: Optional[str] = Field(
        default=None, alias="refinementInstructions", max_length=2000
    )
    previous_responses: Optional[List[str]] = Field(
        default=None, alias="previousResponses", max_length=10
    )

    @field_validator("previous_responses")
    @classmethod
    def validate_previous_responses(cls, v):
        if v is not None and any(len(r) > 5000 for r in v):
            raise ValueError("Previous responses must be at most 5000 characters each")
        return v

    @property
    def is_refinement(self) -> bool:
        """True when both refinement instructions and prior drafts are present."""
        return bool(self.refinement_instructions and self.previous_responses)

    def with_context(self, **updates: Any) -> "GenerationRequest":
        """Copy of this request with context fields replaced."""
        return self.model_copy(
            update={"context": self.context.model_copy(update=updates)}
        )
