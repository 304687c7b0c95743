"""
Prompt construction for reply drafting.

The user prompt is shared by all variants of a request; each variant appends
its own tone/length instruction via ``build_variant_prompt``.
"""

from typing import Any, Dict, List, Optional

from reply_stream.core.llm.base_client import ChatMessage
from reply_stream.models.schemas import GenerationRequest, ResponseContext
from .sanitizer import sanitize_user_input

SYSTEM_PERSONA = (
    "You are an expert freelancer communication assistant. Generate professional "
    "email/message responses that help freelancers communicate effectively with "
    "their clients."
)

SYSTEM_GUIDELINES = """Guidelines:
- Be professional but adjust formality based on context
- Be helpful, clear, and solution-oriented
- Consider the client relationship stage and project phase
- Handle urgent vs. non-urgent communications appropriately
- Always maintain professional boundaries"""

CONTEXT_DESCRIPTIONS: Dict[str, Dict[str, str]] = {
    "urgency": {
        "immediate": "This requires an urgent/immediate response",
        "standard": "This is a standard business communication",
        "non_urgent": "This is non-urgent and can be addressed thoughtfully",
    },
    "message_type": {
        "update": "Client is requesting a project status update",
        "question": "Client has a question that needs answering",
        "concern": "Client has raised a concern or issue",
        "deliverable": "Related to work delivery or completion",
        "payment": "Payment or billing related discussion",
        "scope_change": "Discussion about project scope changes",
    },
    "relationship_stage": {
        "new": "New client relationship - first time working together",
        "established": "Established working relationship",
        "difficult": "Challenging client relationship that needs careful handling",
        "long_term": "Long-term client with years of collaboration",
    },
    "project_phase": {
        "discovery": "Project is in discovery/planning phase",
        "active": "Project is actively in progress",
        "completion": "Project is nearing completion",
        "maintenance": "Project is in maintenance/support phase",
        "on_hold": "Project is currently on hold",
    },
}


def _enum_value(value: Any) -> str:
    return getattr(value, "value", value)


class PromptBuilder:
    """Builds chat messages for one generation request"""

    def describe_context(self, context: ResponseContext) -> str:
        """Human-readable bullet list describing the situation."""
        client_name = sanitize_user_input(context.client_name)
        user_name = sanitize_user_input(context.user_name)
        custom_notes = sanitize_user_input(context.custom_notes)

        lines: List[str] = []
        if client_name:
            lines.append(f"- Client Name: {client_name}")
        if user_name:
            lines.append(f"- Your Name: {user_name}")
        lines.append(f"- Urgency: {CONTEXT_DESCRIPTIONS['urgency'][_enum_value(context.urgency)]}")
        lines.append(
            f"- Message Type: {CONTEXT_DESCRIPTIONS['message_type'][_enum_value(context.message_type)]}"
        )
        lines.append(
            "- Relationship Stage: "
            f"{CONTEXT_DESCRIPTIONS['relationship_stage'][_enum_value(context.relationship_stage)]}"
        )
        lines.append(
            f"- Project Phase: {CONTEXT_DESCRIPTIONS['project_phase'][_enum_value(context.project_phase)]}"
        )
        if custom_notes:
            lines.append(f"- Additional Context: {custom_notes}")
        return "\n".join(lines)

    def build_user_prompt(self, request: GenerationRequest) -> str:
        message = sanitize_user_input(request.original_message)
        instructions = sanitize_user_input(request.refinement_instructions)
        previous = [sanitize_user_input(r) for r in (request.previous_responses or [])]
        client_name = sanitize_user_input(request.context.client_name)
        user_name = sanitize_user_input(request.context.user_name)

        sections = [
            "Please generate a professional response for the following client message:",
            f'CLIENT MESSAGE:\n"{message}"',
            f"CONTEXT:\n{self.describe_context(request.context)}",
        ]

        if previous and instructions:
            numbered = "\n\n".join(f"{i + 1}. {r}" for i, r in enumerate(previous))
            sections.append(f"PREVIOUS RESPONSES THAT NEED REFINEMENT:\n{numbered}")
            sections.append(f"REFINEMENT INSTRUCTIONS:\n{instructions}")
            sections.append(
                "Please generate NEW responses that incorporate the refinement "
                "instructions above. Make sure to apply the requested changes."
            )

        requirements = ["- Be professional and appropriate for the context"]
        if client_name:
            requirements.append(
                f'- Start with "Hello {client_name}," or "Hi {client_name}," depending on the tone'
            )
        else:
            requirements.append("- Use an appropriate greeting")
        if user_name:
            requirements.append(f'- End with an appropriate sign-off using the name "{user_name}"')
        else:
            requirements.append("- End with an appropriate professional sign-off")
        requirements.append("- Be clear, concise, and solution-oriented")
        if instructions:
            requirements.append(f"- IMPORTANT: Apply the refinement instructions: {instructions}")

        sections.append("Requirements:\n" + "\n".join(requirements))
        return "\n\n".join(sections)

    def build_system_prompt(self, style_profile: Optional[Dict[str, Any]] = None) -> str:
        parts = [SYSTEM_PERSONA]

        if style_profile:
            phrases = style_profile.get("commonPhrases") or []
            emoji = (
                "Use emojis where appropriate."
                if style_profile.get("emojiUsage") else "Do not use emojis."
            )
            parts.append(
                "IMPORTANT: Adopt the following communication style:\n\n"
                "Communication Style Profile:\n"
                f"- Overall Summary: {style_profile.get('summary', '')}\n"
                f"- Formality Level: {style_profile.get('formality', '')}\n"
                f"- Tone: {style_profile.get('tone', '')}\n"
                f"- Sentence Complexity: {style_profile.get('sentenceComplexity', '')}\n"
                f"- Common Phrases: {', '.join(phrases) if phrases else 'None'}\n"
                f"- Emoji Usage: {emoji}"
            )

        parts.append(SYSTEM_GUIDELINES)
        return "\n\n".join(parts)

    @staticmethod
    def build_variant_prompt(user_prompt: str, tone: str, length: str) -> str:
        return f"{user_prompt}\n\nFor this response, aim for a {tone} tone with {length} length."

    def build_messages(
            self,
            user_prompt: str,
            tone: str,
            length: str,
            style_profile: Optional[Dict[str, Any]] = None
    ) -> List[ChatMessage]:
        return [
            {"role": "system", "content": self.build_system_prompt(style_profile)},
            {"role": "user", "content": self.build_variant_prompt(user_prompt, tone, length)},
        ]
