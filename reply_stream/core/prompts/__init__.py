from reply_stream.core.prompts.sanitizer import sanitize_user_input
from reply_stream.core.prompts.prompt_builder import PromptBuilder, CONTEXT_DESCRIPTIONS

__all__ = ["sanitize_user_input", "PromptBuilder", "CONTEXT_DESCRIPTIONS"]
