from reply_stream.core.llm.base_client import LanguageModelClient, ChatMessage
from reply_stream.core.llm.openai_client import OpenAIStreamingClient

__all__ = ["LanguageModelClient", "ChatMessage", "OpenAIStreamingClient"]
