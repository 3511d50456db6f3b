from blueprint.adapters.llm.assistants import (
    AnthropicAssistant,
    GeminiAssistant,
    OpenAICompatibleAssistant,
    create_assistant,
)
from blueprint.adapters.llm.transcriber import WhisperTranscriber

__all__ = [
    "AnthropicAssistant",
    "GeminiAssistant",
    "OpenAICompatibleAssistant",
    "WhisperTranscriber",
    "create_assistant",
]
