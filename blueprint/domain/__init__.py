"""Domain layer — pure Python, no framework dependencies."""

from blueprint.domain.models import (
    Action,
    ActionOutcome,
    AssistantReply,
    ChatMessage,
    ChatTurn,
    DispatchReport,
    NoteItem,
)
from blueprint.domain.normalize import parse_int_safe, parse_number, parse_string
from blueprint.domain.action_parser import (
    build_note_items,
    parse_action,
    parse_assistant_reply,
    parse_command,
)
from blueprint.domain.categories import build_category_cache, resolve_category_id
from blueprint.domain.dispatcher import ActionDispatcher
from blueprint.domain.session import ChatSession
from blueprint.domain.voice import VoiceCapture
from blueprint.domain.prompt import build_system_prompt

__all__ = [
    "Action",
    "ActionOutcome",
    "AssistantReply",
    "ChatMessage",
    "ChatTurn",
    "DispatchReport",
    "NoteItem",
    "parse_int_safe",
    "parse_number",
    "parse_string",
    "build_note_items",
    "parse_action",
    "parse_assistant_reply",
    "parse_command",
    "build_category_cache",
    "resolve_category_id",
    "ActionDispatcher",
    "ChatSession",
    "VoiceCapture",
    "build_system_prompt",
]
