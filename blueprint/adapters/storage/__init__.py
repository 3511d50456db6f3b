"""Storage adapters — JSON files on disk."""

from blueprint.adapters.storage.json_store import JsonStorage
from blueprint.adapters.storage.entity_store import JsonEntityStore
from blueprint.adapters.storage.chat_log import JsonChatLog

__all__ = [
    "JsonStorage",
    "JsonEntityStore",
    "JsonChatLog",
]
