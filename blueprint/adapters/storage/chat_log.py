"""JSON-backed chat history — implements ChatLogPort."""

import uuid
from datetime import datetime, timezone
from typing import List

from blueprint.adapters.storage.json_store import JsonStorage
from blueprint.domain.models import ChatMessage

CHAT_HISTORY = "chat_history"


class JsonChatLog:
    def __init__(self, storage: JsonStorage, key: str = CHAT_HISTORY):
        self._storage = storage
        self._key = key

    async def append(self, role: str, content: str) -> ChatMessage:
        msg = ChatMessage(
            id=str(uuid.uuid4()),
            role=role,
            content=content,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        rows = self._storage.load(self._key)
        rows.append(msg.to_dict())
        self._storage.save(self._key, rows)
        return msg

    async def recent(self, limit: int) -> List[ChatMessage]:
        """Most recent ``limit`` messages, oldest first."""
        if limit <= 0:
            return []
        rows = sorted(self._storage.load(self._key), key=lambda r: r.get("created_at", ""))
        return [
            ChatMessage(
                id=r.get("id", ""),
                role=r.get("role", "user"),
                content=r.get("content", ""),
                created_at=r.get("created_at", ""),
            )
            for r in rows[-limit:]
        ]

    async def clear(self) -> None:
        self._storage.save(self._key, [])
