"""Outbound ports — interfaces for external system adapters."""

from typing import Dict, List, Optional, Protocol, runtime_checkable

from blueprint.domain.models import (
    AssistantReply,
    Category,
    ChatMessage,
    Client,
    NewClient,
    NewService,
    Note,
    Service,
)


@runtime_checkable
class EntityStorePort(Protocol):
    """Persistence boundary for clients, services, notes and categories.

    Every call may raise; the dispatcher treats any exception as a
    failure of the action that issued it.
    """

    async def list_categories(self) -> List[Category]: ...
    async def create_category(self, name: str, color: str) -> Category: ...
    async def create_note(
        self,
        title: str,
        content: Optional[str] = None,
        category_id: Optional[str] = None,
    ) -> Note: ...
    async def list_notes(self, category_id: Optional[str] = None) -> List[Note]: ...
    async def toggle_note(self, note_id: str, completed: bool) -> None: ...
    async def create_client(self, data: NewClient) -> Client: ...
    async def list_clients(self) -> List[Client]: ...
    async def create_service(self, data: NewService) -> Service: ...
    async def toggle_payment(self, client_id: str, period: str, paid: bool) -> None: ...


@runtime_checkable
class ChatLogPort(Protocol):
    """Append-only persisted chat history."""

    async def append(self, role: str, content: str) -> ChatMessage: ...
    async def recent(self, limit: int) -> List[ChatMessage]: ...
    async def clear(self) -> None: ...


@runtime_checkable
class AssistantPort(Protocol):
    """Interface for LLM chat backends.

    ``messages`` is the trailing window of the conversation, oldest first,
    each ``{"role": "user" | "assistant", "content": str}``.
    """

    async def chat(self, messages: List[Dict[str, str]]) -> AssistantReply: ...


@runtime_checkable
class TranscriptionPort(Protocol):
    """Interface for speech-to-text backends."""

    async def transcribe(self, audio: bytes) -> str: ...


@runtime_checkable
class NotificationPort(Protocol):
    """Interface for user-visible notifications outside the chat transcript."""

    async def notify(self, text: str) -> None: ...
