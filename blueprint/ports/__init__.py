"""Port interfaces (Hexagonal Architecture)."""

from blueprint.ports.outbound import (
    AssistantPort,
    ChatLogPort,
    EntityStorePort,
    NotificationPort,
    TranscriptionPort,
)

__all__ = [
    "AssistantPort",
    "ChatLogPort",
    "EntityStorePort",
    "NotificationPort",
    "TranscriptionPort",
]
