"""Blueprint — conversational assistant that turns chat into records."""

from blueprint.config import CONFIG, AppConfig, __version__
from blueprint.errors import (
    AssistantError,
    BlueprintError,
    NotFoundError,
    StoreError,
    TranscriptionError,
)

__all__ = [
    "CONFIG",
    "AppConfig",
    "__version__",
    "AssistantError",
    "BlueprintError",
    "NotFoundError",
    "StoreError",
    "TranscriptionError",
]
