"""Configuration and shared settings."""

__version__ = "0.1.0"

import os
import sys
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

_stderr_print = lambda *a, **kw: print(*a, **kw, file=sys.stderr)

SUPPORTED_AI_PROVIDERS = ("openai", "anthropic", "gemini", "local")
AI_PROVIDER = os.getenv("AI_PROVIDER", "openai").strip().lower()
if AI_PROVIDER not in SUPPORTED_AI_PROVIDERS:
    _stderr_print(f"Unsupported AI_PROVIDER={AI_PROVIDER!r}, falling back to 'openai'")
    AI_PROVIDER = "openai"

SUPPORTED_VOICE_PROVIDERS = ("openai", "groq")
VOICE_PROVIDER = os.getenv("VOICE_PROVIDER", "openai").strip().lower()
if VOICE_PROVIDER not in SUPPORTED_VOICE_PROVIDERS:
    # "browser" was a settings value of the desktop app; server side it means openai
    _stderr_print(f"Unsupported VOICE_PROVIDER={VOICE_PROVIDER!r}, falling back to 'openai'")
    VOICE_PROVIDER = "openai"

DEFAULT_CATEGORY_COLOR = "#1a73e8"

CONFIG = {
    "port": int(os.getenv("PORT", "3000")),
    "data_dir": os.getenv("BLUEPRINT_DATA_DIR", "data"),
    # Assistant
    "ai_provider": AI_PROVIDER,
    "ai_model": os.getenv("AI_MODEL", "gpt-4o-mini"),
    "ai_base_url": os.getenv("AI_BASE_URL", ""),
    "ai_api_key": os.getenv("AI_API_KEY", ""),
    "ai_timeout_seconds": 60,
    # Voice
    "voice_provider": VOICE_PROVIDER,
    "groq_api_key": os.getenv("GROQ_API_KEY", ""),
    "voice_language": os.getenv("VOICE_LANGUAGE", "ru"),
    "voice_timeout_seconds": 120,
    # Chat
    "history_window": 10,
    "history_limit": 50,
    "category_color": DEFAULT_CATEGORY_COLOR,
}


# ── Typed config ────────────────────────────────────────────


@dataclass
class AssistantConfig:
    provider: str = "openai"
    model: str = "gpt-4o-mini"
    base_url: str = ""
    api_key: str = ""
    timeout_seconds: int = 60

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) or self.provider == "local"


@dataclass
class VoiceConfig:
    provider: str = "openai"
    api_key: str = ""
    language: str = "ru"
    timeout_seconds: int = 120


@dataclass
class ChatConfig:
    history_window: int = 10
    history_limit: int = 50
    category_color: str = DEFAULT_CATEGORY_COLOR


@dataclass
class AppConfig:
    """Typed configuration used by the wiring code."""

    port: int = 3000
    data_dir: str = "data"
    assistant: AssistantConfig = field(default_factory=AssistantConfig)
    voice: VoiceConfig = field(default_factory=VoiceConfig)
    chat: ChatConfig = field(default_factory=ChatConfig)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create AppConfig from environment variables."""
        # Groq has its own key; openai transcription reuses the assistant key
        voice_key = (
            CONFIG["groq_api_key"] if CONFIG["voice_provider"] == "groq"
            else CONFIG["ai_api_key"]
        )
        return cls(
            port=CONFIG["port"],
            data_dir=CONFIG["data_dir"],
            assistant=AssistantConfig(
                provider=CONFIG["ai_provider"],
                model=CONFIG["ai_model"],
                base_url=CONFIG["ai_base_url"],
                api_key=CONFIG["ai_api_key"],
                timeout_seconds=CONFIG["ai_timeout_seconds"],
            ),
            voice=VoiceConfig(
                provider=CONFIG["voice_provider"],
                api_key=voice_key,
                language=CONFIG["voice_language"],
                timeout_seconds=CONFIG["voice_timeout_seconds"],
            ),
            chat=ChatConfig(
                history_window=CONFIG["history_window"],
                history_limit=CONFIG["history_limit"],
                category_color=CONFIG["category_color"],
            ),
        )
