"""Whisper speech-to-text client — implements TranscriptionPort."""

import asyncio
import sys

import aiohttp

from blueprint.config import VoiceConfig
from blueprint.errors import TranscriptionError

WHISPER_ENDPOINTS = {
    "openai": ("https://api.openai.com/v1/audio/transcriptions", "whisper-1"),
    "groq": ("https://api.groq.com/openai/v1/audio/transcriptions", "whisper-large-v3-turbo"),
}


def _log(msg: str):
    print(msg, file=sys.stderr)


class WhisperTranscriber:
    """Uploads a recorded clip (webm) and returns the recognized text."""

    def __init__(self, config: VoiceConfig):
        self._config = config
        if config.provider not in WHISPER_ENDPOINTS:
            raise ValueError(f"Unknown voice provider: {config.provider!r}")

    @property
    def is_configured(self) -> bool:
        return bool(self._config.api_key)

    def _missing_key_message(self) -> str:
        if self._config.provider == "groq":
            return "Groq API ключ не настроен. Добавьте его в Настройки → Голосовой ввод."
        return "API ключ не настроен"

    async def transcribe(self, audio: bytes) -> str:
        if not self.is_configured:
            raise TranscriptionError(self._missing_key_message())

        url, model = WHISPER_ENDPOINTS[self._config.provider]
        form = aiohttp.FormData()
        form.add_field("file", audio, filename="audio.webm", content_type="audio/webm")
        form.add_field("model", model)
        form.add_field("language", self._config.language)
        headers = {"Authorization": f"Bearer {self._config.api_key}"}

        _log(f"[voice] transcribing {len(audio)} bytes via {self._config.provider}")
        timeout = aiohttp.ClientTimeout(total=self._config.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, data=form, headers=headers) as resp:
                    if resp.status < 200 or resp.status >= 300:
                        text = await resp.text()
                        raise TranscriptionError(f"Whisper API ошибка {resp.status}: {text}")
                    data = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TranscriptionError(f"Whisper API: {str(e) or type(e).__name__}") from e

        text = data.get("text") if isinstance(data, dict) else None
        return text if isinstance(text, str) else ""
