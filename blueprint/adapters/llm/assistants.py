"""HTTP chat-completion adapters — implement AssistantPort.

All providers share the system prompt and the reply envelope parser;
only the wire format differs.
"""

import asyncio
import sys
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import aiohttp

from blueprint.config import AssistantConfig
from blueprint.domain.action_parser import parse_assistant_reply
from blueprint.domain.models import AssistantReply
from blueprint.domain.prompt import build_system_prompt
from blueprint.errors import AssistantError

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"
ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"

TEMPERATURE = 0.3
MAX_TOKENS = 4096

MISSING_KEY_MESSAGE = "API ключ не настроен. Перейди в Настройки и добавь ключ."


def _log(msg: str):
    print(msg, file=sys.stderr)


class _HttpAssistant(ABC):
    """Common request/response handling. Subclasses build the wire payload."""

    label = "AI API"

    def __init__(self, config: AssistantConfig):
        self._config = config

    @property
    def is_configured(self) -> bool:
        return self._config.is_configured

    async def chat(self, messages: List[Dict[str, str]]) -> AssistantReply:
        if not self.is_configured:
            raise AssistantError(MISSING_KEY_MESSAGE)
        _log(f"[assistant] {self.label} request ({len(messages)} messages, model={self._config.model})")
        raw = await self._complete(messages, build_system_prompt())
        return parse_assistant_reply(raw)

    @abstractmethod
    async def _complete(self, messages: List[Dict[str, str]], system_prompt: str) -> str:
        """Send the request and return the raw reply text."""

    async def _post_json(
        self,
        url: str,
        body: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        timeout = aiohttp.ClientTimeout(total=self._config.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, json=body, headers=headers or {}) as resp:
                    if resp.status < 200 or resp.status >= 300:
                        text = await resp.text()
                        raise AssistantError(f"{self.label} ошибка {resp.status}: {text}")
                    return await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise AssistantError(f"{self.label}: {str(e) or type(e).__name__}") from e


class OpenAICompatibleAssistant(_HttpAssistant):
    """OpenAI chat completions, also used for local OpenAI-compatible servers."""

    label = "AI API"

    @property
    def url(self) -> str:
        base = self._config.base_url
        if self._config.provider == "local" and base:
            return f"{base.rstrip('/')}/v1/chat/completions"
        return OPENAI_CHAT_URL

    async def _complete(self, messages, system_prompt):
        body = {
            "model": self._config.model,
            "messages": [{"role": "system", "content": system_prompt}] + list(messages),
            "temperature": TEMPERATURE,
            "max_tokens": MAX_TOKENS,
        }
        headers = {}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"
        data = await self._post_json(self.url, body, headers)
        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError):
            return ""


class AnthropicAssistant(_HttpAssistant):
    label = "Anthropic API"

    async def _complete(self, messages, system_prompt):
        body = {
            "model": self._config.model,
            "system": system_prompt,
            "messages": list(messages),
            "max_tokens": MAX_TOKENS,
        }
        headers = {
            "x-api-key": self._config.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }
        data = await self._post_json(ANTHROPIC_MESSAGES_URL, body, headers)
        try:
            return data["content"][0]["text"] or ""
        except (KeyError, IndexError, TypeError):
            return ""


class GeminiAssistant(_HttpAssistant):
    label = "Gemini API"

    @property
    def url(self) -> str:
        return f"{GEMINI_API_BASE}/{self._config.model}:generateContent?key={self._config.api_key}"

    async def _complete(self, messages, system_prompt):
        contents = [
            {
                "role": "model" if m["role"] == "assistant" else "user",
                "parts": [{"text": m["content"]}],
            }
            for m in messages
        ]
        body = {
            "system_instruction": {"parts": [{"text": system_prompt}]},
            "contents": contents,
            "generationConfig": {"maxOutputTokens": MAX_TOKENS, "temperature": TEMPERATURE},
        }
        data = await self._post_json(self.url, body)
        try:
            return data["candidates"][0]["content"]["parts"][0]["text"] or ""
        except (KeyError, IndexError, TypeError):
            return ""


_PROVIDERS = {
    "openai": OpenAICompatibleAssistant,
    "local": OpenAICompatibleAssistant,
    "anthropic": AnthropicAssistant,
    "gemini": GeminiAssistant,
}


def create_assistant(config: AssistantConfig) -> _HttpAssistant:
    """Factory: pick the adapter for ``config.provider``."""
    cls = _PROVIDERS.get(config.provider)
    if cls is None:
        raise ValueError(f"Unknown AI provider: {config.provider!r}")
    return cls(config)
