"""Voice capture pipeline: audio -> transcript -> the chat session.

Voice input goes through the same ChatSession (and so the same
dispatcher) as typed input, so actions behave identically.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Optional

from blueprint.domain.models import ChatMessage
from blueprint.domain.session import ERROR_PREFIX, ChatSession

if TYPE_CHECKING:
    from blueprint.ports.outbound import NotificationPort, TranscriptionPort


def _log(msg: str):
    print(msg, file=sys.stderr)


class VoiceCapture:
    def __init__(
        self,
        transcriber: TranscriptionPort,
        session: ChatSession,
        notifier: NotificationPort,
    ):
        self._transcriber = transcriber
        self._session = session
        self._notifier = notifier

    async def submit(self, audio: bytes) -> Optional[ChatMessage]:
        """Transcribe a finished recording and run it as a chat turn.

        Transcription failures are reported through the notifier only:
        nothing is added to the chat and nothing is dispatched.
        """
        if not audio:
            return None
        try:
            text = await self._transcriber.transcribe(audio)
        except Exception as e:
            _log(f"[voice] transcription failed: {e}")
            await self._notifier.notify(f"{ERROR_PREFIX}: {e}")
            return None

        if not text or not text.strip():
            return None

        # A standalone voice surface starts without history; give the
        # assistant the persisted context like the chat window has
        if not self._session.messages:
            await self._session.load_history()

        reply = await self._session.send_message(text)
        if reply is not None:
            await self._notifier.notify(reply.content)
        return reply
