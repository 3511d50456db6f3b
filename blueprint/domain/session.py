"""ChatSession — conversation orchestration, no framework dependencies.

Owns the chat history, talks to the assistant through AssistantPort,
persists every turn through ChatLogPort and hands each reply's action
batch to the ActionDispatcher.
"""

from __future__ import annotations

import inspect
import sys
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from blueprint.domain.dispatcher import ActionDispatcher
from blueprint.domain.models import Action, ChatMessage, ChatTurn, DispatchReport

if TYPE_CHECKING:
    from blueprint.ports.outbound import AssistantPort, ChatLogPort

ERROR_PREFIX = "Ошибка"


def _log(msg: str):
    print(msg, file=sys.stderr)


class ChatSession:
    """One conversation with the assistant.

    Turns are not expected to overlap (the UI disables sending while a
    reply is in flight); ``loading`` tells the presentation layer so.
    """

    def __init__(
        self,
        assistant: AssistantPort,
        chat_log: ChatLogPort,
        dispatcher: ActionDispatcher,
        history_window: int = 10,
        history_limit: int = 50,
        on_change: Optional[Callable[[DispatchReport], Any]] = None,
    ):
        self._assistant = assistant
        self._chat_log = chat_log
        self._dispatcher = dispatcher
        self._history_window = history_window
        self._history_limit = history_limit
        self._on_change = on_change
        self._messages: List[ChatMessage] = []
        self._loading: bool = False
        self.last_report: Optional[DispatchReport] = None

    @property
    def messages(self) -> List[ChatMessage]:
        return list(self._messages)

    @property
    def loading(self) -> bool:
        return self._loading

    def add_message(
        self,
        role: str,
        content: str,
        actions: Optional[List[Dict[str, Any]]] = None,
    ) -> ChatMessage:
        """Append a message to in-memory history only."""
        msg = ChatMessage(
            id=str(uuid.uuid4()),
            role=role,
            content=content,
            created_at=datetime.now(timezone.utc).isoformat(),
            actions=actions or None,
        )
        self._messages.append(msg)
        return msg

    async def load_history(self):
        """Hydrate in-memory history with the most recent persisted messages."""
        try:
            self._messages = await self._chat_log.recent(self._history_limit)
        except Exception as e:
            _log(f"[session] failed to load chat history: {e}")

    async def clear_history(self):
        await self._chat_log.clear()
        self._messages = []
        _log("[session] conversation history cleared")

    async def send_message(self, content: str) -> Optional[ChatMessage]:
        """Run one conversation turn and return the assistant's message."""
        turn = await self.run_turn(content)
        return turn.message if turn is not None else None

    async def run_turn(self, content: str) -> Optional[ChatTurn]:
        """Run one conversation turn; the report belongs to this turn only.

        If the assistant call fails the message carries the error text and
        no actions are dispatched.
        """
        text = (content or "").strip()
        if not text:
            return None

        self.add_message("user", text)
        await self._persist("user", text)

        self._loading = True
        try:
            window = [
                {"role": m.role, "content": m.content}
                for m in self._messages[-self._history_window:]
            ]
            try:
                reply = await self._assistant.chat(window)
            except Exception as e:
                _log(f"[session] assistant call failed: {e}")
                return ChatTurn(self.add_message("assistant", f"{ERROR_PREFIX}: {e}"))

            assistant_msg = self.add_message(
                "assistant",
                reply.content,
                actions=[a.to_dict() for a in reply.actions],
            )
            await self._persist("assistant", reply.content)

            report = None
            if reply.actions:
                report = await self.dispatch_actions(reply.actions)
            return ChatTurn(assistant_msg, report)
        finally:
            self._loading = False

    async def dispatch_actions(self, actions: List[Action]) -> DispatchReport:
        """Apply a batch and signal the presentation layer."""
        report = await self._dispatcher.dispatch(actions)
        self.last_report = report
        if self._on_change is not None:
            result = self._on_change(report)
            if inspect.isawaitable(result):
                await result
        return report

    async def _persist(self, role: str, content: str):
        # A chat log write failure must not cost the user the turn
        try:
            await self._chat_log.append(role, content)
        except Exception as e:
            _log(f"[session] failed to save {role} message: {e}")
