"""Notifier that writes to the log — implements NotificationPort."""

import sys
from typing import List


def _log(msg: str):
    print(msg, file=sys.stderr)


class LogNotifier:
    """Stands in for a desktop toast. Keeps what it sent for inspection."""

    def __init__(self, keep: int = 20):
        self._keep = keep
        self.sent: List[str] = []

    async def notify(self, text: str) -> None:
        _log(f"[notify] {text}")
        self.sent.append(text)
        del self.sent[:-self._keep]
