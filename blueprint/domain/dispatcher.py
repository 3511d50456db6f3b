"""ActionDispatcher — applies an assistant action batch to the entity store.

Best-effort, not transactional: actions run strictly in order, one at a
time, and a failing action is logged and recorded without stopping the
rest of the batch.
"""

from __future__ import annotations

import asyncio
import sys
from typing import TYPE_CHECKING, Awaitable, Callable, Dict, List, Optional

from blueprint.config import DEFAULT_CATEGORY_COLOR
from blueprint.domain.action_parser import parse_command
from blueprint.domain.categories import (
    CategoryCache,
    build_category_cache,
    resolve_category_id,
)
from blueprint.domain.models import (
    APPLIED,
    FAILED,
    IGNORED,
    SKIPPED,
    Action,
    ActionOutcome,
    AddClientCommand,
    AddNoteCommand,
    AddServiceCommand,
    CompleteNoteCommand,
    DispatchReport,
    MarkPaymentCommand,
    NewClient,
    NewService,
)

if TYPE_CHECKING:
    from blueprint.ports.outbound import EntityStorePort

# Same bounds as the manual client form
MIN_PAYMENT_DAY = 1
MAX_PAYMENT_DAY = 28


def _log(msg: str):
    print(msg, file=sys.stderr)


def clamp_payment_day(day: Optional[int]) -> Optional[int]:
    if day is None:
        return None
    return max(MIN_PAYMENT_DAY, min(MAX_PAYMENT_DAY, day))


class _Batch:
    """State shared by the actions of one batch."""

    def __init__(self):
        self.categories: Optional[CategoryCache] = None


class ActionDispatcher:
    """Routes each action to its handler and records the outcome.

    Handlers:
    - add_client / add_service: one create call each
    - add_note: category resolution (batch-cached) + one note per item
    - complete_note: first title substring match is marked completed
    - mark_payment: payment toggle, client looked up by name if needed
    """

    def __init__(
        self,
        store: EntityStorePort,
        category_color: str = DEFAULT_CATEGORY_COLOR,
    ):
        self._store = store
        self._category_color = category_color
        # Overlapping batches would race on category creation
        self._lock = asyncio.Lock()
        self._handlers: Dict[type, Callable[..., Awaitable[str]]] = {
            AddClientCommand: self._add_client,
            AddServiceCommand: self._add_service,
            AddNoteCommand: self._add_note,
            CompleteNoteCommand: self._complete_note,
            MarkPaymentCommand: self._mark_payment,
        }

    async def dispatch(self, actions: List[Action]) -> DispatchReport:
        report = DispatchReport()
        async with self._lock:
            batch = _Batch()
            for index, action in enumerate(actions):
                report.outcomes.append(await self._run(index, action, batch))
        if report.failed:
            _log(f"[dispatcher] batch done: {len(report.applied)} applied, "
                 f"{len(report.failed)} failed")
        return report

    async def _run(self, index: int, action: Action, batch: _Batch) -> ActionOutcome:
        outcome = ActionOutcome(index=index, action=action.action, status=SKIPPED)
        try:
            command = parse_command(action)
            if command is None:
                _log(f"[dispatcher] ignoring unknown action: {action.action!r}")
                outcome.status = IGNORED
                return outcome
            handler = self._handlers[type(command)]
            outcome.status = await handler(command, outcome, batch)
        except Exception as e:
            _log(f"[dispatcher] action #{index} {action.action} failed: {e}")
            outcome.status = FAILED
            outcome.error = str(e) or type(e).__name__
        return outcome

    # -- Handlers: return the outcome status, append touched ids to outcome --

    async def _add_client(self, cmd: AddClientCommand, outcome: ActionOutcome, batch: _Batch) -> str:
        client = await self._store.create_client(NewClient(
            name=cmd.name,
            payment_type=cmd.payment_type,
            currency=cmd.currency,
            amount=cmd.amount,
            contact=cmd.contact,
            notes=cmd.notes,
            payment_date=cmd.payment_date,
            payment_day=clamp_payment_day(cmd.payment_day),
        ))
        outcome.entity_ids.append(client.id)
        return APPLIED

    async def _add_service(self, cmd: AddServiceCommand, outcome: ActionOutcome, batch: _Batch) -> str:
        service = await self._store.create_service(NewService(
            project_name=cmd.project_name,
            service_name=cmd.service_name,
            currency=cmd.currency,
            login=cmd.login,
            url=cmd.url,
            expires_at=cmd.expires_at,
            cost=cmd.cost,
            notes=cmd.notes,
            category=cmd.category,
            notify_days=cmd.notify_days,
        ))
        outcome.entity_ids.append(service.id)
        return APPLIED

    async def _add_note(self, cmd: AddNoteCommand, outcome: ActionOutcome, batch: _Batch) -> str:
        if not cmd.items:
            return SKIPPED
        if batch.categories is None:
            batch.categories = await build_category_cache(self._store)
        for item in cmd.items:
            category_id = await resolve_category_id(
                item.category, batch.categories, self._store, self._category_color,
            )
            note = await self._store.create_note(item.title, item.content, category_id)
            outcome.entity_ids.append(note.id)
        return APPLIED

    async def _complete_note(self, cmd: CompleteNoteCommand, outcome: ActionOutcome, batch: _Batch) -> str:
        if not cmd.title_query:
            return SKIPPED
        notes = await self._store.list_notes(None)
        found = next((n for n in notes if cmd.title_query in n.title.lower()), None)
        if found is None:
            return SKIPPED
        await self._store.toggle_note(found.id, True)
        outcome.entity_ids.append(found.id)
        return APPLIED

    async def _mark_payment(self, cmd: MarkPaymentCommand, outcome: ActionOutcome, batch: _Batch) -> str:
        if not cmd.period:
            raise ValueError("mark_payment requires a period")
        client_id = cmd.client_id
        if client_id is None:
            if not cmd.client_name:
                raise ValueError("mark_payment requires client_id or client_name")
            client_id = await self._find_client_id(cmd.client_name)
            if client_id is None:
                _log(f"[dispatcher] mark_payment: no client named {cmd.client_name!r}")
                return SKIPPED
        await self._store.toggle_payment(client_id, cmd.period, cmd.paid)
        outcome.entity_ids.append(client_id)
        return APPLIED

    async def _find_client_id(self, name: str) -> Optional[str]:
        """Exact case-insensitive match first, then first substring match."""
        query = name.lower()
        clients = await self._store.list_clients()
        for client in clients:
            if client.name.lower() == query:
                return client.id
        for client in clients:
            if query in client.name.lower():
                return client.id
        return None
