"""Assistant reply and action payload parsing.

Pure Python, no framework dependencies. Every parser degrades to partial
or empty output on malformed data instead of raising.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Dict, Iterable, List, Optional

from blueprint.domain.models import (
    Action,
    AddClientCommand,
    AddNoteCommand,
    AddServiceCommand,
    AssistantReply,
    CompleteNoteCommand,
    MarkPaymentCommand,
    NoteItem,
)
from blueprint.domain.normalize import (
    parse_bool,
    parse_int_safe,
    parse_number,
    parse_string,
)

NO_ACTION = "none"

DEFAULT_CLIENT_NAME = "Новый клиент"
DEFAULT_SERVICE_NAME = "Новый сервис"
DEFAULT_CLIENT_CURRENCY = "RUB"
DEFAULT_SERVICE_CURRENCY = "USD"

# Leading list markup: "- ", "* ", "• ", "1. ", "2) "
_LIST_MARKUP_RE = re.compile(r"^\s*(?:(?:[-*•]+|\d+[.)])\s*)+")
_LINE_SPLIT_RE = re.compile(r"\r?\n")
# ```json ... ``` wrapper some models put around the JSON object
_CODE_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*(.*?)\s*```$", re.DOTALL)

# add_note payload fields that are unioned, in order
_NOTE_FIELDS = ("title", "note", "notes", "items", "tasks", "titles")


# -- Reply / action envelope --


def parse_action(raw: Any) -> Optional[Action]:
    """Wrap one raw JSON value as an Action, or None if it has no kind."""
    if not isinstance(raw, dict):
        return None
    kind = parse_string(raw.get("action"))
    if not kind:
        return None
    data = raw.get("data")
    return Action(action=kind, data=data if isinstance(data, dict) else {})


def parse_actions(raw_actions: Iterable[Any]) -> List[Action]:
    """Parse a raw action array, dropping malformed entries and "none"."""
    actions = []
    for raw in raw_actions:
        action = parse_action(raw)
        if action and action.action != NO_ACTION:
            actions.append(action)
    return actions


def parse_assistant_reply(text: str) -> AssistantReply:
    """Split the assistant's raw output into visible text and actions.

    The assistant is asked to answer with
    ``{"actions": [{"action": ..., "data": {...}}], "message": "..."}``.
    Anything that is not such an object is shown to the user verbatim.
    """
    trimmed = (text or "").strip()
    fenced = _CODE_FENCE_RE.match(trimmed)
    candidate = fenced.group(1) if fenced else trimmed
    try:
        parsed = json.loads(candidate)
    except ValueError:
        return AssistantReply(content=text or "", actions=[])
    if not isinstance(parsed, dict):
        return AssistantReply(content=text or "", actions=[])

    message = parsed.get("message")
    content = message if isinstance(message, str) else trimmed

    raw_actions = parsed.get("actions")
    if isinstance(raw_actions, list):
        actions = parse_actions(raw_actions)
    else:
        actions = parse_actions([parsed])
    return AssistantReply(content=content, actions=actions)


# -- add_client / add_service --


def parse_add_client(data: Dict[str, Any]) -> AddClientCommand:
    raw_type = parse_string(data.get("payment_type"))
    payment_type = "onetime" if raw_type and raw_type.lower() == "onetime" else "monthly"
    currency = parse_string(data.get("currency"))
    return AddClientCommand(
        name=parse_string(data.get("name")) or DEFAULT_CLIENT_NAME,
        payment_type=payment_type,
        currency=currency.upper() if currency else DEFAULT_CLIENT_CURRENCY,
        amount=parse_number(data.get("amount")),
        contact=parse_string(data.get("contact")),
        notes=parse_string(data.get("notes")),
        payment_date=parse_string(_first_present(data, "payment_date", "date")),
        payment_day=parse_int_safe(_first_present(data, "payment_day", "day")),
    )


def parse_add_service(data: Dict[str, Any]) -> AddServiceCommand:
    project_name = parse_string(data.get("project_name"))
    service_name = parse_string(data.get("service_name")) or parse_string(data.get("name"))
    currency = parse_string(data.get("currency"))
    return AddServiceCommand(
        project_name=project_name or service_name or DEFAULT_SERVICE_NAME,
        service_name=service_name or project_name or DEFAULT_SERVICE_NAME,
        currency=currency.upper() if currency else DEFAULT_SERVICE_CURRENCY,
        login=parse_string(data.get("login")),
        url=parse_string(data.get("url")),
        expires_at=parse_string(data.get("expires_at")),
        cost=parse_number(data.get("cost")),
        notes=parse_string(data.get("notes")),
        category=parse_string(data.get("category")),
        notify_days=parse_int_safe(data.get("notify_days")),
    )


def _first_present(data: Dict[str, Any], *keys: str) -> Any:
    """Value of the first key that is present and not null."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


# -- add_note --


def split_note_lines(text: str) -> List[str]:
    """One title per non-empty line, list markup stripped."""
    lines = []
    for line in _LINE_SPLIT_RE.split(text):
        cleaned = _LIST_MARKUP_RE.sub("", line).strip()
        if cleaned:
            lines.append(cleaned)
    return lines


def _to_note_items(value: Any, forced_category: Optional[str] = None) -> List[NoteItem]:
    """Flatten a string / object / array payload into note items."""
    if not value:
        return []
    if isinstance(value, str):
        return [NoteItem(title=line, category=forced_category) for line in split_note_lines(value)]
    if isinstance(value, list):
        items: List[NoteItem] = []
        for entry in value:
            items.extend(_to_note_items(entry, forced_category))
        return items
    if isinstance(value, dict):
        title = parse_string(_first_present(value, "title", "text", "name"))
        if not title:
            return []
        return [NoteItem(
            title=title,
            content=parse_string(_first_present(value, "content", "description")),
            category=parse_string(_first_present(value, "category", "group")) or forced_category,
        )]
    return []


def build_note_items(data: Dict[str, Any]) -> List[NoteItem]:
    """Collect every note the payload describes, deduplicated.

    Items are keyed by ``lower(title)::lower(category)``; the first
    occurrence wins even if a later duplicate carries different content.
    """
    category = parse_string(data.get("category"))
    items: List[NoteItem] = []

    for field_name in _NOTE_FIELDS:
        found = _to_note_items(data.get(field_name), category)
        if field_name == "title" and len(found) == 1 and not found[0].content:
            # {"title": "...", "content": "..."} describes a single note
            found[0].content = parse_string(_first_present(data, "content", "description"))
        items.extend(found)

    by_category = data.get("by_category")
    if isinstance(by_category, dict):
        for name, value in by_category.items():
            items.extend(_to_note_items(value, parse_string(name)))

    unique: Dict[str, NoteItem] = {}
    for item in items:
        title = parse_string(item.title)
        if not title:
            continue
        item_category = parse_string(item.category)
        key = f"{title.lower()}::{(item_category or '').lower()}"
        if key not in unique:
            unique[key] = NoteItem(
                title=title,
                content=parse_string(item.content),
                category=item_category,
            )
    return list(unique.values())


def parse_add_note(data: Dict[str, Any]) -> AddNoteCommand:
    return AddNoteCommand(items=build_note_items(data))


# -- complete_note / mark_payment --


def parse_complete_note(data: Dict[str, Any]) -> CompleteNoteCommand:
    query = parse_string(data.get("title_query")) or ""
    return CompleteNoteCommand(title_query=query.lower())


def parse_mark_payment(data: Dict[str, Any]) -> MarkPaymentCommand:
    client_id = data.get("client_id")
    return MarkPaymentCommand(
        client_id=str(client_id) if client_id not in (None, "") else None,
        client_name=parse_string(data.get("client_name")),
        period=parse_string(data.get("period")),
        paid=parse_bool(data.get("paid"), default=True),
    )


ACTION_PARSERS: Dict[str, Callable[[Dict[str, Any]], Any]] = {
    "add_client": parse_add_client,
    "add_service": parse_add_service,
    "add_note": parse_add_note,
    "complete_note": parse_complete_note,
    "mark_payment": parse_mark_payment,
}


def parse_command(action: Action) -> Optional[Any]:
    """Typed command for a recognized action kind, None otherwise."""
    parser = ACTION_PARSERS.get(action.action)
    if parser is None:
        return None
    data = action.data if isinstance(action.data, dict) else {}
    return parser(data)
