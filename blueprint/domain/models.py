"""Domain data models — pure Python dataclasses."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


# -- Conversation --


@dataclass
class Action:
    """One assistant-emitted instruction. Transient, never persisted."""

    action: str  # e.g. "add_client", "add_note"
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"action": self.action, "data": self.data}


@dataclass
class AssistantReply:
    """Parsed assistant response: visible text plus the action batch."""

    content: str
    actions: List[Action] = field(default_factory=list)


@dataclass
class ChatMessage:
    id: str
    role: str  # "user" | "assistant"
    content: str
    created_at: str  # ISO datetime
    actions: Optional[List[Dict[str, Any]]] = None  # display only

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "created_at": self.created_at,
        }
        if self.actions:
            d["actions"] = self.actions
        return d


# -- Commands (parsed from Action.data) --


@dataclass
class AddClientCommand:
    name: str
    payment_type: str  # "monthly" | "onetime"
    currency: str
    amount: Optional[float] = None
    contact: Optional[str] = None
    notes: Optional[str] = None
    payment_date: Optional[str] = None
    payment_day: Optional[int] = None


@dataclass
class AddServiceCommand:
    project_name: str
    service_name: str
    currency: str
    login: Optional[str] = None
    url: Optional[str] = None
    expires_at: Optional[str] = None  # YYYY-MM-DD
    cost: Optional[float] = None
    notes: Optional[str] = None
    category: Optional[str] = None
    notify_days: Optional[int] = None


@dataclass
class NoteItem:
    title: str
    content: Optional[str] = None
    category: Optional[str] = None


@dataclass
class AddNoteCommand:
    items: List[NoteItem] = field(default_factory=list)


@dataclass
class CompleteNoteCommand:
    title_query: str


@dataclass
class MarkPaymentCommand:
    period: Optional[str]
    paid: bool = True
    client_id: Optional[str] = None
    client_name: Optional[str] = None


# -- Entity store inputs and records --


@dataclass
class NewClient:
    name: str
    payment_type: str = "monthly"
    currency: str = "RUB"
    amount: Optional[float] = None
    contact: Optional[str] = None
    notes: Optional[str] = None
    payment_date: Optional[str] = None
    payment_day: Optional[int] = None


@dataclass
class NewService:
    project_name: str
    service_name: str
    currency: str = "USD"
    login: Optional[str] = None
    url: Optional[str] = None
    expires_at: Optional[str] = None
    cost: Optional[float] = None
    notes: Optional[str] = None
    category: Optional[str] = None
    notify_days: Optional[int] = None


@dataclass
class Client:
    id: str
    name: str
    payment_type: str
    currency: str
    created_at: str
    contact: Optional[str] = None
    amount: Optional[float] = None
    notes: Optional[str] = None
    payment_day: Optional[int] = None


@dataclass
class ClientPayment:
    id: str
    client_id: str
    period: str  # YYYY-MM or YYYY-MM-DD for one-time payments
    paid: bool = False
    paid_at: Optional[str] = None


@dataclass
class Service:
    id: str
    project_name: str
    service_name: str
    expires_at: str
    currency: str
    notify_days: int
    created_at: str
    login: Optional[str] = None
    url: Optional[str] = None
    cost: Optional[float] = None
    notes: Optional[str] = None
    category: Optional[str] = None


@dataclass
class Category:
    id: str
    name: str
    color: str


@dataclass
class Note:
    id: str
    title: str
    created_at: str
    updated_at: str
    content: Optional[str] = None
    category_id: Optional[str] = None
    completed: bool = False
    sort_order: int = 0


# -- Dispatch report --


APPLIED = "applied"
SKIPPED = "skipped"  # recognized, nothing to do (empty payload, no match)
IGNORED = "ignored"  # unknown action kind
FAILED = "failed"


@dataclass
class ActionOutcome:
    """What happened to one action of a batch."""

    index: int
    action: str
    status: str
    entity_ids: List[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class DispatchReport:
    outcomes: List[ActionOutcome] = field(default_factory=list)

    @property
    def applied(self) -> List[ActionOutcome]:
        return [o for o in self.outcomes if o.status == APPLIED]

    @property
    def failed(self) -> List[ActionOutcome]:
        return [o for o in self.outcomes if o.status == FAILED]

    @property
    def changed(self) -> bool:
        """True when at least one mutation landed (UI should refresh)."""
        return bool(self.applied)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcomes": [
                {
                    "index": o.index,
                    "action": o.action,
                    "status": o.status,
                    "entity_ids": list(o.entity_ids),
                    "error": o.error,
                }
                for o in self.outcomes
            ],
        }


@dataclass
class ChatTurn:
    """Result of one conversation turn: the reply and what it changed."""

    message: ChatMessage
    report: Optional[DispatchReport] = None  # None when nothing was dispatched
