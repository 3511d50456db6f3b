"""JSON-backed entity store — implements EntityStorePort."""

import uuid
from dataclasses import asdict, fields
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Type, TypeVar

from blueprint.adapters.storage.json_store import JsonStorage
from blueprint.domain.models import (
    Category,
    Client,
    ClientPayment,
    NewClient,
    NewService,
    Note,
    Service,
)
from blueprint.errors import NotFoundError

T = TypeVar("T")

CLIENTS = "clients"
PAYMENTS = "client_payments"
SERVICES = "services"
CATEGORIES = "categories"
NOTES = "notes"

DEFAULT_NOTIFY_DAYS = 7
DEFAULT_SERVICE_TERM_DAYS = 365


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _from_row(cls: Type[T], row: dict) -> T:
    """Build a record from a stored row, ignoring unknown keys."""
    names = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in row.items() if k in names})


class JsonEntityStore:
    """Clients, payments, services, categories and notes in JSON files.

    Keeps the integrity rules of the relational schema it replaces:
    notes may only reference existing categories, payments only existing
    clients, and a (client, period) pair has at most one payment row.
    """

    def __init__(self, storage: JsonStorage):
        self._storage = storage

    # -- Categories --

    async def list_categories(self) -> List[Category]:
        rows = self._storage.load(CATEGORIES)
        categories = [_from_row(Category, r) for r in rows]
        return sorted(categories, key=lambda c: c.name.casefold())

    async def create_category(self, name: str, color: str) -> Category:
        category = Category(id=str(uuid.uuid4()), name=name, color=color)
        rows = self._storage.load(CATEGORIES)
        rows.append(asdict(category))
        self._storage.save(CATEGORIES, rows)
        return category

    # -- Notes --

    async def create_note(
        self,
        title: str,
        content: Optional[str] = None,
        category_id: Optional[str] = None,
    ) -> Note:
        if category_id is not None:
            known = {r.get("id") for r in self._storage.load(CATEGORIES)}
            if category_id not in known:
                raise NotFoundError(f"Category not found: {category_id}")
        now = _now()
        note = Note(
            id=str(uuid.uuid4()),
            title=title,
            content=content,
            category_id=category_id,
            created_at=now,
            updated_at=now,
        )
        rows = self._storage.load(NOTES)
        rows.append(asdict(note))
        self._storage.save(NOTES, rows)
        return note

    async def list_notes(self, category_id: Optional[str] = None) -> List[Note]:
        """Open notes first, then by sort order, newest first."""
        notes = [_from_row(Note, r) for r in self._storage.load(NOTES)]
        if category_id is not None:
            notes = [n for n in notes if n.category_id == category_id]
        notes.sort(key=lambda n: n.created_at, reverse=True)
        notes.sort(key=lambda n: (n.completed, n.sort_order))
        return notes

    async def toggle_note(self, note_id: str, completed: bool) -> None:
        rows = self._storage.load(NOTES)
        for row in rows:
            if row.get("id") == note_id:
                row["completed"] = completed
                row["updated_at"] = _now()
                self._storage.save(NOTES, rows)
                return
        raise NotFoundError(f"Note not found: {note_id}")

    # -- Clients --

    async def create_client(self, data: NewClient) -> Client:
        client = Client(
            id=str(uuid.uuid4()),
            name=data.name,
            contact=data.contact,
            payment_type=data.payment_type,
            amount=data.amount,
            currency=data.currency,
            notes=data.notes,
            payment_day=data.payment_day,
            created_at=_now(),
        )
        rows = self._storage.load(CLIENTS)
        rows.append(asdict(client))
        self._storage.save(CLIENTS, rows)

        # A one-time client starts with its single payment outstanding
        if data.payment_type == "onetime" and data.payment_date:
            payments = self._storage.load(PAYMENTS)
            payments.append(asdict(ClientPayment(
                id=str(uuid.uuid4()),
                client_id=client.id,
                period=data.payment_date,
            )))
            self._storage.save(PAYMENTS, payments)
        return client

    async def list_clients(self) -> List[Client]:
        clients = [_from_row(Client, r) for r in self._storage.load(CLIENTS)]
        return sorted(clients, key=lambda c: c.name.casefold())

    async def list_payments(self, client_id: str) -> List[ClientPayment]:
        rows = self._storage.load(PAYMENTS)
        payments = [_from_row(ClientPayment, r) for r in rows if r.get("client_id") == client_id]
        return sorted(payments, key=lambda p: p.period)

    async def toggle_payment(self, client_id: str, period: str, paid: bool) -> None:
        """Upsert the (client, period) payment row."""
        known = {r.get("id") for r in self._storage.load(CLIENTS)}
        if client_id not in known:
            raise NotFoundError(f"Client not found: {client_id}")
        paid_at = _now() if paid else None
        rows = self._storage.load(PAYMENTS)
        for row in rows:
            if row.get("client_id") == client_id and row.get("period") == period:
                row["paid"] = paid
                row["paid_at"] = paid_at
                break
        else:
            rows.append(asdict(ClientPayment(
                id=str(uuid.uuid4()),
                client_id=client_id,
                period=period,
                paid=paid,
                paid_at=paid_at,
            )))
        self._storage.save(PAYMENTS, rows)

    # -- Services --

    async def create_service(self, data: NewService) -> Service:
        now = datetime.now(timezone.utc)
        expires_at = data.expires_at or (
            now + timedelta(days=DEFAULT_SERVICE_TERM_DAYS)
        ).strftime("%Y-%m-%d")
        service = Service(
            id=str(uuid.uuid4()),
            project_name=data.project_name,
            service_name=data.service_name,
            login=data.login,
            url=data.url,
            expires_at=expires_at,
            cost=data.cost,
            currency=data.currency,
            notes=data.notes,
            category=data.category,
            notify_days=data.notify_days if data.notify_days is not None else DEFAULT_NOTIFY_DAYS,
            created_at=now.isoformat(),
        )
        rows = self._storage.load(SERVICES)
        rows.append(asdict(service))
        self._storage.save(SERVICES, rows)
        return service

    async def list_services(self) -> List[Service]:
        services = [_from_row(Service, r) for r in self._storage.load(SERVICES)]
        return sorted(services, key=lambda s: s.expires_at)
