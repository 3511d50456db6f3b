"""Tests for domain/dispatcher.py and domain/categories.py.

Uses an in-memory mock store; no files, no network.
"""

import asyncio

import pytest
from unittest.mock import patch

from blueprint.config import DEFAULT_CATEGORY_COLOR
from blueprint.domain.categories import build_category_cache, resolve_category_id
from blueprint.domain.action_parser import parse_command
from blueprint.domain.dispatcher import ActionDispatcher, clamp_payment_day
from blueprint.domain.models import (
    APPLIED,
    FAILED,
    IGNORED,
    SKIPPED,
    Action,
    Category,
    Client,
    Note,
    Service,
)


# --- Mock Ports ---


class MockStore:
    """Mock EntityStorePort implementation that records every call."""

    def __init__(self, categories=None, notes=None, clients=None):
        self.categories = list(categories or [])
        self.notes = list(notes or [])
        self.clients = list(clients or [])
        self.services = []
        self.payments = []
        self.created_categories = []
        self.list_categories_calls = 0
        self.fail_on_client_named = None
        self._seq = 0

    def _id(self, prefix):
        self._seq += 1
        return f"{prefix}{self._seq}"

    async def list_categories(self):
        self.list_categories_calls += 1
        return list(self.categories)

    async def create_category(self, name, color):
        category = Category(id=self._id("cat"), name=name, color=color)
        self.categories.append(category)
        self.created_categories.append(category)
        return category

    async def create_note(self, title, content=None, category_id=None):
        note = Note(
            id=self._id("note"), title=title, content=content,
            category_id=category_id, created_at="t", updated_at="t",
        )
        self.notes.append(note)
        return note

    async def list_notes(self, category_id=None):
        return list(self.notes)

    async def toggle_note(self, note_id, completed):
        for note in self.notes:
            if note.id == note_id:
                note.completed = completed

    async def create_client(self, data):
        if data.name == self.fail_on_client_named:
            raise RuntimeError("disk full")
        client = Client(
            id=self._id("client"), name=data.name, payment_type=data.payment_type,
            currency=data.currency, created_at="t", amount=data.amount,
            payment_day=data.payment_day,
        )
        self.clients.append(client)
        return client

    async def list_clients(self):
        return list(self.clients)

    async def create_service(self, data):
        service = Service(
            id=self._id("svc"), project_name=data.project_name,
            service_name=data.service_name, expires_at=data.expires_at or "2099-01-01",
            currency=data.currency, notify_days=data.notify_days or 7, created_at="t",
        )
        self.services.append(service)
        return service

    async def toggle_payment(self, client_id, period, paid):
        self.payments.append((client_id, period, paid))


def _note(note_id, title):
    return Note(id=note_id, title=title, created_at="t", updated_at="t")


def _client(client_id, name):
    return Client(id=client_id, name=name, payment_type="monthly", currency="RUB", created_at="t")


# --- Category resolver ---


class TestResolveCategoryId:
    @pytest.mark.asyncio
    async def test_blank_name(self):
        store = MockStore()
        assert await resolve_category_id(None, {}, store) is None
        assert await resolve_category_id("  ", {}, store) is None
        assert store.created_categories == []

    @pytest.mark.asyncio
    async def test_creates_once_per_name(self):
        store = MockStore()
        cache = {}
        first = await resolve_category_id("Work", cache, store)
        second = await resolve_category_id("work", cache, store)
        assert first == second
        assert len(store.created_categories) == 1
        assert store.created_categories[0].color == DEFAULT_CATEGORY_COLOR
        assert cache == {"work": first}

    @pytest.mark.asyncio
    async def test_existing_category_reused(self):
        store = MockStore(categories=[Category(id="c1", name="Errands", color="#fff")])
        cache = await build_category_cache(store)
        assert await resolve_category_id("ERRANDS", cache, store) == "c1"
        assert store.created_categories == []


# --- Dispatcher ---


class TestClampPaymentDay:
    def test_bounds(self):
        assert clamp_payment_day(31) == 28
        assert clamp_payment_day(0) == 1
        assert clamp_payment_day(15) == 15
        assert clamp_payment_day(None) is None


class TestDispatchNotes:
    @pytest.mark.asyncio
    async def test_errands_scenario(self):
        store = MockStore()
        dispatcher = ActionDispatcher(store)
        report = await dispatcher.dispatch([
            Action("add_note", {"notes": "- Buy milk\n- Call Mary", "category": "Errands"}),
        ])
        assert [n.title for n in store.notes] == ["Buy milk", "Call Mary"]
        assert len(store.created_categories) == 1
        errands_id = store.created_categories[0].id
        assert all(n.category_id == errands_id for n in store.notes)
        assert report.outcomes[0].status == APPLIED
        assert len(report.outcomes[0].entity_ids) == 2

    @pytest.mark.asyncio
    async def test_same_title_in_two_fields(self):
        store = MockStore()
        await ActionDispatcher(store).dispatch([
            Action("add_note", {"title": "Buy milk", "notes": "- Buy milk"}),
        ])
        assert len(store.notes) == 1

    @pytest.mark.asyncio
    async def test_two_actions_one_new_category(self):
        store = MockStore()
        await ActionDispatcher(store).dispatch([
            Action("add_note", {"title": "A", "category": "Ideas"}),
            Action("add_note", {"title": "B", "category": "ideas"}),
        ])
        assert len(store.created_categories) == 1
        assert store.notes[0].category_id == store.notes[1].category_id
        # Cache is built once per batch
        assert store.list_categories_calls == 1

    @pytest.mark.asyncio
    async def test_redispatch_no_duplicate_category(self):
        store = MockStore()
        dispatcher = ActionDispatcher(store)
        batch = [Action("add_note", {"title": "A", "category": "Ideas"})]
        await dispatcher.dispatch(batch)
        await dispatcher.dispatch(batch)
        assert len(store.created_categories) == 1
        assert store.list_categories_calls == 2

    @pytest.mark.asyncio
    async def test_custom_category_color(self):
        store = MockStore()
        await ActionDispatcher(store, category_color="#ff0000").dispatch([
            Action("add_note", {"title": "A", "category": "Red"}),
        ])
        assert store.created_categories[0].color == "#ff0000"

    @pytest.mark.asyncio
    async def test_empty_add_note_skipped(self):
        store = MockStore()
        report = await ActionDispatcher(store).dispatch([Action("add_note", {})])
        assert report.outcomes[0].status == SKIPPED
        assert store.list_categories_calls == 0


class TestDispatchCompleteNote:
    @pytest.mark.asyncio
    async def test_completes_first_match_only(self):
        store = MockStore(notes=[_note("n1", "Call Mary"), _note("n2", "Buy milk")])
        report = await ActionDispatcher(store).dispatch([
            Action("complete_note", {"title_query": "mary"}),
        ])
        assert store.notes[0].completed is True
        assert store.notes[1].completed is False
        assert report.outcomes[0].entity_ids == ["n1"]

    @pytest.mark.asyncio
    async def test_no_match_is_noop(self):
        store = MockStore(notes=[_note("n1", "Buy milk")])
        report = await ActionDispatcher(store).dispatch([
            Action("complete_note", {"title_query": "taxes"}),
        ])
        assert report.outcomes[0].status == SKIPPED
        assert store.notes[0].completed is False

    @pytest.mark.asyncio
    async def test_empty_query_matches_nothing(self):
        store = MockStore(notes=[_note("n1", "Buy milk")])
        report = await ActionDispatcher(store).dispatch([Action("complete_note", {})])
        assert report.outcomes[0].status == SKIPPED
        assert store.notes[0].completed is False


class TestDispatchClients:
    @pytest.mark.asyncio
    async def test_ivan_clamped_at_store_boundary(self):
        store = MockStore()
        report = await ActionDispatcher(store).dispatch([
            Action("add_client", {"name": "Ivan", "amount": "5 000₽", "payment_day": "31"}),
        ])
        client = store.clients[0]
        assert client.name == "Ivan"
        assert client.amount == 5000.0
        assert client.payment_type == "monthly"
        assert client.payment_day == 28
        assert report.outcomes[0].entity_ids == [client.id]

    @pytest.mark.asyncio
    async def test_add_service(self):
        store = MockStore()
        report = await ActionDispatcher(store).dispatch([
            Action("add_service", {"service_name": "Hosting", "cost": "10"}),
        ])
        assert report.outcomes[0].status == APPLIED
        assert store.services[0].service_name == "Hosting"

    @pytest.mark.asyncio
    async def test_mark_payment_by_id(self):
        store = MockStore()
        await ActionDispatcher(store).dispatch([
            Action("mark_payment", {"client_id": "c9", "period": "2025-03", "paid": False}),
        ])
        assert store.payments == [("c9", "2025-03", False)]

    @pytest.mark.asyncio
    async def test_mark_payment_by_name(self):
        store = MockStore(clients=[_client("c1", "Ivanova Maria"), _client("c2", "Ivan")])
        await ActionDispatcher(store).dispatch([
            Action("mark_payment", {"client_name": "ivan", "period": "2025-03"}),
        ])
        # Exact match wins over the earlier substring match
        assert store.payments == [("c2", "2025-03", True)]

    @pytest.mark.asyncio
    async def test_mark_payment_unknown_name_skipped(self):
        store = MockStore(clients=[_client("c1", "Ivan")])
        report = await ActionDispatcher(store).dispatch([
            Action("mark_payment", {"client_name": "Petr", "period": "2025-03"}),
        ])
        assert report.outcomes[0].status == SKIPPED
        assert store.payments == []

    @pytest.mark.asyncio
    async def test_mark_payment_numeric_unpaid(self):
        store = MockStore()
        await ActionDispatcher(store).dispatch([
            Action("mark_payment", {"client_id": "c1", "period": "2025-03", "paid": 0}),
            Action("mark_payment", {"client_id": "c1", "period": "2025-04", "paid": 1}),
        ])
        assert store.payments == [("c1", "2025-03", False), ("c1", "2025-04", True)]

    @pytest.mark.asyncio
    async def test_mark_payment_without_period_fails(self):
        store = MockStore()
        report = await ActionDispatcher(store).dispatch([
            Action("mark_payment", {"client_id": "c1"}),
        ])
        assert report.outcomes[0].status == FAILED
        assert "period" in report.outcomes[0].error


class TestDispatchBatch:
    @pytest.mark.asyncio
    async def test_failure_isolated(self):
        store = MockStore()
        store.fail_on_client_named = "Broken"
        report = await ActionDispatcher(store).dispatch([
            Action("add_client", {"name": "A"}),
            Action("add_client", {"name": "Broken"}),
            Action("add_client", {"name": "B"}),
        ])
        assert [c.name for c in store.clients] == ["A", "B"]
        assert [o.status for o in report.outcomes] == [APPLIED, FAILED, APPLIED]
        assert report.outcomes[1].error == "disk full"
        assert len(report.failed) == 1
        assert report.changed is True

    @pytest.mark.asyncio
    async def test_huge_amount_between_valid(self):
        store = MockStore()
        report = await ActionDispatcher(store).dispatch([
            Action("add_client", {"name": "A"}),
            Action("add_client", {"name": "Big", "amount": 10**400}),
            Action("add_client", {"name": "B"}),
        ])
        assert [c.name for c in store.clients] == ["A", "Big", "B"]
        assert store.clients[1].amount is None
        assert [o.status for o in report.outcomes] == [APPLIED, APPLIED, APPLIED]

    @pytest.mark.asyncio
    async def test_parser_error_recorded_as_failure(self):
        def flaky_parse(action):
            if action.data.get("name") == "Bad":
                raise OverflowError("int too large to convert to float")
            return parse_command(action)

        store = MockStore()
        with patch("blueprint.domain.dispatcher.parse_command", side_effect=flaky_parse):
            report = await ActionDispatcher(store).dispatch([
                Action("add_client", {"name": "A"}),
                Action("add_client", {"name": "Bad"}),
                Action("add_client", {"name": "B"}),
            ])
        assert [c.name for c in store.clients] == ["A", "B"]
        assert [o.status for o in report.outcomes] == [APPLIED, FAILED, APPLIED]
        assert "too large" in report.outcomes[1].error

    @pytest.mark.asyncio
    async def test_malformed_between_valid(self):
        store = MockStore()
        report = await ActionDispatcher(store).dispatch([
            Action("add_note", {"title": "A"}),
            Action("add_note", {"notes": 42, "title": ["", None]}),
            Action("add_note", {"title": "B"}),
        ])
        assert [n.title for n in store.notes] == ["A", "B"]
        assert [o.status for o in report.outcomes] == [APPLIED, SKIPPED, APPLIED]

    @pytest.mark.asyncio
    async def test_unknown_kind_ignored(self):
        store = MockStore()
        report = await ActionDispatcher(store).dispatch([
            Action("launch_rocket", {}),
            Action("add_note", {"title": "A"}),
        ])
        assert report.outcomes[0].status == IGNORED
        assert report.outcomes[1].status == APPLIED

    @pytest.mark.asyncio
    async def test_empty_batch(self):
        report = await ActionDispatcher(MockStore()).dispatch([])
        assert report.outcomes == []
        assert report.changed is False

    @pytest.mark.asyncio
    async def test_concurrent_batches_share_category(self):
        store = MockStore()
        dispatcher = ActionDispatcher(store)
        await asyncio.gather(
            dispatcher.dispatch([Action("add_note", {"title": "A", "category": "New"})]),
            dispatcher.dispatch([Action("add_note", {"title": "B", "category": "New"})]),
        )
        assert len(store.created_categories) == 1

    @pytest.mark.asyncio
    async def test_report_to_dict(self):
        report = await ActionDispatcher(MockStore()).dispatch([Action("add_note", {"title": "A"})])
        data = report.to_dict()
        assert data["outcomes"][0]["action"] == "add_note"
        assert data["outcomes"][0]["status"] == APPLIED
        assert data["outcomes"][0]["error"] is None
