"""Integration tests: store + real HTTP client against the mock transaction server"""

import pytest
import httpx
from datetime import datetime, timezone
from decimal import Decimal
from mock_server.main import create_app
from finance_tracker.domain.aggregation import group_by_month, top_categories
from finance_tracker.domain.models import Outcome, SyncStatus
from finance_tracker.infrastructure.clients.transactions import TransactionClient
from finance_tracker.sync.store import TransactionStore


pytestmark = pytest.mark.integration


def form(type="expense", amount="10", category="Shopping", description="Test"):
    return {"type": type, "amount": amount, "category": category, "description": description}


async def test_fetch_empty_server(store: TransactionStore):
    """Test fetching from an empty server yields an empty snapshot"""
    result = await store.fetch()

    assert result.outcome == Outcome.OK
    assert store.snapshot.transactions == ()
    assert store.snapshot.balance == 0


async def test_create_then_views(store: TransactionStore):
    """Test created transactions come back through the full resync"""
    await store.fetch()

    assert (await store.create(form("income", "1000", "Salary", "Pay"))).outcome == Outcome.OK
    assert (await store.create(form(amount="40"))).outcome == Outcome.OK
    assert (await store.create(form(amount="60"))).outcome == Outcome.OK

    snapshot = store.snapshot
    assert snapshot.income == 1000
    assert snapshot.expenses == 100
    assert snapshot.balance == 900
    assert top_categories(snapshot.expense_transactions, 3)[0].amount == Decimal("100")

    # Server stamps created_at with the current time
    buckets = group_by_month(snapshot.transactions)
    now = datetime.now(timezone.utc)
    assert [(b.year, b.month) for b in buckets] == [(now.year, now.month)]
    assert len(buckets[0].expense_transactions) == 2


async def test_update_and_delete_roundtrip(store: TransactionStore):
    """Test edits and deletes are reflected after resync"""
    await store.create(form(amount="25", category="Healthcare", description="Pharmacy"))
    txn_id = store.snapshot.expense_transactions[0].id

    result = await store.update(txn_id, form(amount="35", category="Healthcare", description="Pharmacy"))
    assert result.outcome == Outcome.OK
    assert store.get_transaction(txn_id).amount == 35

    result = await store.delete(txn_id)
    assert result.outcome == Outcome.OK
    assert store.snapshot.transactions == ()
    assert store.status == SyncStatus.IDLE


async def test_server_rejection_keeps_snapshot(mock_app, api_client: TransactionClient):
    """Test a 404 from the server surfaces its message and keeps the old snapshot"""
    session_a = TransactionStore(api_client)
    session_b = TransactionStore(api_client)
    await session_a.create(form())
    await session_b.fetch()
    txn_id = session_b.snapshot.transactions[0].id

    await session_a.delete(txn_id)
    before = session_b.snapshot
    result = await session_b.delete(txn_id)

    assert result.outcome == Outcome.REJECTED
    assert result.error == "Transaction not found"
    assert session_b.snapshot is before
    assert session_b.status == SyncStatus.ERROR


async def test_flat_listing_shape():
    """Test a server returning a flat list is normalized the same way"""
    client = TransactionClient(
        base_url="http://testserver",
        transport=httpx.ASGITransport(app=create_app(shape="flat")),
        backoff_base=0,
    )
    store = TransactionStore(client)

    await store.create(form("income", "500", "Freelance", "Logo"))
    await store.create(form(amount="20", category="Transportation", description="Taxi"))

    assert [t.category for t in store.snapshot.income_transactions] == ["Freelance"]
    assert [t.category for t in store.snapshot.expense_transactions] == ["Transportation"]
    assert store.snapshot.balance == 480


async def test_unreachable_server_is_error_state():
    """Test network failure becomes ERROR state, never an exception"""
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = TransactionClient(
        base_url="http://testserver",
        transport=httpx.MockTransport(refuse),
        max_retries=2,
        backoff_base=0,
    )
    store = TransactionStore(client)

    result = await store.fetch()

    assert result.outcome == Outcome.REJECTED
    assert store.status == SyncStatus.ERROR
    assert store.error == "Failed to fetch transactions"
    assert store.is_loading is False
