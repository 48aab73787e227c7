"""Pytest fixtures for testing"""

import pytest
import httpx
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable
from fastapi import FastAPI
from mock_server.main import create_app
from finance_tracker.domain.models import Transaction, TransactionLists
from finance_tracker.infrastructure.clients.transactions import TransactionClient
from finance_tracker.sync.store import TransactionStore


@pytest.fixture
def make_transaction() -> Callable[..., Transaction]:
    """Factory for transactions with sensible defaults"""
    counter = {"next": 1}

    def _make(
        type: str = "expense",
        amount: object = "10",
        category: str = "Shopping",
        description: str = "Test",
        timestamp: datetime | None = None,
        id: str | None = None,
    ) -> Transaction:
        if id is None:
            id = str(counter["next"])
            counter["next"] += 1
        return Transaction(
            id=id,
            type=type,
            # Raw values other than int/str pass through to exercise coercion
            amount=Decimal(str(amount)) if isinstance(amount, (int, str)) else amount,
            category=category,
            description=description,
            timestamp=timestamp or datetime(2024, 5, 15, 12, 0),
        )

    return _make


@pytest.fixture
def sample_transactions(make_transaction) -> list[Transaction]:
    """Three months of salary plus regular spending"""
    base = datetime(2024, 3, 1, 9, 0)
    transactions = []

    # Monthly salary
    for month in range(3):
        transactions.append(
            make_transaction(
                type="income",
                amount="3000",
                category="Salary",
                description="Salary Deposit",
                timestamp=base + timedelta(days=month * 31),
            )
        )

    # Weekly groceries plus a monthly bill
    for day in range(0, 90, 7):
        transactions.append(
            make_transaction(
                amount="120.50",
                category="Food & Dining",
                description="Groceries",
                timestamp=base + timedelta(days=day),
            )
        )
    for month in range(3):
        transactions.append(
            make_transaction(
                amount="80",
                category="Bills & Utilities",
                description="Electricity",
                timestamp=base + timedelta(days=month * 31 + 10),
            )
        )

    return transactions


@pytest.fixture
def mock_lists(make_transaction) -> TransactionLists:
    """Listing the mocked transport client returns"""
    return TransactionLists(
        income=(make_transaction(type="income", amount="1000", category="Salary", id="1"),),
        expenses=(make_transaction(amount="250", category="Food & Dining", id="2"),),
    )


@pytest.fixture
def mock_app() -> FastAPI:
    """Fresh in-memory transaction server"""
    return create_app()


@pytest.fixture
def api_client(mock_app: FastAPI) -> TransactionClient:
    """Real HTTP client wired to the mock server without a network"""
    return TransactionClient(
        base_url="http://testserver",
        transport=httpx.ASGITransport(app=mock_app),
        backoff_base=0,
    )


@pytest.fixture
def store(api_client: TransactionClient) -> TransactionStore:
    return TransactionStore(api_client)
