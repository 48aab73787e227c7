"""Wiring for a per-session transaction store"""

import httpx

from finance_tracker.config import settings
from finance_tracker.infrastructure.clients.transactions import TransactionClient
from finance_tracker.infrastructure.observability.logging import setup_logging
from finance_tracker.sync.store import TransactionStore


def get_transaction_client(transport: httpx.AsyncBaseTransport | None = None) -> TransactionClient:
    """Provide transaction API client instance"""
    return TransactionClient(transport=transport)


def create_store(
    client: TransactionClient | None = None,
    configure_logging: bool = True,
) -> TransactionStore:
    """Create a store scoped to one UI session"""
    if configure_logging:
        setup_logging(settings.log_level)
    return TransactionStore(client or get_transaction_client())
