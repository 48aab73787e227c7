"""Transaction API HTTP client with listing normalization and read retries"""

import asyncio
import httpx
from typing import Any, Dict, Optional
from urllib.parse import quote

from finance_tracker.config import settings
from finance_tracker.domain.aggregation import coerce_amount
from finance_tracker.domain.categories import INCOME, EXPENSE, TRANSACTION_TYPES
from finance_tracker.domain.exceptions import TransportError, InvalidTransactionDataError
from finance_tracker.domain.models import Transaction, TransactionLists
from finance_tracker.infrastructure.observability.metrics import transport_latency_histogram, transport_failure_counter
from finance_tracker.schemas import TransactionPayload
from finance_tracker.utils.date_utils import resolve_timestamp

FETCH_FAILED = "Failed to fetch transactions"
CREATE_FAILED = "Failed to add transaction"
UPDATE_FAILED = "Failed to edit transaction"
DELETE_FAILED = "Failed to delete transaction"


def parse_transaction(raw: Any, list_type: Optional[str] = None) -> Transaction:
    """
    Build a Transaction from one API record.

    Args:
        raw: Record as decoded from JSON
        list_type: Type implied by the list the record came from, if any

    Raises:
        InvalidTransactionDataError: Missing id, unknown type or no usable timestamp
    """
    if not isinstance(raw, dict):
        raise InvalidTransactionDataError(f"Expected an object, got {type(raw).__name__}")

    txn_type = raw.get("type") or list_type
    if txn_type not in TRANSACTION_TYPES:
        raise InvalidTransactionDataError(f"Unknown transaction type: {txn_type!r}")
    if list_type is not None and txn_type != list_type:
        raise InvalidTransactionDataError(f"{txn_type} transaction listed under {list_type}")

    raw_id = raw.get("id")
    if raw_id is None or raw_id == "":
        raise InvalidTransactionDataError("Transaction without id")

    try:
        timestamp = resolve_timestamp(raw.get("created_at"), raw.get("date"))
    except ValueError as e:
        raise InvalidTransactionDataError(f"Transaction {raw_id}: {e}") from e

    return Transaction(
        id=str(raw_id),
        type=txn_type,
        amount=coerce_amount(raw.get("amount")),
        category=str(raw.get("category") or ""),
        description=str(raw.get("description") or ""),
        timestamp=timestamp,
    )


def normalize_transactions(data: Any) -> TransactionLists:
    """
    Resolve either listing shape into separate income/expense collections.

    The server returns a flat list of typed records or an object with
    "income" and "expenses" lists; both end up as TransactionLists.
    """
    if data is None:
        return TransactionLists()

    if isinstance(data, list):
        parsed = [parse_transaction(raw) for raw in data]
        return TransactionLists(
            income=tuple(t for t in parsed if t.type == INCOME),
            expenses=tuple(t for t in parsed if t.type == EXPENSE),
        )

    if isinstance(data, dict):
        return TransactionLists(
            income=tuple(parse_transaction(raw, INCOME) for raw in data.get("income") or []),
            expenses=tuple(parse_transaction(raw, EXPENSE) for raw in data.get("expenses") or []),
        )

    raise InvalidTransactionDataError(f"Unexpected listing shape: {type(data).__name__}")


def _server_message(response: httpx.Response) -> Optional[str]:
    """Error text the server put in the body, if any"""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return None


class TransactionClient:
    """Client for the external transaction API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_base: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = max(1, max_retries if max_retries is not None else settings.fetch_max_retries)
        self.backoff_base = backoff_base if backoff_base is not None else settings.fetch_backoff_base
        self._transport = transport

    @property
    def collection_url(self) -> str:
        return f"{self.base_url}/api/transactions"

    def item_url(self, transaction_id: object) -> str:
        return f"{self.collection_url}/{quote(str(transaction_id), safe='')}"

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def list_transactions(self) -> TransactionLists:
        """
        Fetch the full transaction list.

        Retry strategy (reads are idempotent):
        - Exponential backoff: base, 2*base, 4*base, ...
        - Retries on 5xx errors and network failures, up to max_retries attempts

        Raises:
            TransportError: On timeout, HTTP errors, rejection or invalid data
        """
        attempt = 0
        async with self._http() as client:
            while True:
                attempt += 1
                try:
                    with transport_latency_histogram.labels(operation="list").time():
                        response = await client.get(self.collection_url)
                except httpx.RequestError as e:
                    if attempt >= self.max_retries:
                        raise self._request_failed("list", FETCH_FAILED, e) from e
                    transport_failure_counter.labels(operation="list").inc()
                else:
                    if response.status_code < 500 or attempt >= self.max_retries:
                        break
                    transport_failure_counter.labels(operation="list").inc()

                backoff = self.backoff_base * (2 ** (attempt - 1))
                await asyncio.sleep(backoff)

        body = self._check_response("list", response, FETCH_FAILED)
        listing = self._extract_listing(body)
        try:
            return normalize_transactions(listing)
        except InvalidTransactionDataError as e:
            transport_failure_counter.labels(operation="list").inc()
            raise TransportError(f"Invalid transaction data from server: {e}") from e

    async def create_transaction(self, payload: TransactionPayload) -> Any:
        return await self._mutate("create", CREATE_FAILED, "POST", self.collection_url, payload.to_request())

    async def update_transaction(self, transaction_id: object, payload: TransactionPayload) -> Any:
        return await self._mutate("update", UPDATE_FAILED, "PUT", self.item_url(transaction_id), payload.to_request())

    async def delete_transaction(self, transaction_id: object) -> Any:
        return await self._mutate("delete", DELETE_FAILED, "DELETE", self.item_url(transaction_id))

    async def _mutate(
        self,
        operation: str,
        fallback: str,
        method: str,
        url: str,
        payload: Dict[str, Any] | None = None,
    ) -> Any:
        """Single attempt; mutations are never retried"""
        async with self._http() as client:
            try:
                with transport_latency_histogram.labels(operation=operation).time():
                    response = await client.request(method, url, json=payload)
            except httpx.RequestError as e:
                raise self._request_failed(operation, fallback, e) from e

        return self._check_response(operation, response, fallback)

    @staticmethod
    def _extract_listing(body: Any) -> Any:
        """Locate the listing: a bare list, a `transactions` member, or income/expenses at the top level"""
        if not isinstance(body, dict):
            return body
        if "transactions" in body:
            return body["transactions"]
        if "income" in body or "expenses" in body:
            return body
        transport_failure_counter.labels(operation="list").inc()
        raise TransportError("Invalid transaction data from server: no transaction listing in response")

    def _request_failed(self, operation: str, fallback: str, error: httpx.RequestError) -> TransportError:
        transport_failure_counter.labels(operation=operation).inc()
        if isinstance(error, httpx.TimeoutException):
            return TransportError(f"Transaction API timeout after {self.timeout}s")
        return TransportError(fallback)

    def _check_response(self, operation: str, response: httpx.Response, fallback: str) -> Any:
        """Decoded body of a successful response; HTTP errors and success=false raise"""
        if response.is_error:
            transport_failure_counter.labels(operation=operation).inc()
            raise TransportError(_server_message(response) or f"{fallback} ({response.status_code})")

        try:
            body = response.json() if response.content else None
        except ValueError as e:
            transport_failure_counter.labels(operation=operation).inc()
            raise TransportError(f"{fallback}: response is not JSON") from e

        if isinstance(body, dict) and body.get("success") is False:
            transport_failure_counter.labels(operation=operation).inc()
            raise TransportError(_server_message(response) or fallback)
        return body
