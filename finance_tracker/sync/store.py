"""Transaction store - owns the snapshot and resynchronizes after every mutation"""

import logging
import time
from dataclasses import replace
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple

from finance_tracker.domain.aggregation import compute_totals
from finance_tracker.domain.exceptions import NotFoundError, TransportError, ValidationError
from finance_tracker.domain.models import (
    OperationResult,
    Outcome,
    Snapshot,
    StoreState,
    SyncStatus,
    Transaction,
)
from finance_tracker.infrastructure.clients.transactions import TransactionClient
from finance_tracker.infrastructure.observability.logging import log_operation
from finance_tracker.infrastructure.observability.metrics import record_operation, record_snapshot
from finance_tracker.schemas import validate_transaction

logger = logging.getLogger(__name__)

Listener = Callable[[StoreState], None]
Mutation = Callable[[], Awaitable[Any]]

NOT_FOUND_MESSAGE = "Transaction not found"
UNEXPECTED_ERROR = "Unexpected error"


class TransactionStore:
    """
    Explicitly owned state container for one UI session.

    The snapshot is only ever replaced wholesale by a completed fetch, so
    overlapping operations converge on whichever fetch finished last.

    Transitions:
    - fetch: LOADING -> IDLE with a fresh snapshot, or ERROR keeping the old one
    - create/update/delete: transport call, then fetch
        - call fails: ERROR, no fetch, snapshot untouched
        - call succeeds, fetch fails: STALE, snapshot untouched
        - both succeed: IDLE with a fresh snapshot
    - invalid input or unknown id: no transport call, state untouched
    """

    def __init__(self, client: TransactionClient):
        self._client = client
        self._state = StoreState()
        self._in_flight = 0
        self._listeners: List[Listener] = []

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def snapshot(self) -> Snapshot:
        return self._state.snapshot

    @property
    def status(self) -> SyncStatus:
        return self._state.status

    @property
    def error(self) -> Optional[str]:
        return self._state.error

    @property
    def is_loading(self) -> bool:
        return self._state.busy

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a state listener; call the returned function to stop receiving updates"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def get_transaction(self, transaction_id: object) -> Transaction:
        """
        Raises:
            NotFoundError: If the id is not in the current snapshot
        """
        transaction = self._state.snapshot.find(transaction_id)
        if transaction is None:
            raise NotFoundError(transaction_id)
        return transaction

    async def fetch(self) -> OperationResult:
        return await self._run("fetch")

    async def create(self, data: Mapping[str, Any]) -> OperationResult:
        try:
            payload = validate_transaction(data)
        except ValidationError as e:
            return self._settle_locally("create", Outcome.INVALID, str(e))

        return await self._run("create", lambda: self._client.create_transaction(payload))

    async def update(self, transaction_id: object, data: Mapping[str, Any]) -> OperationResult:
        existing = self._state.snapshot.find(transaction_id)
        if existing is None:
            return self._settle_locally("update", Outcome.NOT_FOUND, NOT_FOUND_MESSAGE, transaction_id)
        try:
            # Edits without a date keep the record's current day
            payload = validate_transaction(data, default_date=existing.timestamp.date())
        except ValidationError as e:
            return self._settle_locally("update", Outcome.INVALID, str(e), transaction_id)

        return await self._run(
            "update",
            lambda: self._client.update_transaction(transaction_id, payload),
            transaction_id,
        )

    async def delete(self, transaction_id: object) -> OperationResult:
        if self._state.snapshot.find(transaction_id) is None:
            return self._settle_locally("delete", Outcome.NOT_FOUND, NOT_FOUND_MESSAGE, transaction_id)

        return await self._run(
            "delete",
            lambda: self._client.delete_transaction(transaction_id),
            transaction_id,
        )

    async def _run(
        self,
        operation: str,
        mutation: Optional[Mutation] = None,
        transaction_id: object = None,
    ) -> OperationResult:
        """Mark busy, settle the operation, and clear busy on every exit path"""
        started = time.perf_counter()
        self._in_flight += 1
        self._set_state(status=SyncStatus.LOADING)

        changes: Dict[str, Any] = {"status": SyncStatus.ERROR, "error": UNEXPECTED_ERROR}
        try:
            changes, result = await self._settle(mutation)
        finally:
            self._in_flight -= 1
            self._set_state(**changes)

        self._report(operation, result, started, transaction_id)
        return result

    async def _settle(self, mutation: Optional[Mutation]) -> Tuple[Dict[str, Any], OperationResult]:
        if mutation is not None:
            try:
                await mutation()
            except TransportError as e:
                return {"status": SyncStatus.ERROR, "error": str(e)}, OperationResult(Outcome.REJECTED, str(e))

        try:
            snapshot = await self._load()
        except TransportError as e:
            if mutation is None:
                return {"status": SyncStatus.ERROR, "error": str(e)}, OperationResult(Outcome.REJECTED, str(e))
            message = f"Change saved but refresh failed, list may be out of date: {e}"
            return {"status": SyncStatus.STALE, "error": message}, OperationResult(Outcome.STALE, message)

        return {"status": SyncStatus.IDLE, "error": None, "snapshot": snapshot}, OperationResult(Outcome.OK)

    async def _load(self) -> Snapshot:
        lists = await self._client.list_transactions()
        totals = compute_totals(lists.income + lists.expenses)
        record_snapshot(len(lists.income), len(lists.expenses))
        return Snapshot(
            income_transactions=lists.income,
            expense_transactions=lists.expenses,
            income=totals.income,
            expenses=totals.expense,
        )

    def _set_state(self, **changes: Any) -> None:
        self._state = replace(self._state, busy=self._in_flight > 0, **changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("State listener failed")

    def _settle_locally(
        self,
        operation: str,
        outcome: Outcome,
        message: str,
        transaction_id: object = None,
    ) -> OperationResult:
        result = OperationResult(outcome, message)
        self._report(operation, result, time.perf_counter(), transaction_id)
        return result

    def _report(self, operation: str, result: OperationResult, started: float, transaction_id: object) -> None:
        record_operation(operation, result.outcome.value)
        log_operation(
            operation=operation,
            outcome=result.outcome.value,
            duration_ms=(time.perf_counter() - started) * 1000,
            transaction_id=None if transaction_id is None else str(transaction_id),
            error=result.error,
        )
