"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple


@dataclass(frozen=True)
class Transaction:
    """Income or expense record from the transaction API"""

    id: str
    type: str  # "income" or "expense"
    amount: Decimal  # always positive, sign applied at aggregation time
    category: str
    description: str
    timestamp: datetime  # created_at if present, else date


@dataclass(frozen=True)
class TransactionLists:
    """Listing normalized at the transport boundary"""

    income: Tuple[Transaction, ...] = ()
    expenses: Tuple[Transaction, ...] = ()


@dataclass(frozen=True)
class Totals:
    income: Decimal
    expense: Decimal

    @property
    def balance(self) -> Decimal:
        return self.income - self.expense


@dataclass(frozen=True)
class CategoryTotal:
    category: str
    amount: Decimal


@dataclass(frozen=True)
class CategoryShare:
    """Category total with its percentage of the overall total"""

    category: str
    amount: Decimal
    percentage: float


@dataclass(frozen=True)
class MonthBucket:
    """Transactions sharing a calendar year and month"""

    year: int
    month: int  # 1-12
    display_label: str
    income_transactions: Tuple[Transaction, ...]
    expense_transactions: Tuple[Transaction, ...]

    @property
    def transactions(self) -> Tuple[Transaction, ...]:
        return self.income_transactions + self.expense_transactions


@dataclass(frozen=True)
class CategorySeries:
    """Chart-ready category breakdown, positionally aligned"""

    labels: Tuple[str, ...]
    values: Tuple[Decimal, ...]
    colors: Tuple[str, ...]


@dataclass(frozen=True)
class DailySeries:
    """Chart-ready per-day income and expense values, positionally aligned"""

    dates: Tuple[date, ...]
    income_values: Tuple[Decimal, ...]
    expense_values: Tuple[Decimal, ...]


@dataclass(frozen=True)
class MonthSummary:
    """Everything the monthly panel shows for one bucket"""

    bucket: MonthBucket
    totals: Totals
    income_series: CategorySeries
    expense_series: CategorySeries
    top_income: CategoryTotal
    top_expense: CategoryTotal


@dataclass(frozen=True)
class Snapshot:
    """Last-known-good copy of the server's transactions plus totals"""

    income_transactions: Tuple[Transaction, ...] = ()
    expense_transactions: Tuple[Transaction, ...] = ()
    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")

    @property
    def transactions(self) -> Tuple[Transaction, ...]:
        return self.income_transactions + self.expense_transactions

    @property
    def balance(self) -> Decimal:
        return self.income - self.expenses

    def find(self, transaction_id: object) -> Optional[Transaction]:
        """Look up a transaction, matching ids by their string form"""
        wanted = str(transaction_id)
        for transaction in self.transactions:
            if transaction.id == wanted:
                return transaction
        return None


class SyncStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"
    STALE = "stale"  # mutation accepted, resync failed


class Outcome(str, Enum):
    """How a store operation settled"""

    OK = "ok"
    INVALID = "invalid"
    NOT_FOUND = "not_found"
    REJECTED = "rejected"
    STALE = "stale"


@dataclass(frozen=True)
class StoreState:
    status: SyncStatus = SyncStatus.IDLE
    snapshot: Snapshot = field(default_factory=Snapshot)
    error: Optional[str] = None
    busy: bool = False


@dataclass(frozen=True)
class OperationResult:
    """Result handed back to the UI after a store operation"""

    outcome: Outcome
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        # The server accepted the change even when the resync failed
        return self.outcome in (Outcome.OK, Outcome.STALE)
