"""Aggregation engine - pure derived views over a transaction collection"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional, Tuple

from finance_tracker.config import settings
from finance_tracker.domain.categories import INCOME, EXPENSE, TRANSACTION_TYPES
from finance_tracker.domain.models import (
    Transaction,
    Totals,
    CategoryTotal,
    CategoryShare,
    MonthBucket,
    CategorySeries,
    DailySeries,
    MonthSummary,
)
from finance_tracker.utils.date_utils import month_label

ZERO = Decimal("0")


def coerce_amount(value: Any) -> Decimal:
    """
    Coerce a raw amount to a Decimal without ever raising.

    Numbers, Decimals and numeric strings convert; anything else (None,
    booleans, garbage strings, NaN, infinities) counts as 0 so a bad record
    skews the aggregate instead of halting the view.
    """
    if value is None or isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation:
            return ZERO
    else:
        return ZERO

    return amount if amount.is_finite() else ZERO


def split_by_type(transactions: Iterable[Transaction]) -> Tuple[List[Transaction], List[Transaction]]:
    """Separate income from expenses, preserving input order. Unknown types are dropped."""
    income: List[Transaction] = []
    expenses: List[Transaction] = []
    for txn in transactions:
        if txn.type == INCOME:
            income.append(txn)
        elif txn.type == EXPENSE:
            expenses.append(txn)
    return income, expenses


def compute_totals(transactions: Iterable[Transaction]) -> Totals:
    """Sum amounts per type. Every transaction counts, even if its amount coerces to 0."""
    income = ZERO
    expense = ZERO
    for txn in transactions:
        if txn.type == INCOME:
            income += coerce_amount(txn.amount)
        elif txn.type == EXPENSE:
            expense += coerce_amount(txn.amount)
    return Totals(income=income, expense=expense)


def compute_balance(transactions: Iterable[Transaction]) -> Decimal:
    return compute_totals(transactions).balance


def group_by_category(transactions: Iterable[Transaction]) -> Dict[str, Decimal]:
    """
    Sum amounts per category.

    Categories appear in first-seen order; categories absent from the input
    are never zero-filled.
    """
    totals: Dict[str, Decimal] = {}
    for txn in transactions:
        totals[txn.category] = totals.get(txn.category, ZERO) + coerce_amount(txn.amount)
    return totals


def top_categories(transactions: Iterable[Transaction], limit: Optional[int] = None) -> List[CategoryTotal]:
    """
    Rank categories by total, highest first.

    Requirements:
    - At most `limit` entries (default from settings)
    - Ties keep first-seen order (sorted() is stable, also with reverse=True)
    """
    if limit is None:
        limit = settings.top_categories_limit
    if limit <= 0:
        return []

    ranked = sorted(
        group_by_category(transactions).items(),
        key=lambda item: item[1],
        reverse=True,
    )
    return [CategoryTotal(category=category, amount=amount) for category, amount in ranked[:limit]]


def highest_category(transactions: Iterable[Transaction]) -> CategoryTotal:
    """First category with the largest total, or ("None", 0) when there is nothing to rank"""
    best = CategoryTotal(category="None", amount=ZERO)
    for category, amount in group_by_category(transactions).items():
        if amount > best.amount:
            best = CategoryTotal(category=category, amount=amount)
    return best


def category_shares(transactions: Iterable[Transaction]) -> List[CategoryShare]:
    """Category totals with their percentage of the overall total"""
    grouped = group_by_category(transactions)
    total = sum(grouped.values(), ZERO)

    shares = []
    for category, amount in grouped.items():
        # Zero total (empty or all-zero input) must not divide
        percentage = round(float(amount / total * 100), 2) if total else 0.0
        shares.append(CategoryShare(category=category, amount=amount, percentage=percentage))
    return shares


def group_by_month(transactions: Iterable[Transaction]) -> List[MonthBucket]:
    """
    Bucket transactions by calendar (year, month) of their timestamp.

    Buckets are sorted newest first. Income and expense stay in separate
    sub-collections in input order; every income or expense transaction
    lands in exactly one bucket.
    """
    months: Dict[Tuple[int, int], Tuple[List[Transaction], List[Transaction]]] = {}
    for txn in transactions:
        if txn.type not in TRANSACTION_TYPES:
            continue
        key = (txn.timestamp.year, txn.timestamp.month)
        income, expenses = months.setdefault(key, ([], []))
        if txn.type == INCOME:
            income.append(txn)
        elif txn.type == EXPENSE:
            expenses.append(txn)

    return [
        MonthBucket(
            year=year,
            month=month,
            display_label=month_label(year, month),
            income_transactions=tuple(income),
            expense_transactions=tuple(expenses),
        )
        for (year, month), (income, expenses) in sorted(months.items(), reverse=True)
    ]


def category_color(index: int) -> str:
    """Evenly spread hue for the index-th slice of a chart"""
    hue = (index * 137.5) % 360
    return f"hsl({hue:g}, 70%, 65%)"


def build_category_series(transactions: Iterable[Transaction], transaction_type: str) -> CategorySeries:
    """Labels/values/colors for a category chart, restricted to one type"""
    grouped = group_by_category(txn for txn in transactions if txn.type == transaction_type)
    labels = tuple(grouped.keys())
    return CategorySeries(
        labels=labels,
        values=tuple(grouped.values()),
        colors=tuple(category_color(i) for i in range(len(labels))),
    )


def build_daily_series(
    transactions: Iterable[Transaction],
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> DailySeries:
    """
    Per-day income and expense totals for one calendar month.

    Requirements:
    - Defaults to the current calendar month
    - Dates ascending; values positionally aligned with dates
    - A day with no transactions of a type reports 0 for that type
    """
    if year is None or month is None:
        today = date.today()
        year = today.year if year is None else year
        month = today.month if month is None else month

    income_by_day: Dict[date, Decimal] = {}
    expense_by_day: Dict[date, Decimal] = {}
    for txn in transactions:
        day = txn.timestamp.date()
        if day.year != year or day.month != month:
            continue
        target = income_by_day if txn.type == INCOME else expense_by_day
        target[day] = target.get(day, ZERO) + coerce_amount(txn.amount)

    dates = tuple(sorted(set(income_by_day) | set(expense_by_day)))
    return DailySeries(
        dates=dates,
        income_values=tuple(income_by_day.get(day, ZERO) for day in dates),
        expense_values=tuple(expense_by_day.get(day, ZERO) for day in dates),
    )


def summarize_month(bucket: MonthBucket) -> MonthSummary:
    """Totals, chart series and leading categories for one month bucket"""
    return MonthSummary(
        bucket=bucket,
        totals=compute_totals(bucket.transactions),
        income_series=build_category_series(bucket.income_transactions, INCOME),
        expense_series=build_category_series(bucket.expense_transactions, EXPENSE),
        top_income=highest_category(bucket.income_transactions),
        top_expense=highest_category(bucket.expense_transactions),
    )
