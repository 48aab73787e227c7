"""Transaction types and the client-owned category enumeration"""

from typing import Tuple

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES: Tuple[str, ...] = (INCOME, EXPENSE)

INCOME_CATEGORIES: Tuple[str, ...] = (
    "Salary",
    "Freelance",
    "Investment",
    "Other Income",
)

EXPENSE_CATEGORIES: Tuple[str, ...] = (
    "Food & Dining",
    "Transportation",
    "Shopping",
    "Entertainment",
    "Bills & Utilities",
    "Healthcare",
    "Education",
    "Other Expense",
)


def categories_for(transaction_type: str) -> Tuple[str, ...]:
    """Categories offered for a transaction type (empty for unknown types)"""
    if transaction_type == INCOME:
        return INCOME_CATEGORIES
    if transaction_type == EXPENSE:
        return EXPENSE_CATEGORIES
    return ()


def is_valid_category(transaction_type: str, category: str) -> bool:
    return category in categories_for(transaction_type)
