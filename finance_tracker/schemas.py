"""Pydantic schemas for transaction payload validation"""

import datetime as dt
from typing import Any, Dict, Literal, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator, model_validator

from finance_tracker.domain.categories import categories_for
from finance_tracker.domain.exceptions import ValidationError

REQUIRED_FIELDS = ("type", "amount", "description", "category")
MISSING_FIELDS_MESSAGE = "Please fill in all required fields"


class TransactionPayload(BaseModel):
    """Body for create/update calls against the transaction API"""

    type: Literal["income", "expense"]
    amount: float = Field(..., gt=0, allow_inf_nan=False)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    date: dt.date = Field(default_factory=dt.date.today)

    @field_validator("description", "category", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("amount", mode="before")
    @classmethod
    def reject_bool_amount(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("amount must be numeric")
        return value

    @model_validator(mode="after")
    def category_matches_type(self) -> "TransactionPayload":
        if self.category not in categories_for(self.type):
            raise ValueError(f"Category '{self.category}' is not a valid {self.type} category")
        return self

    def to_request(self) -> Dict[str, Any]:
        """JSON body with amount as a number and date as YYYY-MM-DD"""
        return self.model_dump(mode="json")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_transaction(data: Mapping[str, Any], default_date: Optional[dt.date] = None) -> TransactionPayload:
    """
    Validate form data before any transport call.

    A blank date falls back to default_date, or to today when none is given.

    Raises:
        ValidationError: Missing required field, non-numeric or non-positive
            amount, unknown type, or a category outside the type's list
    """
    if any(_is_blank(data.get(name)) for name in REQUIRED_FIELDS):
        raise ValidationError(MISSING_FIELDS_MESSAGE)

    fields = {key: value for key, value in data.items() if key in TransactionPayload.model_fields}
    if _is_blank(fields.get("date")):
        fields.pop("date", None)
        if default_date is not None:
            fields["date"] = default_date

    try:
        return TransactionPayload(**fields)
    except PydanticValidationError as e:
        raise ValidationError(_first_error_message(e)) from e


def _first_error_message(error: PydanticValidationError) -> str:
    first = error.errors()[0]
    location = first["loc"][0] if first["loc"] else None
    if location == "amount":
        return "Amount must be a positive number"
    if location == "type":
        return "Type must be 'income' or 'expense'"
    if location == "date":
        return "Date must be a valid YYYY-MM-DD date"
    # Model-level errors carry "Value error, <message>"
    return first["msg"].removeprefix("Value error, ")
