"""
Transaction Models

A Transaction is one line of an imported bank/budget export.
Amounts are signed: negative values are expenses, positive are income.

DESIGN DECISION: Amounts are Decimal, never float.
Summing many small float amounts drifts; Decimal keeps cents exact.
"""

import datetime as dt
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from quickplanner.config import get_settings


UNKNOWN_PAYEE = "Unknown Payee"
UNKNOWN_ACCOUNT = "Unknown Account"

CURRENCY_SYMBOLS = {
    "CAD": "$",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "INR": "₹",
}


class Transaction(BaseModel):
    """An imported financial transaction."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique transaction ID"
    )
    date: dt.date = Field(
        ...,
        description="Date the transaction was booked"
    )
    payee: str = Field(
        default=UNKNOWN_PAYEE,
        description="Counterparty"
    )
    amount: Decimal = Field(
        ...,
        description="Signed amount (negative = expense)"
    )
    category: str = ""
    description: str = ""
    account: str = Field(
        default=UNKNOWN_ACCOUNT,
        description="Account the transaction belongs to"
    )
    category_group: str = ""

    @property
    def is_expense(self) -> bool:
        return self.amount < 0

    @property
    def is_income(self) -> bool:
        return self.amount > 0

    def formatted_amount(self, currency_code: Optional[str] = None) -> str:
        """
        Absolute amount with currency symbol, e.g. "$1,234.50".

        `currency_code` defaults to the IMPORT_CURRENCY_CODE setting.
        """
        currency_code = currency_code or get_settings().imports.currency_code
        symbol = CURRENCY_SYMBOLS.get(currency_code.upper(), f"{currency_code.upper()} ")
        return f"{symbol}{abs(self.amount):,.2f}"


class StoredTransaction(BaseModel):
    """A transaction as kept by the repository, with import metadata."""

    transaction: Transaction
    import_source: str = Field(
        default="",
        description="File name the transaction was imported from"
    )
    imported_at: datetime = Field(default_factory=datetime.utcnow)
