"""Transactions and finance summaries."""

from quickplanner.finance.transactions import (
    DateRange,
    ImportSummary,
    TransactionManager,
    month_key,
)

__all__ = [
    "DateRange",
    "ImportSummary",
    "TransactionManager",
    "month_key",
]
