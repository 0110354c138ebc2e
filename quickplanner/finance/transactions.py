"""
Transaction Manager

Imports bank exports through the CSV decoder, keeps them in a
TransactionRepository and answers simple monthly questions
(income, expenses, net).

Flow of an import:
1. Decode bytes (bad rows are skipped and reported)
2. Persist the decoded transactions with the file name as source
3. Audit the counts

Decode-level failures (not UTF-8, no header/data) propagate to the
caller; they mean the file as a whole is unusable.
"""

import calendar
from collections import defaultdict
from datetime import date
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Optional, Union
from uuid import UUID

import structlog
from pydantic import BaseModel

from quickplanner.audit import AuditLogger, create_correlation_id
from quickplanner.models.transaction import Transaction
from quickplanner.parsers import CSVDecoder, ParseError, RowErrorPolicy
from quickplanner.services.storage import StorageError, TransactionRepository


logger = structlog.get_logger(__name__)

MONTH_KEY_FORMAT = "%B %Y"


def _months_before(day: date, months: int) -> date:
    """Same day `months` earlier, clamped to the end of shorter months."""
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


class DateRange(str, Enum):
    """Time windows for listing transactions."""
    LAST_MONTH = "Last Month"
    LAST_3_MONTHS = "Last 3 Months"
    LAST_6_MONTHS = "Last 6 Months"
    LAST_YEAR = "Last Year"
    ALL_TIME = "All Time"

    def start_date(self, today: Optional[date] = None) -> Optional[date]:
        """First day included, or None for all time."""
        today = today or date.today()
        months = {
            DateRange.LAST_MONTH: 1,
            DateRange.LAST_3_MONTHS: 3,
            DateRange.LAST_6_MONTHS: 6,
            DateRange.LAST_YEAR: 12,
        }.get(self)
        if months is None:
            return None
        return _months_before(today, months)


class ImportSummary(BaseModel):
    """Result of one CSV import."""

    source: str
    imported: int = 0
    skipped: int = 0


def month_key(day: date) -> str:
    """e.g. "March 2025"."""
    return day.strftime(MONTH_KEY_FORMAT)


class TransactionManager:
    """Imports, lists and summarizes transactions."""

    def __init__(
        self,
        repository: TransactionRepository,
        decoder: Optional[CSVDecoder] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._repository = repository
        self._decoder = decoder or CSVDecoder()
        self._audit_logger = audit_logger
        self.transactions: list[Transaction] = []
        self.selected_range = DateRange.ALL_TIME

    def import_bytes(self, data: bytes, source: str = "") -> ImportSummary:
        """
        Decode and store one CSV export.

        Raises:
            FormatError: If the data is not UTF-8
            MissingDataError: If the header or data rows are missing
            StorageError: If the transactions cannot be saved
        """
        correlation_id = create_correlation_id()
        logger.info("transaction_import_started", source=source, size=len(data))

        try:
            report = self._decoder.decode_transactions_with_report(
                data, on_row_error=RowErrorPolicy.SKIP
            )
        except ParseError as e:
            logger.error("transaction_import_failed", source=source, error=str(e))
            if self._audit_logger:
                self._audit_logger.log_import_failed(source, str(e), correlation_id)
            raise

        try:
            imported = self._repository.save(report.transactions, import_source=source)
        except StorageError as e:
            logger.error("transaction_save_failed", source=source, error=str(e))
            if self._audit_logger:
                self._audit_logger.log_storage_error("save_transactions", str(e), correlation_id)
            raise

        if self._audit_logger:
            if report.skipped_rows:
                self._audit_logger.log_transaction_rows_skipped(
                    source=source,
                    rows=[row.model_dump() for row in report.skipped_rows],
                    correlation_id=correlation_id,
                )
            self._audit_logger.log_transactions_imported(
                source=source,
                imported=imported,
                skipped=report.skipped_count,
                correlation_id=correlation_id,
            )

        self.load_transactions(self.selected_range)
        return ImportSummary(source=source, imported=imported, skipped=report.skipped_count)

    def import_file(self, path: Union[str, Path]) -> ImportSummary:
        """Read a CSV file and import it under its file name."""
        path = Path(path)
        return self.import_bytes(path.read_bytes(), source=path.name)

    def load_transactions(
        self,
        date_range: DateRange = DateRange.ALL_TIME,
        today: Optional[date] = None,
    ) -> list[Transaction]:
        """Transactions inside `date_range`, newest first."""
        self.selected_range = date_range
        self.transactions = self._repository.fetch(since=date_range.start_date(today))
        return self.transactions

    def transactions_by_month(self) -> dict[str, list[Transaction]]:
        """Every stored transaction grouped by "Month YYYY"."""
        grouped: dict[str, list[Transaction]] = defaultdict(list)
        for transaction in self._repository.fetch():
            grouped[month_key(transaction.date)].append(transaction)
        return dict(grouped)

    def _month(self, month: str) -> list[Transaction]:
        return self.transactions_by_month().get(month, [])

    def total_income(self, month: str) -> Decimal:
        return sum((t.amount for t in self._month(month) if t.is_income), Decimal("0"))

    def total_expenses(self, month: str) -> Decimal:
        """Absolute value of the month's negative amounts."""
        return abs(sum((t.amount for t in self._month(month) if t.is_expense), Decimal("0")))

    def net_income(self, month: str) -> Decimal:
        return sum((t.amount for t in self._month(month)), Decimal("0"))

    def delete_transaction(self, transaction_id: UUID) -> bool:
        deleted = self._repository.delete_by_id(transaction_id)
        if deleted and self._audit_logger:
            self._audit_logger.log_transactions_deleted(1, transaction_id=transaction_id)
        self.load_transactions(self.selected_range)
        return deleted

    def delete_all_transactions(self) -> int:
        count = self._repository.delete_all()
        logger.info("transactions_deleted", count=count)
        if self._audit_logger:
            self._audit_logger.log_transactions_deleted(count)
        self.load_transactions(self.selected_range)
        return count
