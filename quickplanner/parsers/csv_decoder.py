"""
CSV Decoder

Decodes CSV exports into models.

Two paths exist:

1. Transactions (list result). Columns are mapped by hand through
   TRANSACTION_COLUMNS. A bad row (unparseable date or amount) is
   skipped and reported; the rest of the file still imports.

2. Any other pydantic model (single-object result). Each row becomes a
   JSON document validated by the model itself. A bad row fails the
   whole decode, and the file must contain exactly one valid row.

DESIGN DECISION: The difference between the two paths is an explicit
RowErrorPolicy instead of an accident of which code path runs. Callers
can ask for either behaviour on either path; the defaults are SKIP for
transactions and FAIL for everything else.

Rows whose column count differs from the header are always dropped.
They are structural noise (trailing summaries, split lines), not data.
"""

import json
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Iterable, Optional, TypeVar

import structlog
from pydantic import BaseModel, Field, ValidationError

from quickplanner.config import get_settings
from quickplanner.models.transaction import (
    UNKNOWN_ACCOUNT,
    UNKNOWN_PAYEE,
    Transaction,
)
from quickplanner.parsers.errors import (
    DecodingError,
    FormatError,
    InvalidDataError,
    MissingDataError,
)


logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


# Transaction field -> CSV column header (exact, case-sensitive)
TRANSACTION_COLUMNS = {
    "date": "Date",
    "amount": "amount",
    "payee": "Payee",
    "category": "category",
    "description": "description",
    "account": "Account",
    "category_group": "Category Group",
}


class RowErrorPolicy(str, Enum):
    """What to do with a row that fails to decode."""
    SKIP = "skip"  # Log it, report it, keep going
    FAIL = "fail"  # Abort the whole decode


class SkippedRow(BaseModel):
    """A data row that did not make it into the result."""

    row_number: int = Field(
        ...,
        ge=1,
        description="1-based data row number (header excluded)"
    )
    reason: str


class DecodeReport(BaseModel):
    """Transactions decoded from one file plus the rows that were dropped."""

    transactions: list[Transaction] = Field(default_factory=list)
    skipped_rows: list[SkippedRow] = Field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped_rows)


def parse_csv_row(row: str) -> list[str]:
    """
    Split one CSV line into trimmed fields.

    Outside quotes a quote opens a quoted run and a comma ends the field.
    Inside quotes a doubled quote is a literal quote and a single quote
    closes the run.
    """
    fields = []
    current = []
    inside_quotes = False
    index = 0
    length = len(row)

    while index < length:
        char = row[index]
        if char == '"':
            if inside_quotes and index + 1 < length and row[index + 1] == '"':
                current.append('"')
                index += 1
            else:
                inside_quotes = not inside_quotes
        elif char == "," and not inside_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        index += 1

    fields.append("".join(current).strip())
    return fields


def _quote_field(value: str) -> str:
    """Quote a field if the row scanner would otherwise alter it."""
    if "\n" in value or "\r" in value:
        raise InvalidDataError(f"Field cannot contain a line break: {value!r}")
    if any(char in value for char in ',"') or value != value.strip():
        return '"' + value.replace('"', '""') + '"'
    return value


def encode_transactions(
    transactions: Iterable[Transaction],
    date_format: Optional[str] = None,
) -> bytes:
    """
    Write transactions in the format `CSVDecoder.decode_transactions` reads.

    Transaction IDs are not written.
    """
    date_format = date_format or get_settings().imports.csv_date_format
    lines = [",".join(_quote_field(column) for column in TRANSACTION_COLUMNS.values())]

    for transaction in transactions:
        values = {
            "date": transaction.date.strftime(date_format),
            "amount": str(transaction.amount),
            "payee": transaction.payee,
            "category": transaction.category,
            "description": transaction.description,
            "account": transaction.account,
            "category_group": transaction.category_group,
        }
        lines.append(",".join(_quote_field(values[field]) for field in TRANSACTION_COLUMNS))

    return ("\n".join(lines) + "\n").encode("utf-8")


class CSVDecoder:
    """
    Decodes CSV bytes into transactions or single pydantic objects.
    """

    def __init__(self, date_format: Optional[str] = None):
        """
        Initialize decoder.

        Args:
            date_format: strptime format of the transaction Date column.
                        If None, taken from the import settings.
        """
        self._date_format = date_format or get_settings().imports.csv_date_format

    def _read_rows(
        self,
        data: bytes,
    ) -> tuple[list[tuple[int, dict[str, str]]], list[SkippedRow]]:
        """
        Decode bytes and map every well-formed data row to {column: value}.

        Returns: (rows as (row_number, mapping), rows dropped for column count)
        """
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            raise FormatError("Invalid CSV format: data is not UTF-8 text")

        lines = text.splitlines()
        if len(lines) < 2:
            raise MissingDataError("Missing header row")

        header = parse_csv_row(lines[0])
        logger.debug("csv_headers_found", headers=header)

        rows = []
        skipped = []
        for row_number, line in enumerate(lines[1:], start=1):
            if not line.strip():
                continue
            columns = parse_csv_row(line)
            if len(columns) != len(header):
                reason = f"incorrect column count: {len(columns)} vs {len(header)}"
                logger.warning("csv_row_skipped", row_number=row_number, reason=reason)
                skipped.append(SkippedRow(row_number=row_number, reason=reason))
                continue
            rows.append((row_number, dict(zip(header, columns))))

        return rows, skipped

    def _transaction_from_row(self, row: dict[str, str]) -> Transaction:
        """
        Map one row to a Transaction.

        Raises:
            InvalidDataError: If the date or amount cannot be parsed
        """
        date_text = row.get(TRANSACTION_COLUMNS["date"], "")
        try:
            booked = datetime.strptime(date_text, self._date_format).date()
        except ValueError:
            raise InvalidDataError(f"Invalid date format: {date_text}")

        amount_text = row.get(TRANSACTION_COLUMNS["amount"], "0")
        try:
            amount = Decimal(amount_text)
        except InvalidOperation:
            raise InvalidDataError(f"Invalid amount: {amount_text}")
        if not amount.is_finite():
            raise InvalidDataError(f"Invalid amount: {amount_text}")

        return Transaction(
            date=booked,
            amount=amount,
            payee=row.get(TRANSACTION_COLUMNS["payee"], UNKNOWN_PAYEE),
            category=row.get(TRANSACTION_COLUMNS["category"], ""),
            description=row.get(TRANSACTION_COLUMNS["description"], ""),
            account=row.get(TRANSACTION_COLUMNS["account"], UNKNOWN_ACCOUNT),
            category_group=row.get(TRANSACTION_COLUMNS["category_group"], ""),
        )

    def decode_transactions_with_report(
        self,
        data: bytes,
        on_row_error: RowErrorPolicy = RowErrorPolicy.SKIP,
    ) -> DecodeReport:
        """
        Decode transactions and report which rows were dropped.

        Raises:
            FormatError: If the data is not UTF-8
            MissingDataError: If there is no data row after the header
            DecodingError: If a row is invalid and the policy is FAIL
        """
        rows, skipped = self._read_rows(data)
        transactions = []

        for row_number, row in rows:
            try:
                transactions.append(self._transaction_from_row(row))
            except InvalidDataError as e:
                if on_row_error == RowErrorPolicy.FAIL:
                    raise DecodingError(f"Row {row_number}: {e}", row_number=row_number)
                logger.warning("csv_row_skipped", row_number=row_number, reason=str(e))
                skipped.append(SkippedRow(row_number=row_number, reason=str(e)))

        skipped.sort(key=lambda item: item.row_number)
        logger.info(
            "transactions_decoded",
            decoded=len(transactions),
            skipped=len(skipped),
        )
        return DecodeReport(transactions=transactions, skipped_rows=skipped)

    def decode_transactions(
        self,
        data: bytes,
        on_row_error: RowErrorPolicy = RowErrorPolicy.SKIP,
    ) -> list[Transaction]:
        """Decode transactions, see `decode_transactions_with_report`."""
        return self.decode_transactions_with_report(data, on_row_error).transactions

    def decode_object(
        self,
        shape: type[ModelT],
        data: bytes,
        on_row_error: RowErrorPolicy = RowErrorPolicy.FAIL,
    ) -> ModelT:
        """
        Decode a CSV holding exactly one object of `shape`.

        Each row is turned into a JSON document and validated by the model.

        Raises:
            FormatError: If the data is not UTF-8
            MissingDataError: If there is no data row after the header
            DecodingError: If a row fails validation and the policy is FAIL
            InvalidDataError: If zero or several rows decoded
        """
        rows, _ = self._read_rows(data)
        results = []

        for row_number, row in rows:
            try:
                results.append(shape.model_validate_json(json.dumps(row)))
            except ValidationError as e:
                if on_row_error == RowErrorPolicy.FAIL:
                    logger.error("csv_row_decode_failed", row_number=row_number, error=str(e))
                    raise DecodingError(f"Row {row_number}: {e}", row_number=row_number)
                logger.warning("csv_row_skipped", row_number=row_number, reason=str(e))

        if len(results) == 1:
            return results[0]
        if not results:
            raise InvalidDataError("No valid rows found in CSV")
        raise InvalidDataError(f"Expected a single object but found {len(results)} rows")

    def decode(
        self,
        shape: type[BaseModel],
        data: bytes,
        on_row_error: Optional[RowErrorPolicy] = None,
    ):
        """
        Decode `data` into `shape`.

        Transaction gives a list of transactions (default policy SKIP).
        Any other model gives a single object (default policy FAIL).
        """
        if issubclass(shape, Transaction):
            return self.decode_transactions(data, on_row_error or RowErrorPolicy.SKIP)
        return self.decode_object(shape, data, on_row_error or RowErrorPolicy.FAIL)
