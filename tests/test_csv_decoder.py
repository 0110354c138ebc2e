"""Tests for the CSV decoder and encoder."""

import pytest
from datetime import date
from decimal import Decimal

from pydantic import BaseModel

from quickplanner.models.transaction import Transaction
from quickplanner.parsers import (
    CSVDecoder,
    DecodingError,
    FormatError,
    InvalidDataError,
    MissingDataError,
    RowErrorPolicy,
    encode_transactions,
    parse_csv_row,
)


HEADER = "Date,amount,Payee,category,description,Account,Category Group"


def csv_bytes(*rows):
    return ("\n".join((HEADER,) + rows) + "\n").encode("utf-8")


class Person(BaseModel):
    name: str
    age: int


@pytest.fixture
def decoder():
    return CSVDecoder(date_format="%d/%m/%Y")


class TestParseCsvRow:
    """Tests for the quote-aware row scanner."""

    def test_quoted_comma(self):
        """Test commas inside quotes stay in the field."""
        assert parse_csv_row('"a, b",c') == ["a, b", "c"]

    def test_doubled_quotes(self):
        """Test a doubled quote inside quotes is a literal quote."""
        assert parse_csv_row('"say ""hi"""') == ['say "hi"']

    def test_fields_are_trimmed(self):
        """Test surrounding whitespace is removed."""
        assert parse_csv_row(" a , b ,c") == ["a", "b", "c"]

    def test_empty_fields(self):
        """Test empty fields are kept."""
        assert parse_csv_row("a,,") == ["a", "", ""]


class TestDecodeTransactions:
    """Tests for the transaction path."""

    def test_decode_rows(self, decoder):
        """Test well-formed rows become transactions."""
        data = csv_bytes(
            '15/03/2025,-42.10,Grocer,Food,"Milk, eggs",Chequing,Living',
            "01/03/2025,2500,Employer,Salary,March,Chequing,Income",
        )
        transactions = decoder.decode_transactions(data)

        assert len(transactions) == 2
        first = transactions[0]
        assert first.date == date(2025, 3, 15)
        assert first.amount == Decimal("-42.10")
        assert first.payee == "Grocer"
        assert first.description == "Milk, eggs"
        assert first.category_group == "Living"

    def test_short_rows_are_dropped(self, decoder):
        """Test rows with the wrong column count do not fail the decode."""
        data = csv_bytes(
            "15/03/2025,-42.10,Grocer,Food,Milk,Chequing,Living",
            "16/03/2025,-5",
            "",
        )
        report = decoder.decode_transactions_with_report(data)
        assert len(report.transactions) == 1
        assert report.skipped_count == 1
        assert report.skipped_rows[0].row_number == 2

    def test_bad_values_skipped_by_default(self, decoder):
        """Test an unparseable date or amount only skips that row."""
        data = csv_bytes(
            "2025-03-15,-42.10,Grocer,Food,Milk,Chequing,Living",
            "16/03/2025,lots,Grocer,Food,Milk,Chequing,Living",
            "17/03/2025,-1.00,Grocer,Food,Milk,Chequing,Living",
        )
        report = decoder.decode_transactions_with_report(data)
        assert [t.date for t in report.transactions] == [date(2025, 3, 17)]
        assert [row.row_number for row in report.skipped_rows] == [1, 2]
        assert "Invalid date format" in report.skipped_rows[0].reason

    def test_fail_policy(self, decoder):
        """Test FAIL turns a bad row into DecodingError."""
        data = csv_bytes(
            "15/03/2025,-42.10,Grocer,Food,Milk,Chequing,Living",
            "16/03/2025,NaN,Grocer,Food,Milk,Chequing,Living",
        )
        with pytest.raises(DecodingError) as exc_info:
            decoder.decode_transactions(data, on_row_error=RowErrorPolicy.FAIL)
        assert exc_info.value.row_number == 2

    def test_not_utf8(self, decoder):
        """Test undecodable bytes raise FormatError."""
        with pytest.raises(FormatError):
            decoder.decode_transactions(b"\xff\xfe\x00")

    def test_header_only(self, decoder):
        """Test a file without data rows raises MissingDataError."""
        with pytest.raises(MissingDataError):
            decoder.decode_transactions(HEADER.encode("utf-8"))

    def test_round_trip(self, decoder):
        """Test encoded transactions decode to equal values."""
        originals = [
            Transaction(
                date=date(2025, 3, 15),
                amount=Decimal("-42.10"),
                payee='Joe\'s "Diner", Inc',
                category="Food",
                description="Lunch",
                account="Visa",
                category_group="Living",
            ),
            Transaction(date=date(2025, 2, 1), amount=Decimal("2500")),
        ]
        decoded = decoder.decode_transactions(
            encode_transactions(originals, date_format="%d/%m/%Y")
        )
        assert [t.model_dump(exclude={"id"}) for t in decoded] == [
            t.model_dump(exclude={"id"}) for t in originals
        ]

    def test_encode_rejects_line_breaks(self):
        """Test fields with line breaks cannot be written."""
        transaction = Transaction(
            date=date(2025, 3, 1), amount=Decimal("1"), description="two\nlines"
        )
        with pytest.raises(InvalidDataError):
            encode_transactions([transaction], date_format="%d/%m/%Y")


class TestDecodeObject:
    """Tests for the single-object path."""

    def test_single_row(self, decoder):
        """Test exactly one valid row decodes to one object."""
        person = decoder.decode_object(Person, b"name,age\nAda,36\n")
        assert person == Person(name="Ada", age=36)

    def test_invalid_row_fails_by_default(self, decoder):
        """Test a row failing validation aborts the decode."""
        with pytest.raises(DecodingError) as exc_info:
            decoder.decode_object(Person, b"name,age\nAda,old\n")
        assert exc_info.value.row_number == 1

    def test_no_valid_rows(self, decoder):
        """Test skipping every row leaves nothing to return."""
        with pytest.raises(InvalidDataError, match="No valid rows"):
            decoder.decode_object(
                Person, b"name,age\nAda,old\n", on_row_error=RowErrorPolicy.SKIP
            )

    def test_several_rows_are_ambiguous(self, decoder):
        """Test more than one valid row is rejected."""
        with pytest.raises(InvalidDataError, match="found 2 rows"):
            decoder.decode_object(Person, b"name,age\nAda,36\nAlan,41\n")

    def test_decode_dispatches_on_shape(self, decoder):
        """Test decode returns a list for transactions and one object otherwise."""
        transactions = decoder.decode(
            Transaction, csv_bytes("15/03/2025,-1,A,B,C,D,E")
        )
        assert isinstance(transactions, list)
        assert decoder.decode(Person, b"name,age\nAda,36\n").name == "Ada"
