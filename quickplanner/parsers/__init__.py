"""Parsers package: recipe documents and CSV exports."""

from quickplanner.parsers.csv_decoder import (
    TRANSACTION_COLUMNS,
    CSVDecoder,
    DecodeReport,
    RowErrorPolicy,
    SkippedRow,
    encode_transactions,
    parse_csv_row,
)
from quickplanner.parsers.errors import (
    DecodingError,
    FormatError,
    InvalidDataError,
    MissingDataError,
    ParseError,
    RecipeReadError,
)
from quickplanner.parsers.recipe_parser import (
    RecipeParser,
    parse_time_string,
)

__all__ = [
    # CSV
    "TRANSACTION_COLUMNS",
    "CSVDecoder",
    "DecodeReport",
    "RowErrorPolicy",
    "SkippedRow",
    "encode_transactions",
    "parse_csv_row",
    # Recipes
    "RecipeParser",
    "parse_time_string",
    # Exceptions
    "DecodingError",
    "FormatError",
    "InvalidDataError",
    "MissingDataError",
    "ParseError",
    "RecipeReadError",
]
