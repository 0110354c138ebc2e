"""
Parser Exceptions

FormatError: bytes or structure cannot be decoded at all
MissingDataError: a required section (e.g. the CSV header) is absent
InvalidDataError: a field is present but semantically invalid
DecodingError: a generic-shape CSV row failed its model's validation
"""

from typing import Optional


class ParseError(Exception):
    """Base exception for parser errors."""
    pass


class FormatError(ParseError):
    """Input could not be decoded."""
    pass


class RecipeReadError(FormatError):
    """Recipe document could not be read as UTF-8 text."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(message)


class MissingDataError(ParseError):
    """A required section is absent."""
    pass


class InvalidDataError(ParseError):
    """A field is present but cannot be interpreted."""
    pass


class DecodingError(ParseError):
    """A CSV row could not be decoded into the requested shape."""

    def __init__(self, message: str, row_number: Optional[int] = None):
        self.row_number = row_number
        super().__init__(message)
