"""
Error hierarchy for DMM decoding.

Every failure the codec can report is a DMMError. Syntax errors carry the
offset, line and column where the grammar stopped matching.
"""

from __future__ import annotations

from typing import Optional, Tuple


class DMMError(Exception):
    """Base class for all DMM decoding errors."""
    pass


class DMMSyntaxError(DMMError):
    """
    Raised when the input does not match the DMM grammar.

    The parser raises and catches these while backtracking, so line and
    column are only computed when read.
    """

    def __init__(self, expected: str, text: str, position: int):
        self.expected = expected
        self.text = text
        self.position = position
        super().__init__(expected, position)

    @property
    def line(self) -> int:
        return line_and_column(self.text, self.position)[0]

    @property
    def column(self) -> int:
        return line_and_column(self.text, self.position)[1]

    def __str__(self) -> str:
        line, column = line_and_column(self.text, self.position)
        return f"Expected {self.expected} at line {line}, column {column}"


class TrailingCharactersError(DMMSyntaxError):
    """Raised when a well-formed document is followed by unconsumed input."""

    def __init__(self, text: str, position: int, detail: Optional[DMMSyntaxError] = None):
        self.detail = detail
        super().__init__("end of input", text, position)

    def __str__(self) -> str:
        line, column = line_and_column(self.text, self.position)
        message = (
            f"Unexpected trailing characters after the data "
            f"at line {line}, column {column}"
        )
        if self.detail is not None:
            message += f" ({self.detail})"
        return message


class InvalidKeyError(DMMError, ValueError):
    """Raised when a key string or integer is outside the key codec's domain."""
    pass


class ConversionError(DMMError):
    """
    Raised when a syntax tree cannot be converted into the canonical model.

    Properties:
        token: The offending key text
        coords: Grid coordinate the token was found at (None for dictionary keys)
    """

    def __init__(self, message: str, token: str, coords: Optional[Tuple[int, int, int]] = None):
        self.token = token
        self.coords = coords
        super().__init__(message)


class UnknownKeyError(DMMError, LookupError):
    """Raised when a grid cell references a key missing from the dictionary."""

    def __init__(self, key, coords: Tuple[int, int, int]):
        self.key = key
        self.coords = coords
        super().__init__(f"Key '{key}' at {coords} has no dictionary entry")


def line_and_column(text: str, position: int) -> Tuple[int, int]:
    """Return the 1-based (line, column) of an offset into text."""
    line = text.count("\n", 0, position) + 1
    column = position - (text.rfind("\n", 0, position) + 1) + 1
    return line, column
