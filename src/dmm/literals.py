"""
Literal values assigned by var edits.

A var edit's right-hand side is one of:
    - Number:      bare 64-bit signed integer (e.g. 8, -3)
    - Float:       IEEE-754 double (e.g. 123.2, .2e1, 5e+006)
    - Text:        quoted string with escapes resolved; the keyword
                   ``null`` is also kept as Text("null")
    - Path:        hierarchical type path (e.g. /obj/item)
    - ListLiteral: a ``list(...)`` form, kept as its raw source text

The syntax tree and the canonical model share this union, so nothing is
narrowed away between the two stages.
"""

from abc import ABC
from dataclasses import dataclass


class Literal(ABC):
    """Base class for all literal values."""
    pass


@dataclass(frozen=True)
class Number(Literal):
    value: int


@dataclass(frozen=True)
class Float(Literal):
    value: float


@dataclass(frozen=True)
class Text(Literal):
    """A decoded string. Escapes have already been resolved."""
    value: str


@dataclass(frozen=True)
class Path(Literal):
    value: str


@dataclass(frozen=True)
class ListLiteral(Literal):
    """
    A ``list(...)`` literal.

    Elements are validated by the grammar but not modelled; the exact
    source text (including ``list(`` and the closing parenthesis) is kept.
    """
    text: str


NULL_TEXT = Text("null")
